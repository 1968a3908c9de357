"""
Spinball Simulation - Trajectory Visualization

Matplotlib plots of flight and ground-phase results, rendered with the
non-interactive Agg backend for batch use.
"""

import logging
import os
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
import numpy as np

from .sampler import SimulationResult

logger = logging.getLogger(__name__)

PHASE_COLORS = {
    'bounce': '#d62728',
    'roll': '#2ca02c',
    'rest': 'black',
}


def configure_plot_style() -> None:
    """Configure matplotlib defaults for the trajectory plots."""
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'figure.dpi': 100,
        'savefig.dpi': 150,
        'axes.grid': True,
        'axes.axisbelow': True,
        'grid.alpha': 0.3,
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'lines.linewidth': 1.8,
    })


def plot_flight(flight: SimulationResult, output_dir: str) -> str:
    """Plot flight height and lateral offset vs downrange distance.

    Args:
        flight: Flight SimulationResult
        output_dir: Directory to save the plot

    Returns:
        Path to saved plot file
    """
    pos = flight.positions()
    fig, (ax_side, ax_top) = plt.subplots(2, 1, figsize=(10, 8), sharex=True,
                                          gridspec_kw={'height_ratios': [2, 1]})

    ax_side.plot(pos[:, 0], pos[:, 1], 'b-', label='Trajectory')
    apex_idx = int(np.argmax(pos[:, 1]))
    ax_side.scatter([pos[apex_idx, 0]], [pos[apex_idx, 1]], c='darkorange', s=70,
                    marker='^', zorder=5, label=f'Apex ({pos[apex_idx, 1]:.1f} m)')
    ax_side.scatter([pos[-1, 0]], [pos[-1, 1]], c='red', s=80, marker='x', zorder=5,
                    label=f'Landing ({pos[-1, 0]:.1f} m)')
    ax_side.set_ylabel('Height (m)')
    ax_side.set_title('Flight Trajectory', fontweight='bold')
    ax_side.legend(loc='upper right')

    ax_top.plot(pos[:, 0], pos[:, 2], 'g-')
    ax_top.set_xlabel('Downrange x (m)')
    ax_top.set_ylabel('Lateral z (m)')

    plt.tight_layout()
    path = os.path.join(output_dir, '01_flight_trajectory.png')
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


def plot_roll(roll: SimulationResult, output_dir: str) -> str:
    """Plot ground-phase speed and spin vs time, coloured by phase."""
    times = roll.times()
    speeds = np.linalg.norm(roll.velocities(), axis=1)
    spins = np.array([s.spin for s in roll])
    phases = [s.phase for s in roll]

    fig, (ax_speed, ax_spin) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    ax_speed.plot(times, speeds, color='gray', linewidth=1.0, zorder=1)
    for phase, color in PHASE_COLORS.items():
        mask = np.array([p == phase for p in phases])
        if mask.any():
            ax_speed.scatter(times[mask], speeds[mask], c=color, s=8, zorder=2, label=phase)
    ax_speed.set_ylabel('Speed (m/s)')
    ax_speed.set_title('Bounce and Roll', fontweight='bold')
    ax_speed.legend(loc='upper right')

    ax_spin.plot(times, spins, 'm-')
    ax_spin.set_xlabel('Time (s)')
    ax_spin.set_ylabel('Spin (rad/s)')

    plt.tight_layout()
    path = os.path.join(output_dir, '02_roll_profile.png')
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


def generate_all_plots(output_dir: str, flight: Optional[SimulationResult] = None,
                       roll: Optional[SimulationResult] = None) -> List[str]:
    """
    Render every available plot into output_dir.

    Returns:
        Paths of the files written
    """
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()

    paths = []
    if flight is not None and flight.count > 0:
        paths.append(plot_flight(flight, output_dir))
    if roll is not None and roll.count > 0:
        paths.append(plot_roll(roll, output_dir))

    for path in paths:
        logger.info(f"Saved plot: {path}")
    return paths
