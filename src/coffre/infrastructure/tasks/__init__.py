"""
Background task infrastructure.
"""

from coffre.infrastructure.tasks.retention_sweeper import RetentionSweeper
from coffre.infrastructure.tasks.simulation_executor import SimulationExecutor

__all__ = ["SimulationExecutor", "RetentionSweeper"]
