"""
Simulation executor interface.
"""

from abc import ABC, abstractmethod


class ISimulationExecutor(ABC):
    """Runs simulation executions off the request path."""

    @abstractmethod
    def submit(self, simulation_id: str) -> None:
        """Queue a simulation for execution; returns immediately."""
