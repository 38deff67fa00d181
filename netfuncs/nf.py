"""A network function and its possible implementations."""

from __future__ import annotations

from dataclasses import dataclass, field

from .implementation import Implementation
from .logger import Level, log

_MODULE_NAME = "orchestrator"


@dataclass
class NetworkFunction:
    """A named network function with its implementations and run state."""

    name: str
    implementations: list[Implementation] = field(default_factory=list)
    selected: Implementation | None = None
    running: bool = False

    def add_implementation(self, implementation: Implementation) -> None:
        """Append an available implementation."""
        self.implementations.append(implementation)

    def select(self, implementation: Implementation) -> None:
        """Choose the implementation that will be used to run the function."""
        self.selected = implementation
        log(
            Level.DEBUG_INFO,
            _MODULE_NAME,
            f'Selected a "{implementation.type}" implementation for NF "{self.name}"',
        )

    def to_json(self) -> dict:
        """Describe the function and all its implementations."""
        return {
            "name": self.name,
            "implementations": [impl.to_json() for impl in self.implementations],
        }