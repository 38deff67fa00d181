"""One way of running a network function."""

from __future__ import annotations

from dataclasses import dataclass

from .nf_type import NFType


@dataclass(frozen=True)
class Implementation:
    """An implementation of a network function.

    ``cores`` and ``location`` are meaningful only for DPDK implementations.
    """

    type: NFType
    uri: str
    cores: str = ""
    location: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.type, NFType):
            object.__setattr__(self, "type", NFType.parse(self.type))

    def to_json(self) -> dict:
        """Describe the implementation as a JSON-ready dictionary."""
        description = {"uri": self.uri, "type": str(self.type)}
        if self.type is NFType.DPDK:
            description["cores"] = self.cores
            description["location"] = self.location
        return description