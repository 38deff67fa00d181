"""Kinds of network function implementations."""

from __future__ import annotations

from enum import Enum


class NFType(Enum):
    """The technology a network function implementation runs on."""

    DPDK = "dpdk"
    DOCKER = "docker"
    KVM = "kvm"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "NFType":
        """Return the type named by ``text``; raise ValueError if there is none."""
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"invalid implementation type {text!r}") from None


def is_valid(text: str) -> bool:
    """Tell whether ``text`` names a known implementation type."""
    return text in {member.value for member in NFType}