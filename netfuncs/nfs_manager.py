"""Choosing, starting and stopping the network functions of a graph."""

from __future__ import annotations

import re
import subprocess
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence

from .description import DATABASE_ADDRESS, DATABASE_PORT, fetch_description
from .implementation import Implementation
from .logger import Level, log
from .nf import NetworkFunction
from .nf_type import NFType

MODULE_NAME = "orchestrator"

CHECK_DOCKER = "./compute_controller/scripts/docker/checkDockerRun.sh"
PULL_AND_RUN_DOCKER_NF = "./compute_controller/scripts/docker/pullAndRunNF.sh"
STOP_DOCKER_NF = "./compute_controller/scripts/docker/stopNF.sh"

PULL_AND_RUN_DPDK_NF = "./compute_controller/scripts/dpdk/pullAndRunNF.sh"
STOP_DPDK_NF = "./compute_controller/scripts/dpdk/stopNF.sh"
NUM_MEMORY_CHANNELS = 2

CHECK_KVM = "./compute_controller/scripts/kvm/checkKvmRun.sh"
PULL_AND_RUN_KVM_NF = "./compute_controller/scripts/kvm/pullAndRunNF.sh"
STOP_KVM_NF = "./compute_controller/scripts/kvm/stopNF.sh"

_MASK_BITS = 64
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

Runner = Callable[[Sequence[str]], int]


def _run(command: Sequence[str]) -> int:
    return subprocess.run(list(command), check=False).returncode


class CoreAllocator:
    """Hands out CPU cores to DPDK functions in round-robin order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cores: list[int] = []
        self._next = 0

    @property
    def available(self) -> list[int]:
        """Masks of the cores that can be allocated, lowest first."""
        return list(self._cores)

    def set_core_mask(self, core_mask: int) -> None:
        """Make the cores set in ``core_mask`` the ones to allocate."""
        with self._lock:
            self._cores = [
                1 << bit for bit in range(_MASK_BITS) if core_mask & (1 << bit)
            ]
            self._next = 0
        for mask in self._cores:
            log(Level.DEBUG_INFO, MODULE_NAME, f'Mask of an available core: "{mask}"')

    def allocate(self, cores_required: str | int) -> int:
        """Return the core mask for a function needing ``cores_required`` cores."""
        match = _LEADING_INT.match(str(cores_required))
        if match is None:
            raise ValueError(f"invalid number of cores {cores_required!r}")
        required = int(match.group(1))

        with self._lock:
            if required > 0 and not self._cores:
                raise ValueError("no cores are available for allocation")
            mask = 0
            for _ in range(required):
                mask |= self._cores[self._next]
                self._next = (self._next + 1) % len(self._cores)

        log(
            Level.DEBUG_INFO,
            MODULE_NAME,
            f'The NF requires {required} cores. Its core mask is  "{mask:x}"',
        )
        return mask


default_allocator = CoreAllocator()


def convert_netmask(netmask: str) -> int:
    """Return the prefix length (number of set bits) of a dotted netmask."""
    parts = netmask.strip().split(".")
    if len(parts) != 4:
        raise ValueError(f"invalid netmask {netmask!r}")
    try:
        octets = [int(part) for part in parts]
    except ValueError:
        raise ValueError(f"invalid netmask {netmask!r}") from None
    first, second, third, fourth = octets
    mask = ((first << 24) + (second << 16) + (third << 8) + fourth) & 0xFFFFFFFF
    return bin(mask).count("1")


class NFsManager:
    """The network functions attached to one LSI and their life cycle."""

    def __init__(
        self,
        lsi_id: int = 0,
        *,
        enable_docker: bool = False,
        enable_kvm: bool = False,
        allocator: CoreAllocator | None = None,
        runner: Runner | None = None,
        resolver_host: str = DATABASE_ADDRESS,
        resolver_port: int = DATABASE_PORT,
    ) -> None:
        self.lsi_id = lsi_id
        self.enable_docker = enable_docker
        self.enable_kvm = enable_kvm
        self._allocator = allocator if allocator is not None else default_allocator
        self._runner = runner if runner is not None else _run
        self._resolver_host = resolver_host
        self._resolver_port = resolver_port
        self._nfs: dict[str, NetworkFunction] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._nfs

    def __getitem__(self, name: str) -> NetworkFunction:
        return self._nfs[name]

    def _functions(self) -> Iterable[tuple[str, NetworkFunction]]:
        for name in sorted(self._nfs):
            yield name, self._nfs[name]

    def add(self, nf: NetworkFunction) -> None:
        """Register a network function, replacing one with the same name."""
        self._nfs[nf.name] = nf

    def retrieve_description(self, name: str) -> NetworkFunction:
        """Fetch the description of ``name`` from the name resolver and keep it."""
        nf = fetch_description(name, self._resolver_host, self._resolver_port)
        self.add(nf)
        return nf

    def _execute(self, command: Sequence[str]) -> int:
        log(Level.DEBUG_INFO, MODULE_NAME, f'Executing command "{" ".join(command)}"')
        return self._runner(command)

    def _check(self, script: str) -> bool:
        result = self._runner([script])
        log(Level.DEBUG, MODULE_NAME, f"Script returned: {result}")
        return result > 0

    def _select(self, desired: NFType) -> None:
        for name, nf in self._functions():
            if nf.selected is not None:
                continue
            chosen = next(
                (impl for impl in nf.implementations if impl.type is desired), None
            )
            if chosen is not None:
                nf.select(chosen)
                log(
                    Level.DEBUG_INFO,
                    MODULE_NAME,
                    f'{desired} implementation has been selected for NF "{name}".',
                )

    def _all_selected(self, last_call: bool) -> bool:
        result = True
        for name, nf in self._functions():
            if nf.selected is None:
                if last_call:
                    log(Level.WARNING, MODULE_NAME, f'The NF "{name}" cannot be run.')
                result = False
        return result

    def select_implementations(self) -> bool:
        """Choose an implementation for every function: Docker, then DPDK, then KVM.

        Returns True when every function has an implementation.
        """
        if self.enable_docker:
            if self._check(CHECK_DOCKER):
                log(
                    Level.DEBUG_INFO,
                    MODULE_NAME,
                    "Docker deamon is running. Select Docker implementation if exists.",
                )
                self._select(NFType.DOCKER)
                if self._all_selected(False):
                    return True
            else:
                log(Level.DEBUG_INFO, MODULE_NAME, "Docker deamon is not running.")

        self._select(NFType.DPDK)
        if self._all_selected(False):
            return True

        if self.enable_kvm:
            if self._check(CHECK_KVM):
                log(
                    Level.DEBUG_INFO,
                    MODULE_NAME,
                    "KVM is running. Select KVM implementation if exists.",
                )
                self._select(NFType.KVM)
                return self._all_selected(True)
            log(Level.DEBUG_INFO, MODULE_NAME, "KVM  is not running.")

        return False

    def _selected(self, name: str) -> tuple[NetworkFunction, Implementation]:
        nf = self._nfs[name]
        if nf.selected is None:
            raise RuntimeError(f'no implementation selected for NF "{name}"')
        return nf, nf.selected

    def get_nf_type(self, name: str) -> NFType:
        """Return the type of the implementation selected for ``name``."""
        return self._selected(name)[1].type

    def _port_names(self, name: str, number_of_ports: int) -> list[str]:
        return [f"{self.lsi_id}_{name}_{i}" for i in range(1, number_of_ports + 1)]

    def _start_command(
        self,
        name: str,
        impl: Implementation,
        number_of_ports: int,
        ipv4_requirements: Mapping[int, tuple[str, str]],
        eth_requirements: Mapping[int, str],
    ) -> list[str]:
        lsi = str(self.lsi_id)
        ports = range(1, number_of_ports + 1)
        if impl.type is NFType.DOCKER:
            command = [PULL_AND_RUN_DOCKER_NF, lsi, name, impl.uri, str(number_of_ports)]
            command += self._port_names(name, number_of_ports)
            for port in ports:
                if port in ipv4_requirements:
                    address, netmask = ipv4_requirements[port]
                    command.append(f"{address}/{convert_netmask(netmask)}")
                else:
                    command.append("0")
            command += [eth_requirements.get(port, "0") for port in ports]
            return command
        if impl.type is NFType.DPDK:
            uri = ("file://" if impl.location == "local" else "") + impl.uri
            command = [
                PULL_AND_RUN_DPDK_NF,
                lsi,
                name,
                uri,
                str(self._allocator.allocate(impl.cores)),
                str(NUM_MEMORY_CHANNELS),
                str(number_of_ports),
            ]
            return command + self._port_names(name, number_of_ports)
        command = [PULL_AND_RUN_KVM_NF, lsi, name, impl.uri, str(number_of_ports)]
        return command + self._port_names(name, number_of_ports)

    def start_nf(
        self,
        name: str,
        number_of_ports: int,
        ipv4_requirements: Mapping[int, tuple[str, str]] | None = None,
        eth_requirements: Mapping[int, str] | None = None,
    ) -> bool:
        """Start ``name`` with the given number of ports; return True on success.

        Raises KeyError for an unknown function.
        """
        log(Level.DEBUG_INFO, MODULE_NAME, f'Starting the NF "{name}"')
        if name not in self._nfs:
            log(Level.WARNING, MODULE_NAME, f'Unknown NF with name "{name}"')
            raise KeyError(name)
        nf, impl = self._selected(name)

        command = self._start_command(
            name, impl, number_of_ports, ipv4_requirements or {}, eth_requirements or {}
        )
        if self._execute(command) == 0:
            log(Level.ERROR, MODULE_NAME, f'An error occurred while starting the NF "{name}"')
            return False

        nf.running = True
        return True

    def stop_nf(self, name: str) -> bool:
        """Stop ``name``; return True on success."""
        log(Level.DEBUG_INFO, MODULE_NAME, f'Stopping the NF "{name}"')
        if name not in self._nfs:
            log(Level.WARNING, MODULE_NAME, f'Unknown NF with name "{name}"')
            return False
        nf, impl = self._selected(name)

        script = {
            NFType.DOCKER: STOP_DOCKER_NF,
            NFType.DPDK: STOP_DPDK_NF,
            NFType.KVM: STOP_KVM_NF,
        }[impl.type]
        if self._execute([script, str(self.lsi_id), name]) == 0:
            log(Level.ERROR, MODULE_NAME, f'An error occurred while stopping the NF "{name}"')
            return False

        nf.running = False
        return True

    def stop_all(self) -> dict[str, bool]:
        """Stop every function; return the outcome for each name."""
        return {name: self.stop_nf(name) for name, _ in self._functions()}

    def info_lines(self) -> list[str]:
        """Describe each function: name, selected type and status."""
        lines = []
        for name, nf in self._functions():
            kind = str(nf.selected.type) if nf.selected is not None else "none"
            padding = "\t" if len(name) <= 7 else ""
            status = "running" if nf.running else "stopped"
            lines.append(
                f"\t\tName: '{name}'{padding}\t-\tType: {kind}\t-\tStatus: {status}"
            )
        return lines