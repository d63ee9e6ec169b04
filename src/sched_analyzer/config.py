"""Configuration for sched-analyzer.

The configuration is built once from the command line and then handed,
read-only, to the BPF collection and perfetto emission stages.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

# Default perfetto trace filename
DEFAULT_OUTPUT = "sched-analyzer.perfetto-trace"

# Default maximum trace size in bytes (250 MiB)
DEFAULT_MAX_SIZE = 250 * 1024 * 1024

# Kernel task name buffer size, including the trailing NUL
TASK_COMM_LEN = 16

# Bounds of the C types the collection backend stores these values in
U64_MAX = 2**64 - 1
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


def encode_comm(comm: str) -> bytes:
    """Encode a task name the way it appears in the kernel's comm buffer."""
    return comm.encode("utf-8", "surrogateescape")


def truncate_comm(comm: str) -> str:
    """Cut *comm* to the usable part of a ``TASK_COMM_LEN`` buffer.

    The cut is made on bytes, exactly where the kernel truncates task
    names, so a long filter still matches the truncated comm of the
    task it was meant for.
    """
    raw = encode_comm(comm)[: TASK_COMM_LEN - 1]
    return raw.decode("utf-8", "surrogateescape")


@dataclass(frozen=True)
class SchedAnalyzerConfig:
    """Validated run configuration for sched-analyzer."""

    EVENT_FIELDS: ClassVar[tuple[str, ...]] = (
        "load_avg_cpu",
        "load_avg_task",
        "runnable_avg_cpu",
        "runnable_avg_task",
        "util_avg_cpu",
        "util_avg_task",
        "util_avg_rt",
        "util_avg_dl",
        "util_avg_irq",
        "util_avg_thermal",
        "util_est_cpu",
        "util_est_task",
        "cpu_nr_running",
        "cpu_freq",
        "cpu_idle",
        "softirq",
        "sched_switch",
        "load_balance",
    )

    # Collect system wide data through traced (mutually exclusive with app)
    system: bool = True

    # Collect only data generated by this process, standalone
    app: bool = False

    # Filename of the perfetto-trace file to produce
    output: str = DEFAULT_OUTPUT

    # Directory to store the trace in (None = current working directory)
    output_path: str | None = None

    # Maximum size of the trace file in bytes
    max_size: int = DEFAULT_MAX_SIZE

    # PELT signals
    load_avg_cpu: bool = False
    load_avg_task: bool = False
    runnable_avg_cpu: bool = False
    runnable_avg_task: bool = False
    util_avg_cpu: bool = False
    util_avg_task: bool = False
    util_avg_rt: bool = False
    util_avg_dl: bool = False
    util_avg_irq: bool = False
    util_avg_thermal: bool = False
    util_est_cpu: bool = False
    util_est_task: bool = False

    # Other scheduler events
    cpu_nr_running: bool = False
    cpu_freq: bool = False
    cpu_idle: bool = False
    softirq: bool = False
    sched_switch: bool = False
    load_balance: bool = False

    # Only collect data for this pid (0 = no pid filter)
    pid: int = 0

    # Only collect data for tasks whose comm contains this ("" = no filter)
    comm: str = ""

    def __post_init__(self) -> None:
        if self.system == self.app:
            raise ValueError(
                "exactly one of system and app must be set "
                f"(system={self.system}, app={self.app})"
            )
        if not self.output:
            raise ValueError("output filename must not be empty")
        if not (0 <= self.max_size <= U64_MAX):
            raise ValueError(f"max_size {self.max_size} out of range [0, {U64_MAX}]")
        if not (INT_MIN <= self.pid <= INT_MAX):
            raise ValueError(f"pid {self.pid} out of range [{INT_MIN}, {INT_MAX}]")
        if len(encode_comm(self.comm)) >= TASK_COMM_LEN:
            raise ValueError(
                f"comm {self.comm!r} does not fit in {TASK_COMM_LEN - 1} bytes"
            )

    @property
    def comm_buffer(self) -> bytes:
        """The comm filter as a NUL-padded ``TASK_COMM_LEN`` byte buffer."""
        return encode_comm(self.comm).ljust(TASK_COMM_LEN, b"\0")

    @property
    def output_file(self) -> Path:
        """Where the trace is written, relative to the cwd if no path was given."""
        if self.output_path is None:
            return Path(self.output)
        return Path(self.output_path) / self.output

    @property
    def has_filters(self) -> bool:
        """True if collection is restricted to a pid or a comm substring."""
        return self.pid != 0 or self.comm != ""

    def enabled_events(self) -> list[str]:
        """Return the names of the enabled event toggles, in declaration order."""
        return [name for name in self.EVENT_FIELDS if getattr(self, name)]

    def replace(self, **changes: object) -> SchedAnalyzerConfig:
        """Return a copy of this config with *changes* applied and re-validated."""
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]
