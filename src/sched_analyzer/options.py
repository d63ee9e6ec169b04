"""The sched-analyzer option catalog.

Each :class:`Option` keeps everything about one command-line option in a
single entry: its name, its argument metavar (``None`` for flags), its
help text and a pure function that derives the new configuration from the
current one and the argument text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .config import INT_MAX, INT_MIN, U64_MAX, SchedAnalyzerConfig, truncate_comm
from .errors import InvalidArgumentError, NumberOutOfRangeError
from .intparse import parse_bounded, parse_c_long

ApplyFn = Callable[[SchedAnalyzerConfig, str], SchedAnalyzerConfig]


@dataclass(frozen=True)
class Option:
    """A single entry of the option catalog."""

    name: str
    metavar: str | None
    help: str
    apply: ApplyFn

    @property
    def takes_argument(self) -> bool:
        return self.metavar is not None

    @property
    def flag(self) -> str:
        return f"--{self.name}"


def _enable(*fields: str) -> ApplyFn:
    """Build a mutation that turns on every field in *fields*."""
    changes = dict.fromkeys(fields, True)

    def apply(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
        return config.replace(**changes)

    return apply


def _set_system(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    return config.replace(system=True, app=False)


def _set_app(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    return config.replace(system=False, app=True)


def _set_output(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    if not arg:
        raise InvalidArgumentError("output", arg, "filename must not be empty")
    return config.replace(output=arg)


def _set_output_path(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    return config.replace(output_path=arg)


def _set_max_size(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    kib = parse_c_long("max_size", arg)
    # Stored in bytes; the backend keeps it in a u64.
    if not (0 <= kib * 1024 <= U64_MAX):
        raise NumberOutOfRangeError("max_size", arg)
    return config.replace(max_size=kib * 1024)


def _set_pid(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    return config.replace(pid=parse_bounded("pid", arg, INT_MIN, INT_MAX))


def _set_comm(config: SchedAnalyzerConfig, arg: str) -> SchedAnalyzerConfig:
    return config.replace(comm=truncate_comm(arg))


OPTIONS: tuple[Option, ...] = (
    # perfetto modes
    Option(
        "system",
        None,
        "Collect system wide data, requires traced and traced_probes to be running (default).",
        _set_system,
    ),
    Option(
        "app",
        None,
        "Collect only data generated by this app. "
        "Runs standalone without external dependencies on traced.",
        _set_app,
    ),
    # controls
    Option("output", "FILE", "Filename of the perfetto-trace file to produce.", _set_output),
    Option(
        "output_path",
        "PATH",
        "Path to store perfetto-trace. PWD by default for perfetto.",
        _set_output_path,
    ),
    Option(
        "max_size",
        "SIZE(KiB)",
        "Maximum size of perfetto file to produce, 250MiB by default.",
        _set_max_size,
    ),
    # events
    Option(
        "load_avg",
        None,
        "Collect load_avg for CPU and tasks.",
        _enable("load_avg_cpu", "load_avg_task"),
    ),
    # Expands to load_avg_cpu rather than runnable_avg_cpu; kept as shipped.
    Option(
        "runnable_avg",
        None,
        "Collect runnable_avg for CPU and tasks.",
        _enable("load_avg_cpu", "runnable_avg_task"),
    ),
    Option(
        "util_avg",
        None,
        "Collect util_avg for CPU, tasks, irq, dl and rt.",
        _enable(
            "util_avg_cpu",
            "util_avg_task",
            "util_avg_rt",
            "util_avg_dl",
            "util_avg_irq",
            "util_avg_thermal",
        ),
    ),
    Option("load_avg_cpu", None, "Collect load_avg for CPU.", _enable("load_avg_cpu")),
    Option(
        "runnable_avg_cpu",
        None,
        "Collect runnable_avg for CPU.",
        _enable("runnable_avg_cpu"),
    ),
    Option("util_avg_cpu", None, "Collect util_avg for CPU.", _enable("util_avg_cpu")),
    Option("load_avg_task", None, "Collect load_avg for tasks.", _enable("load_avg_task")),
    Option(
        "runnable_avg_task",
        None,
        "Collect runnable_avg for tasks.",
        _enable("runnable_avg_task"),
    ),
    Option("util_avg_task", None, "Collect util_avg for tasks.", _enable("util_avg_task")),
    Option("util_avg_rt", None, "Collect util_avg for rt.", _enable("util_avg_rt")),
    Option("util_avg_dl", None, "Collect util_avg for dl.", _enable("util_avg_dl")),
    Option("util_avg_irq", None, "Collect util_avg for irq.", _enable("util_avg_irq")),
    Option(
        "util_avg_thermal",
        None,
        "Collect util_avg for thermal pressure.",
        _enable("util_avg_thermal"),
    ),
    Option(
        "util_est",
        None,
        "Collect util_est for CPU and tasks.",
        _enable("util_est_cpu", "util_est_task"),
    ),
    Option("util_est_cpu", None, "Collect util_est for CPU.", _enable("util_est_cpu")),
    Option("util_est_task", None, "Collect util_est for tasks.", _enable("util_est_task")),
    Option(
        "cpu_nr_running",
        None,
        "Collect nr_running tasks for each CPU.",
        _enable("cpu_nr_running"),
    ),
    Option(
        "load_balance",
        None,
        "Collect load balance related info.",
        _enable("load_balance"),
    ),
    # filters
    Option("pid", "PID", "Collect data for task match pid only.", _set_pid),
    Option("comm", "COMM", "Collect data for tasks that contain comm only.", _set_comm),
)

OPTIONS_BY_NAME: dict[str, Option] = {opt.name: opt for opt in OPTIONS}


def apply_option(
    config: SchedAnalyzerConfig, name: str, arg: str | None = None
) -> SchedAnalyzerConfig:
    """Apply catalog option *name* to *config* and return the new configuration.

    Raises:
        KeyError: If *name* is not in the catalog.
        ParseError: If the argument is rejected.
    """
    option = OPTIONS_BY_NAME[name]
    # Flags ignore any attached text.
    if not option.takes_argument:
        return option.apply(config, "")
    if arg is None:
        raise InvalidArgumentError(name, "", "expected one argument")
    return option.apply(config, arg)
