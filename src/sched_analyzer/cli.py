"""Command-line interface for sched-analyzer.

Builds an :mod:`argparse` parser from the option catalog and folds the
command line, option by option, into a :class:`SchedAnalyzerConfig`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

from . import __version__
from .config import SchedAnalyzerConfig
from .errors import (
    InvalidArgumentError,
    ParseError,
    UnexpectedPositionalArgumentError,
    UnknownOptionError,
    UsageError,
)
from .options import OPTIONS, Option, apply_option

log = logging.getLogger(__name__)

PROG = "sched-analyzer"

DESCRIPTION = "Extract scheduler data using BPF and emit them into perfetto as track events"

BUG_ADDRESS = "<qyousef@layalina.io>"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr, at DEBUG if *verbose* else INFO."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


class SchedAnalyzerArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises :class:`UsageError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


class _ApplyOption(argparse.Action):
    """Apply one catalog option to the configuration held by the namespace."""

    def __init__(self, option_strings: list[str], entry: Option, **kwargs: Any) -> None:
        self.entry = entry
        super().__init__(option_strings, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        arg = values if self.entry.takes_argument else None
        try:
            namespace.config = apply_option(namespace.config, self.entry.name, arg)
        except ValueError as e:
            raise InvalidArgumentError(self.entry.name, arg or "", str(e)) from e
        log.debug("applied %s%s", self.entry.flag, "" if arg is None else f" {arg!r}")


def build_parser() -> SchedAnalyzerArgumentParser:
    """Build the argument parser for every option in the catalog."""
    parser = SchedAnalyzerArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        epilog=f"Report bugs to {BUG_ADDRESS}.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    for entry in OPTIONS:
        parser.add_argument(
            entry.flag,
            action=_ApplyOption,
            entry=entry,
            nargs=None if entry.takes_argument else 0,
            metavar=entry.metavar,
            dest=argparse.SUPPRESS,
            default=argparse.SUPPRESS,
            help=entry.help,
        )
    return parser


_SHORT_FLAGS = ("-h", "-V")
_LONG_FLAGS = ("--help", "--version", *(entry.flag for entry in OPTIONS))
OPTIONS_BY_FLAG: dict[str, Option] = {entry.flag: entry for entry in OPTIONS}


def _resolve_flag(name: str) -> str | None:
    """Expand a long option to its full flag.

    Returns None if nothing matches, and *name* unchanged if it is an
    ambiguous prefix so argparse reports the ambiguity in place.
    """
    if name in _LONG_FLAGS:
        return name
    matches = [flag for flag in _LONG_FLAGS if flag.startswith(name)]
    if not matches:
        return None
    if len(matches) == 1:
        return matches[0]
    return name


def _prepare_argv(argv: list[str]) -> tuple[list[str], ParseError | None]:
    """Walk *argv* the way getopt does, ahead of argparse.

    Returns the tokens up to the first one argparse cannot place, and the
    error for that token (or None). The value of an option that takes an
    argument is bound to it as ``--opt=value`` whatever the value looks
    like, so ``--pid -0x10`` reaches the option instead of being taken
    for an option itself.
    """
    tokens: list[str] = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            # Everything after "--" is positional.
            tokens.append(token)
            if i + 1 < len(argv):
                return tokens, UnexpectedPositionalArgumentError(argv[i + 1])
            break
        if token == "-" or not token.startswith("-"):
            return tokens, UnexpectedPositionalArgumentError(token)

        name, sep, _ = token.partition("=")
        if token.startswith("--"):
            flag = _resolve_flag(name)
        else:
            flag = token if token in _SHORT_FLAGS else None
        if flag is None:
            return tokens, UnknownOptionError(name)

        entry = OPTIONS_BY_FLAG.get(flag)
        if entry is not None and entry.takes_argument and not sep and i + 1 < len(argv):
            tokens.append(f"{flag}={argv[i + 1]}")
            i += 2
            continue
        tokens.append(token)
        i += 1
    return tokens, None


def parse_args(argv: Sequence[str] | None = None) -> SchedAnalyzerConfig:
    """Parse command-line arguments and return a SchedAnalyzerConfig.

    Options are applied left to right on top of the defaults; a later
    option overrides an earlier one wherever they touch the same field.
    Parsing stops at the first invalid token or argument.

    Raises:
        ParseError: On the first invalid option or argument. No partial
            configuration is returned.
    """
    if argv is None:
        argv = sys.argv[1:]

    tokens, pending = _prepare_argv(list(argv))

    parser = build_parser()
    namespace = argparse.Namespace(config=SchedAnalyzerConfig())
    namespace, extras = parser.parse_known_args(tokens, namespace)
    leftover = [token for token in extras if token != "--"]
    if leftover:
        raise UsageError(f"unrecognized arguments: {' '.join(leftover)}")
    if pending is not None:
        raise pending

    config: SchedAnalyzerConfig = namespace.config
    return config


def describe(config: SchedAnalyzerConfig) -> str:
    """Return a one-line human summary of *config*."""
    mode = "system" if config.system else "app"
    events = ", ".join(config.enabled_events()) or "none"
    parts = [
        f"mode={mode}",
        f"output={config.output_file}",
        f"max_size={config.max_size // 1024}KiB",
        f"events=[{events}]",
    ]
    if not config.has_filters:
        parts.append("filters=none")
    if config.pid:
        parts.append(f"pid={config.pid}")
    if config.comm:
        parts.append(f"comm={config.comm!r}")
    return " ".join(parts)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the sched-analyzer CLI."""
    setup_logging()

    try:
        config = parse_args(argv)
    except ParseError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        build_parser().print_usage(sys.stderr)
        print(f"Try '{PROG} --help' for more information.", file=sys.stderr)
        return e.exit_status

    log.info("Configuration: %s", describe(config))
    log.debug("Full configuration: %r", config)
    return 0
