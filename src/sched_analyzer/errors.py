"""Exceptions raised while turning the command line into a configuration."""

from __future__ import annotations

import errno

# sysexits.h EX_USAGE, the status argp exits with on usage errors
EX_USAGE = 64


class ParseError(Exception):
    """Base class for every command-line parsing failure."""

    exit_status: int = EX_USAGE


class UsageError(ParseError):
    """The command line does not match the option catalog."""


class UnknownOptionError(UsageError):
    """An option token that is not in the catalog."""

    def __init__(self, option: str) -> None:
        self.option = option
        super().__init__(f"unrecognized option {option!r}")


class UnexpectedPositionalArgumentError(UsageError):
    """A bare argument; sched-analyzer takes options only."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"unexpected argument {argument!r}")


class UnparseableNumberError(UsageError):
    """A numeric argument in which no digits were found."""

    def __init__(self, option: str, text: str) -> None:
        self.option = option
        self.text = text
        super().__init__(f"{option}: no digits were found in {text!r}")


class InvalidArgumentError(UsageError):
    """An argument that parses but is not an acceptable value."""

    def __init__(self, option: str, text: str, reason: str) -> None:
        self.option = option
        self.text = text
        self.reason = reason
        super().__init__(f"{option}: invalid value {text!r}: {reason}")


class NumberOutOfRangeError(ParseError):
    """A numeric argument that parses but does not fit the target field."""

    exit_status = errno.ERANGE

    def __init__(self, option: str, text: str) -> None:
        self.option = option
        self.text = text
        super().__init__(
            f"Unsupported {option} value {text!r}: numerical result out of range"
        )
