"""Tests for SchedAnalyzerConfig."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from sched_analyzer.config import (
    DEFAULT_MAX_SIZE,
    DEFAULT_OUTPUT,
    TASK_COMM_LEN,
    SchedAnalyzerConfig,
    truncate_comm,
)


class TestDefaults:
    """The default configuration."""

    def test_mode_is_system(self) -> None:
        config = SchedAnalyzerConfig()
        assert config.system is True
        assert config.app is False

    def test_output_defaults(self) -> None:
        config = SchedAnalyzerConfig()
        assert config.output == DEFAULT_OUTPUT == "sched-analyzer.perfetto-trace"
        assert config.output_path is None

    def test_max_size_is_250_mib(self) -> None:
        assert SchedAnalyzerConfig().max_size == DEFAULT_MAX_SIZE == 250 * 1024 * 1024

    def test_all_events_disabled(self) -> None:
        config = SchedAnalyzerConfig()
        for name in SchedAnalyzerConfig.EVENT_FIELDS:
            assert getattr(config, name) is False
        assert config.enabled_events() == []

    def test_no_filters(self) -> None:
        config = SchedAnalyzerConfig()
        assert config.pid == 0
        assert config.comm == ""
        assert config.has_filters is False


class TestInvariants:
    """Construction-time validation."""

    def test_both_modes_rejected(self) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            SchedAnalyzerConfig(system=True, app=True)

    def test_no_mode_rejected(self) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            SchedAnalyzerConfig(system=False, app=False)

    def test_empty_output_rejected(self) -> None:
        with pytest.raises(ValueError, match="output"):
            SchedAnalyzerConfig(output="")

    def test_negative_max_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            SchedAnalyzerConfig(max_size=-1)

    def test_pid_beyond_int_rejected(self) -> None:
        with pytest.raises(ValueError, match="pid"):
            SchedAnalyzerConfig(pid=2**31)

    def test_long_comm_rejected(self) -> None:
        with pytest.raises(ValueError, match="comm"):
            SchedAnalyzerConfig(comm="x" * TASK_COMM_LEN)

    def test_frozen(self) -> None:
        config = SchedAnalyzerConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.pid = 1  # type: ignore[misc]

    def test_replace_revalidates(self) -> None:
        with pytest.raises(ValueError):
            SchedAnalyzerConfig().replace(app=True)


class TestDerivedViews:
    """Properties handed to the collection backend."""

    def test_comm_buffer_default_is_all_nul(self) -> None:
        assert SchedAnalyzerConfig().comm_buffer == b"\0" * TASK_COMM_LEN

    def test_comm_buffer_is_nul_terminated(self) -> None:
        buf = SchedAnalyzerConfig(comm="x" * (TASK_COMM_LEN - 1)).comm_buffer
        assert len(buf) == TASK_COMM_LEN
        assert buf[-1:] == b"\0"
        assert buf[:-1] == b"x" * (TASK_COMM_LEN - 1)

    def test_output_file_without_path(self) -> None:
        assert SchedAnalyzerConfig(output="a.trace").output_file == Path("a.trace")

    def test_output_file_with_path(self) -> None:
        config = SchedAnalyzerConfig(output="a.trace", output_path="/tmp/traces")
        assert config.output_file == Path("/tmp/traces/a.trace")

    def test_enabled_events_in_declaration_order(self) -> None:
        config = SchedAnalyzerConfig(load_balance=True, util_avg_cpu=True, softirq=True)
        assert config.enabled_events() == ["util_avg_cpu", "softirq", "load_balance"]

    def test_has_filters(self) -> None:
        assert SchedAnalyzerConfig(pid=42).has_filters is True
        assert SchedAnalyzerConfig(comm="bash").has_filters is True


class TestTruncateComm:
    """Unit tests for truncate_comm()."""

    def test_short_name_unchanged(self) -> None:
        assert truncate_comm("bash") == "bash"

    def test_cut_to_fifteen_bytes(self) -> None:
        assert truncate_comm("kworker/u16:3-events_unbound") == "kworker/u16:3-e"

    def test_cut_is_byte_based(self) -> None:
        # 8 two-byte characters are 16 bytes; the kernel keeps 15 of them.
        result = truncate_comm("é" * 8)
        assert len(result.encode("utf-8", "surrogateescape")) == TASK_COMM_LEN - 1
        assert SchedAnalyzerConfig(comm=result).comm_buffer[:14] == ("é" * 7).encode()
