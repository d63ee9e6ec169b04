"""sched-analyzer: scheduler tracing configuration."""

__version__ = "0.1"

from .config import SchedAnalyzerConfig  # noqa: E402
from .errors import ParseError  # noqa: E402

__all__ = ["ParseError", "SchedAnalyzerConfig", "__version__"]
