"""Terminal display package for treedigest.

- ProgressReporter: Rich progress bars for discovery and hashing, error lines
  and the end-of-run summary table.
"""

from .progress_reporter import ProgressReporter, ReporterState

__all__ = ["ProgressReporter", "ReporterState"]
