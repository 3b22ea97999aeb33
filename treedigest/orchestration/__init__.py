"""Workflow orchestration package for treedigest.

This package contains the components that run an indexing pass:
- ResultSink: Lock-guarded, append-only writer for the result log.
- IndexOrchestrator: Central coordinator for the walk, hash and record pipeline.
"""

from treedigest.orchestration.result_sink import ResultSink
from treedigest.orchestration.index_orchestrator import IndexOrchestrator

__all__ = ["ResultSink", "IndexOrchestrator"]
