"""Engine Layer - Core Orchestration and Pipeline Management

This module provides the core engine layer for the inmate search pipeline:
- SearchOrchestrator: Main entry point for search execution
- get_default_orchestrator: Shared instance behind the module-level search()
- PipelineTracker: Per-request state machine and timing
- Ok / Err / run_stage: Typed stage results
- RetryStrategy: Retry/backoff decisions
"""

from .orchestrator import SearchOrchestrator, get_default_orchestrator, search
from .result import Err, Ok, StageResult, run_stage
from .state import PipelineState, PipelineTracker
from .strategy import RetryStrategy

__all__ = [
    "SearchOrchestrator",
    "search",
    "get_default_orchestrator",
    "Ok",
    "Err",
    "StageResult",
    "run_stage",
    "PipelineState",
    "PipelineTracker",
    "RetryStrategy",
]
