"""
Generation module for Listing Studio.

Provides the orchestrator and the state it keeps between requests.
"""

from .state import (
    GenerationPhase,
    GenerationRun,
    GenerationState,
    StepOutcome,
    StepStatus,
)
from .orchestrator import CompositionOrchestrator

__all__ = [
    "GenerationPhase",
    "GenerationRun",
    "GenerationState",
    "StepOutcome",
    "StepStatus",
    "CompositionOrchestrator",
]
