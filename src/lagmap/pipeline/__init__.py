"""Pipeline modules.

- processor: Chunked grid analysis
- orchestrator: Logging setup and run entry point
"""

from lagmap.pipeline.processor import GridAnalysisProcessor, AnalysisResult, ProbabilityCurve
from lagmap.pipeline.orchestrator import AnalysisOrchestrator

__all__ = [
    "GridAnalysisProcessor",
    "AnalysisResult",
    "ProbabilityCurve",
    "AnalysisOrchestrator",
]
