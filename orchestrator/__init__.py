"""
Pipeline Integration (In-Process Runtime Wiring)

Composes holder preparation, allocation and commitment into a single
runnable flow per network, plus snapshot/distribution file IO.

Public API:
- AirdropPipeline: Main pipeline runner class
- PipelineResult: Result of a pipeline run for one network
- build_distribution: Assemble the published document
- check_distribution: Re-verify every claim against the root
- create_pipeline: Pipeline over the default configuration
"""

from orchestrator.pipeline import (
    AirdropPipeline,
    PipelineResult,
    build_distribution,
    check_distribution,
    create_pipeline,
)


__all__ = [
    "AirdropPipeline",
    "PipelineResult",
    "build_distribution",
    "check_distribution",
    "create_pipeline",
]
