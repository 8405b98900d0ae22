"""Pipeline orchestration module.

Provides the YAML analysis configuration, structured run logging, the
in-memory stage executor and the end-to-end retention pipeline.

Example Usage
-------------
>>> from erythroid_ir.pipeline import (
...     AnalysisConfig,
...     PipelineLogger,
...     RetentionPipeline,
... )
>>> config = AnalysisConfig.from_yaml("analysis.yaml")
>>> logger = PipelineLogger("out/logs")
>>> logger.setup()
>>> pipeline = RetentionPipeline(config, tester=tester, logger=logger)
>>> result = pipeline.run(dataset, coverage=coverage)
>>> pipeline.write_outputs(result, "out/")
"""

# Configuration
from .config import AnalysisConfig, OutputConfig

# Logging
from .logger import (
    ColoredFormatter,
    PipelineLogger,
)

# Execution
from .executor import InMemoryExecutor, StageSpec
from .runner import PipelineResult, RetentionPipeline

__all__ = [
    # Config
    "AnalysisConfig",
    "OutputConfig",
    # Logging
    "ColoredFormatter",
    "PipelineLogger",
    # Execution
    "InMemoryExecutor",
    "StageSpec",
    "PipelineResult",
    "RetentionPipeline",
]
