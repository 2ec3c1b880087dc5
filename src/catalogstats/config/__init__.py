"""
Configuration management with typed Pydantic models.

Provides YAML-based configuration loading with environment
variable interpolation and base-file inheritance.
"""

from catalogstats.config.loader import config_from_dict, load_config
from catalogstats.config.settings import (
    ClassificationConfig,
    DataPathsConfig,
    IngestionConfig,
    LoggingConfig,
    OutputFormat,
    PartitioningConfig,
    PipelineConfig,
    PriceBand,
    ReportConfig,
    WriteMode,
)

__all__ = [
    "ClassificationConfig",
    "DataPathsConfig",
    "IngestionConfig",
    "LoggingConfig",
    "OutputFormat",
    "PartitioningConfig",
    "PipelineConfig",
    "PriceBand",
    "ReportConfig",
    "WriteMode",
    "config_from_dict",
    "load_config",
]
