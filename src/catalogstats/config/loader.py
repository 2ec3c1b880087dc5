"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, data.source
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from catalogstats.config.settings import (
    ClassificationConfig,
    DataPathsConfig,
    IngestionConfig,
    LoggingConfig,
    OutputConfig,
    PartitioningConfig,
    PipelineConfig,
    PriceBand,
    ReportConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def config_from_dict(data: dict[str, Any]) -> PipelineConfig:
    """
    Build a PipelineConfig from an already-merged mapping.

    Args:
        data: Parsed configuration mapping.

    Returns:
        Fully validated PipelineConfig instance.

    Raises:
        ValueError: If required keys are missing.
    """
    project = data.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    data_data = data.get("data", {})
    source = data_data.get("source")
    if not source:
        msg = "Config must specify 'data.source'"
        raise ValueError(msg)

    data_paths = DataPathsConfig(
        data_root=Path(data_data.get("root", "./data")),
        source=Path(source),
        store=Path(data_data["store"]) if data_data.get("store") else None,
    )

    ingestion_data = data.get("ingestion", {})
    ingestion = IngestionConfig(**ingestion_data)

    # Classification bands are written as {below: 500, label: Budget}
    classification_data = dict(data.get("classification", {}))
    if "bands" in classification_data:
        classification_data["bands"] = [
            PriceBand(**band) for band in classification_data["bands"]
        ]
    classification = ClassificationConfig(**classification_data)

    partitioning_data = dict(data.get("partitioning", {}))
    if "ranges" in partitioning_data:
        partitioning_data["ranges"] = [
            tuple(bounds) for bounds in partitioning_data["ranges"]
        ]
    partitioning = PartitioningConfig(**partitioning_data)

    report = ReportConfig(**data.get("report", {}))
    logging_config = LoggingConfig(**data.get("logging", {}))

    output_data = data.get("output", {})
    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
    )

    return PipelineConfig(
        project=project,
        data_paths=data_paths,
        ingestion=ingestion,
        classification=classification,
        partitioning=partitioning,
        report=report,
        logging=logging_config,
        output=output,
    )


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> PipelineConfig:
    """
    Load pipeline configuration from YAML file(s).

    Minimal config requires only:
        - project: str
        - data.source: path to the delimited catalog file

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated PipelineConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base.resolve() != config_path.resolve():
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    return config_from_dict(merged)
