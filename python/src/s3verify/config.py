"""Configuration loading and Pydantic models for s3verify."""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """The server under test and the credentials used against it."""

    endpoint: str = "http://localhost:9000"
    region: str = "us-east-1"
    access_key: str = ""
    secret_key: str = ""
    timeout: float | None = 30.0


class RunConfig(BaseModel):
    """What a run creates and how it cleans up."""

    prepared: bool = False
    prepared_buckets: list[str] = Field(default_factory=list)
    # Number of uploads in unprepared mode.
    object_count: int = Field(default=101, ge=1)
    object_size: int = Field(default=60, ge=0)
    bucket_prefix: str = "s3verify"
    cleanup: bool = True


class LoggingConfig(BaseModel):
    """Logging level and format."""

    level: str = "INFO"
    format: str = "text"


class ObservabilityConfig(BaseModel):
    """Metrics configuration."""

    metrics: bool = False
    metrics_port: int = 0


class S3VerifyConfig(BaseModel):
    """Top-level s3verify configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


# Environment variables that override the file, by (section, field).
ENV_OVERRIDES = {
    "S3VERIFY_ENDPOINT": ("server", "endpoint"),
    "S3VERIFY_ACCESS_KEY": ("server", "access_key"),
    "S3VERIFY_SECRET_KEY": ("server", "secret_key"),
    "S3VERIFY_REGION": ("server", "region"),
}


def _parse_section(data: dict[str, Any] | None, keys: tuple[str, ...]) -> dict[str, Any]:
    """Pick the known keys of a YAML section; unset keys fall back to defaults."""
    if data is None:
        return {}
    return {key: data[key] for key in keys if key in data}


def _parse_run(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the run section from YAML data.

    Handles nested structure: run.prepared.buckets -> prepared_buckets,
    as well as the flat ``prepared: true`` form.
    """
    if data is None:
        return {}
    result = _parse_section(
        data, ("object_count", "object_size", "bucket_prefix", "cleanup", "prepared_buckets")
    )
    prepared = data.get("prepared")
    if isinstance(prepared, dict):
        result["prepared"] = prepared.get("enabled", True)
        result["prepared_buckets"] = prepared.get("buckets", [])
    elif prepared is not None:
        result["prepared"] = prepared
    return result


def load_config(path: Path) -> S3VerifyConfig:
    """Load an S3VerifyConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated S3VerifyConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return S3VerifyConfig(
        server=ServerConfig(
            **_parse_section(
                raw.get("server"), ("endpoint", "region", "access_key", "secret_key", "timeout")
            )
        ),
        run=RunConfig(**_parse_run(raw.get("run"))),
        logging=LoggingConfig(**_parse_section(raw.get("logging"), ("level", "format"))),
        observability=ObservabilityConfig(
            **_parse_section(raw.get("observability"), ("metrics", "metrics_port"))
        ),
    )


def apply_env_overrides(
    config: S3VerifyConfig, environ: Mapping[str, str] | None = None
) -> S3VerifyConfig:
    """Apply ``S3VERIFY_*`` environment variables on top of ``config`` in place."""
    environ = os.environ if environ is None else environ
    for var, (section, name) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            setattr(getattr(config, section), name, value)
    return config
