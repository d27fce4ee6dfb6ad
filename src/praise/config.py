"""Configuration models for PRAISE."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from praise.exceptions import ConfigError
from praise.models import Component

WEIGHT_SUM_TOLERANCE = 0.01


class RatingWeights(BaseModel):
    """Weight of each rating component in the composite PR score.

    The six weights must sum to 1.0 (within ``WEIGHT_SUM_TOLERANCE``).
    Instances are immutable; use :meth:`updated` to derive a new,
    re-validated weight set.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    priority: float = Field(default=0.25, ge=0.0)
    code_amount: float = Field(default=0.20, ge=0.0)
    time_factor: float = Field(default=0.20, ge=0.0)
    relevance: float = Field(default=0.15, ge=0.0)
    quality: float = Field(default=0.10, ge=0.0)
    impact: float = Field(default=0.10, ge=0.0)

    @model_validator(mode="after")
    def _check_sum(self) -> RatingWeights:
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"weights must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> dict[Component, float]:
        return {component: getattr(self, component.value) for component in Component}

    def updated(self, **weights: float) -> RatingWeights:
        """Return a new weight set with *weights* merged over this one.

        Raises:
            ConfigError: If the merged set is invalid. ``self`` is unchanged.
        """
        try:
            return RatingWeights.model_validate({**self.model_dump(), **weights})
        except ValidationError as exc:
            raise ConfigError(f"Invalid rating weights: {exc}") from exc


class FetchConfig(BaseModel):
    """GitHub API fetch parameters."""
    max_repos: int = 5
    max_prs_per_repo: int = 20
    max_prs_to_rate: int = 20
    request_delay_seconds: float = 1.0
    timeout_seconds: float = 10.0
    fetch_pr_details: bool = True


class PraiseConfig(BaseModel):
    """Top-level configuration composing all sub-configs."""
    weights: RatingWeights = Field(default_factory=RatingWeights)
    fetch: FetchConfig = Field(default_factory=FetchConfig)


_DEFAULT_PATHS = (".praise.yml", ".praise.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def load_config(path: str | Path | None = None) -> PraiseConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (PRAISE_*)
    2. YAML config file
    3. Defaults

    Raises:
        ConfigError: If the resulting configuration is invalid.
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_data = _read_yaml(Path(path))
    else:
        for default_path in _DEFAULT_PATHS:
            p = Path(default_path)
            if p.exists():
                config_data = _read_yaml(p)
                break

    env_mapping: dict[str, tuple[str, str, type]] = {
        f"PRAISE_WEIGHT_{component.value.upper()}": ("weights", component.value, float)
        for component in Component
    }
    env_mapping.update({
        "PRAISE_MAX_REPOS": ("fetch", "max_repos", int),
        "PRAISE_MAX_PRS": ("fetch", "max_prs_to_rate", int),
        "PRAISE_REQUEST_DELAY": ("fetch", "request_delay_seconds", float),
    })

    for env_var, (section, key, type_fn) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                converted = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc
            config_data.setdefault(section, {})
            config_data[section][key] = converted

    try:
        return PraiseConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
