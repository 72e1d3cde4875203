"""Configuration models using Pydantic for validation."""
from typing import Dict, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
import os


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


class ConvertConfig(BaseModel):
    """Result normalizer behaviour."""
    # "abort" stops at the first range-matrix series without samples
    empty_series: Literal["abort", "skip"] = "abort"


class ApiConfig(BaseModel):
    """HTTP API configuration."""
    enabled: bool = True
    bind_address: str = "0.0.0.0"
    port: int = 8081


class SelfMetricsConfig(BaseModel):
    """Self-monitoring metrics configuration."""
    enabled: bool = True
    prefix: str = "promconv_"


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    convert: ConvertConfig = Field(default_factory=ConvertConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    self_metrics: SelfMetricsConfig = Field(default_factory=SelfMetricsConfig)
    templates: Dict[str, str] = Field(default_factory=dict)

    @field_validator('templates')
    @classmethod
    def validate_templates(cls, v):
        """Template names must be non-empty."""
        for name in v:
            if not name.strip():
                raise ValueError("Template names must not be empty")
        return v


def _override(raw_config: dict, section: str, key: str, value: str):
    """Set an env override; a non-mapping section is left for validation to reject."""
    target = raw_config.setdefault(section, {})
    if isinstance(target, dict):
        target[key] = value


def load_config(config_path: str) -> Config:
    """Load and validate configuration from YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(
            f"Configuration validation failed: top level must be a mapping, got {type(raw_config).__name__}"
        )

    # Apply environment variable overrides
    if env_log_level := os.getenv('LOG_LEVEL'):
        _override(raw_config, 'global', 'log_level', env_log_level)

    if env_port := os.getenv('PROMCONV_API_PORT'):
        _override(raw_config, 'api', 'port', env_port)

    try:
        return Config(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
