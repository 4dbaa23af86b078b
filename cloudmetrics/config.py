"""Configuration models using Pydantic for validation."""
from typing import Dict, Mapping, Optional, Literal
from pydantic import BaseModel, Field
import logging
import os

logger = logging.getLogger(__name__)

PROJECT_ID_ENV = "GOOGLE_CLOUD_PROJECT"
FUNCTION_NAME_ENV = "FUNCTION_NAME"

# Development placeholders; real deployments must set the env variables
DEFAULT_PROJECT_ID = "p48-development"
DEFAULT_FUNCTION_NAME = "Buy"

FUNCTION_NAME_LABEL = "function_name"
CUSTOM_METRIC_PREFIX = "custom.googleapis.com/"
GLOBAL_RESOURCE_TYPE = "global"


class Settings(BaseModel):
    """Identifiers resolved for a single emission."""
    project_id: str = DEFAULT_PROJECT_ID
    function_name: str = DEFAULT_FUNCTION_NAME

    @property
    def project_name(self) -> str:
        return f"projects/{self.project_id}"


def resolve_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Resolve project id and function name from the environment.

    Read on every call so a changed variable takes effect immediately.
    Unset or empty values fall back to the development placeholders.
    """
    env = os.environ if environ is None else environ

    project_id = env.get(PROJECT_ID_ENV) or ""
    if not project_id:
        logger.debug(f"{PROJECT_ID_ENV} not set, using placeholder '{DEFAULT_PROJECT_ID}'")
        project_id = DEFAULT_PROJECT_ID

    function_name = env.get(FUNCTION_NAME_ENV) or ""
    if not function_name:
        logger.debug(f"{FUNCTION_NAME_ENV} not set, using placeholder '{DEFAULT_FUNCTION_NAME}'")
        function_name = DEFAULT_FUNCTION_NAME

    return Settings(project_id=project_id, function_name=function_name)


class SelfMetricsConfig(BaseModel):
    """Local Prometheus endpoint for the emitter's own counters."""
    enabled: bool = False
    port: int = 9464
    prefix: str = "cloudmetrics_"
    bind_address: str = "0.0.0.0"


class EmitterConfig(BaseModel):
    """Submission settings."""
    timeout_s: Optional[float] = Field(default=None, gt=0)
    default_labels: Dict[str, str] = Field(default_factory=dict)


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


class Config(BaseModel):
    """Root configuration model."""
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    emitter: EmitterConfig = Field(default_factory=EmitterConfig)
    self_metrics: SelfMetricsConfig = Field(default_factory=SelfMetricsConfig)

    model_config = {"populate_by_name": True}


def load_config(config_path: str) -> Config:
    """Load and validate configuration from YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    if env_log_level := os.getenv('LOG_LEVEL'):
        if 'global' not in raw_config:
            raw_config['global'] = {}
        raw_config['global']['log_level'] = env_log_level

    try:
        config = Config(**raw_config)
        return config
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
