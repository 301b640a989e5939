"""Configuration management for the image studio."""

import os
from pathlib import Path
from typing import Dict, Optional
import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config/app.yaml")
DEFAULT_BUILD_CONFIG_PATH = Path("config/build.env")


class EnhancementConfig(BaseModel):
    """Configuration for prompt enhancement."""
    endpoint: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4"
    temperature: float = 0.7
    credential: str = "OPENAI_API_KEY"


class SynthesisConfig(BaseModel):
    """Configuration for image-to-image synthesis."""
    endpoint: str = "https://api.stepfun.com/v1/images/image2image"
    model: str = "step-1x-medium"
    seed: int = 42
    source_weight: float = 0.7
    response_format: str = "b64_json"
    max_dimension: int = 2048
    jpeg_quality: int = 80
    max_encoded_mb: float = 10.0
    credential: str = "STEP_API_KEY"


class Config(BaseModel):
    """Main application configuration."""

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Transport
    timeout_seconds: float = 60.0

    # Startup
    require_all_credentials: bool = True

    enhancement: EnhancementConfig = Field(default_factory=EnhancementConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)

    # Bundled credential values (second resolution source)
    credentials: Dict[str, str] = Field(default_factory=dict)

    # Build-time dotenv file (third resolution source)
    build_config_path: Path = DEFAULT_BUILD_CONFIG_PATH

    class Config:
        populate_by_name = True


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from the application YAML file and environment.

    Args:
        path: YAML file path; defaults to AKI_CONFIG_PATH or config/app.yaml

    Returns:
        Config instance

    Raises:
        ConfigurationError: If the file is unreadable or invalid
    """
    if path is None:
        path = Path(os.getenv("AKI_CONFIG_PATH", DEFAULT_CONFIG_PATH))

    file_config: dict = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read {path}: {e}")
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"{path} must contain a mapping")
    else:
        logger.warning(
            f"Config file not found at {path}, using defaults",
            extra={"config_path": str(path)}
        )

    config_data = {
        **{k: v for k, v in os.environ.items() if k in ("APP_ENV", "LOG_LEVEL")},
        **file_config,
    }

    build_path = os.getenv("AKI_BUILD_CONFIG_PATH")
    if build_path:
        config_data["build_config_path"] = build_path

    try:
        config = Config(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}")

    logger.info(
        "Configuration loaded successfully",
        extra={
            "config_path": str(path),
            "environment": config.app_env,
            "bundled_credentials": len(config.credentials),
        }
    )

    return config
