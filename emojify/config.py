# emojify/config.py
import logging
import os
from typing import Optional

import yaml
from pydantic import AliasChoices, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from emojify.classifier import EYE_OPEN_PROBABILITY_THRESHOLD, SMILING_PROBABILITY_THRESHOLD, Thresholds
from emojify.compositor import EMOJI_SCALE_FACTOR
from emojify.models import EmojifyError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


class ConfigError(EmojifyError):
    pass


class EmojifyConfig(BaseSettings):
    """
    Emojify settings. Environment variables (field name, upper-case) win
    over values passed in, which is how ``config.yaml`` values arrive.
    """

    model_config = SettingsConfigDict(frozen=True, extra="ignore", case_sensitive=False)

    smiling_threshold: float = Field(default=SMILING_PROBABILITY_THRESHOLD, ge=0.0, le=1.0)
    eye_open_threshold: float = Field(default=EYE_OPEN_PROBABILITY_THRESHOLD, ge=0.0, le=1.0)
    emoji_scale_factor: float = Field(default=EMOJI_SCALE_FACTOR, gt=0.0)
    exact_aspect: bool = False
    max_faces: int = Field(default=10, ge=1)
    min_detection_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    detector_backend: str = Field(default="skip", description="DeepFace backend run on each face crop")
    eye_closed_ratio: float = Field(default=0.12, ge=0.0, description="Aperture at or below -> eye-open probability 0")
    eye_open_ratio: float = Field(default=0.28, gt=0.0, description="Aperture at or above -> eye-open probability 1")
    assets_dir: Optional[str] = Field(default=None, validation_alias=AliasChoices("assets_dir", "EMOJI_ASSETS_DIR"))
    emoji_size: int = Field(default=256, ge=1)

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings,
                                   dotenv_settings, file_secret_settings):
        return env_settings, init_settings

    @model_validator(mode="after")
    def _check_eye_ratios(self) -> "EmojifyConfig":
        if self.eye_closed_ratio >= self.eye_open_ratio:
            raise ValueError(
                f"eye_closed_ratio ({self.eye_closed_ratio}) must be below eye_open_ratio ({self.eye_open_ratio})")
        return self

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(smiling=self.smiling_threshold, eye_open=self.eye_open_threshold)


def load_config(path: Optional[str] = None) -> EmojifyConfig:
    """Defaults, then ``config.yaml`` (if present), then environment variables."""
    path = path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)
    values = {}

    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
        for key, raw in data.items():
            if key not in EmojifyConfig.model_fields:
                logger.warning(f"⚠️ Ignoring unknown config key '{key}' in {path}")
                continue
            values[key] = raw
        logger.info(f"🔧 Loaded config from {path}")

    try:
        return EmojifyConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
