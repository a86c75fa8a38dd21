from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PHOTOBOOTH_"


class Settings(BaseModel):
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 8000

    # Landmark smoothing: higher = more responsive, lower = steadier
    smoothing_alpha: float = Field(default=0.38, gt=0, le=1)
    tracking_interval: float = Field(default=1 / 60, ge=0)

    aspect_ratio: float = Field(default=4 / 3, gt=0)
    max_output_dimension: int = Field(default=1920, gt=0)
    output_format: str = "jpeg"
    jpeg_quality: int = Field(default=95, ge=1, le=100)

    detector_model_selection: int = Field(default=0, ge=0, le=1)
    min_detection_confidence: float = Field(default=0.6, ge=0, le=1)

    caption_font_path: Optional[str] = None
    caption_date_format: str = "{year}年{month}月{day}日"
    export_prefix: str = "ShinagawaPrince"
    random_seed: Optional[int] = None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def _parse_ratio(cls, value: Any) -> Any:
        # Accept "4:3" as well as plain floats
        if isinstance(value, str) and ":" in value:
            num, den = value.split(":", 1)
            return float(num) / float(den)
        return value

    @field_validator("output_format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        value = value.lower()
        if value == "jpg":
            value = "jpeg"
        if value not in ("jpeg", "png"):
            raise ValueError("output_format must be 'jpeg' or 'png'")
        return value


def _env_overrides() -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for name in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            overrides[name] = raw
    return overrides


def load_settings(**overrides: Any) -> Settings:
    load_dotenv()
    data: Dict[str, Any] = _env_overrides()
    data.update(overrides)
    return Settings.model_validate(data)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
