import json
import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_FILES = (ROOT_DIR / ".env", ROOT_DIR / ".env.example")

WORKFLOW_ENV_MAP = {
    "HRPA_WAIT_TIMEOUT_MS": "wait_timeout_ms",
    "HRPA_POLL_INTERVAL_MS": "poll_interval_ms",
    "HRPA_MAX_RETRIES": "max_retries",
    "HRPA_MAX_SCROLLS": "max_scrolls",
    "HRPA_SCROLL_SETTLE_MS": "scroll_settle_ms",
    "HRPA_SWIPE_DURATION_MS": "swipe_duration_ms",
}
INPUT_ENV_MAP = {
    "HRPA_MAX_COORDINATE": "max_coordinate",
    "HRPA_VELOCITY_CEILING": "velocity_ceiling",
    "HRPA_VELOCITY_SLOPE": "velocity_slope",
}


def _read_env_values() -> dict:
    values = {}
    for path in ENV_FILES:
        if not path.exists():
            continue
        values.update(dotenv_values(path))
    values.update(os.environ)
    return values


class WorkflowSettings(BaseModel):
    wait_timeout_ms: int = Field(
        default=10000,
        validation_alias=AliasChoices("wait_timeout_ms", "HRPA_WAIT_TIMEOUT_MS"),
    )
    poll_interval_ms: int = Field(
        default=500,
        validation_alias=AliasChoices("poll_interval_ms", "HRPA_POLL_INTERVAL_MS"),
    )
    max_retries: int = Field(
        default=3,
        validation_alias=AliasChoices("max_retries", "HRPA_MAX_RETRIES"),
    )
    max_scrolls: int = Field(
        default=10,
        validation_alias=AliasChoices("max_scrolls", "HRPA_MAX_SCROLLS"),
    )
    scroll_settle_ms: int = Field(
        default=500,
        validation_alias=AliasChoices("scroll_settle_ms", "HRPA_SCROLL_SETTLE_MS"),
    )
    swipe_duration_ms: int = Field(
        default=300,
        validation_alias=AliasChoices("swipe_duration_ms", "HRPA_SWIPE_DURATION_MS"),
    )
    default_screen_width: int = 1080
    default_screen_height: int = 2340

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("wait_timeout_ms", "poll_interval_ms", "scroll_settle_ms")
    @classmethod
    def _non_negative(cls, value):
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("max_retries", "swipe_duration_ms")
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value


class InputSettings(BaseModel):
    max_coordinate: int = Field(
        default=10000,
        validation_alias=AliasChoices("max_coordinate", "HRPA_MAX_COORDINATE"),
    )
    velocity_min: int = 200
    velocity_max: int = 40000
    velocity_ceiling: int = Field(
        default=8000,
        validation_alias=AliasChoices("velocity_ceiling", "HRPA_VELOCITY_CEILING"),
    )
    velocity_slope: float = Field(
        default=10.0,
        validation_alias=AliasChoices("velocity_slope", "HRPA_VELOCITY_SLOPE"),
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ClientSettings(BaseSettings):
    hdc_path: str = Field(
        default="hdc",
        validation_alias=AliasChoices("hdc_path", "HDC_PATH", "HRPA_HDC_PATH"),
    )
    device_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("device_id", "HDC_DEVICE", "HRPA_DEVICE_ID"),
    )
    command_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("command_timeout", "HRPA_COMMAND_TIMEOUT"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("log_level", "HRPA_LOG_LEVEL"),
    )
    workflow: WorkflowSettings = WorkflowSettings()
    input: InputSettings = InputSettings()

    model_config = SettingsConfigDict(
        env_file=[str(path) for path in ENV_FILES],
        env_file_encoding="utf-8",
        env_prefix="HRPA_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("hdc_path", mode="before")
    @classmethod
    def _default_hdc_path(cls, value):
        if value is None:
            return "hdc"
        return str(value).strip() or "hdc"

    @field_validator("device_id", mode="before")
    @classmethod
    def _strip_optional(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _strip_upper(cls, value):
        if value is None:
            return "INFO"
        return str(value).strip().upper() or "INFO"

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            _legacy_env_settings,
            file_secret_settings,
        )


def load_settings(config_path: Optional[str] = None, **overrides) -> ClientSettings:
    data = {}
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError("config not found: {}".format(path))
        data = _load_json(path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return ClientSettings(**data)


def _load_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def _legacy_env_settings(_settings: Optional[BaseSettings] = None, *_args, **_kwargs) -> dict:
    env = _read_env_values()
    data = {}
    for section, env_map in (("workflow", WORKFLOW_ENV_MAP), ("input", INPUT_ENV_MAP)):
        values = {}
        for env_key, field in env_map.items():
            value = env.get(env_key)
            if value in (None, ""):
                continue
            values[field] = value
        if values:
            data[section] = values
    return data
