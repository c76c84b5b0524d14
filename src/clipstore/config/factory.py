# region Docstring
"""
clipstore.config.factory
Settings base class shared by every clipstore settings model.
- Sources, strongest first: environment, .env, config.{APP_ENV}.yaml,
    config.yaml, constructor kwargs, field defaults.
- get_settings caches one instance per class; tests clear it with
    get_settings.cache_clear() after touching the environment.
"""
# endregion
# region Imports
import json
from functools import lru_cache
from typing import Any, Type, TypeVar

from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .base import APP_ENV, APP_ROOT

# endregion
# region FactoryBaseSettings Class
T = TypeVar("T", bound=BaseSettings)


class FactoryBaseSettings(BaseSettings):
    """Settings read from the environment, .env and the YAML config files."""

    model_config = SettingsConfigDict(
        env_file=APP_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:

        # Environment-specific file listed last so it overrides config.yaml
        yaml_settings = YamlConfigSettingsSource(
            settings_cls,
            yaml_file=[APP_ROOT / "config.yaml", APP_ROOT / f"config.{APP_ENV}.yaml"],
        )
        return (
            env_settings,
            dotenv_settings,
            yaml_settings,
            init_settings,
        )

    def decode_complex_value(
        self, field_name: str, field: FieldInfo, value: Any
    ) -> Any:
        """Non-JSON strings are passed through to the field validators unchanged."""
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value


# endregion
# region get_settings Factory Function


@lru_cache
def get_settings(settings_cls: Type[T]) -> T:
    """Resolve `settings_cls` once per process."""
    return settings_cls()


# endregion
