"""Configuration management using pydantic-settings.

Priority order (highest first):

1. Init keyword arguments (``AppConfig(llm=...)``)
2. Override YAML (path from ``ZIVY_CONFIG_FILE`` env var)
3. Environment variables (``ZIVY_`` prefix, ``__`` for nesting)
4. ``.env`` dotenv file
5. Static YAML (``configs/config.yaml`` at the project root)
6. File secrets, then field defaults

The config is read once when the app is built and handed to the
``RelayContext``; ``get_app_config`` stays a plain factory so tests can
override it through ``app.dependency_overrides``.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import (
    APIConfig,
    AssistantConfig,
    CORSConfig,
    FallbackConfig,
    KnowledgeConfig,
    LLMConfig,
    LoggingConfig,
    PricingConfig,
    PromptConfig,
    ServerConfig,
    SessionConfig,
    TracingConfig,
)

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

_override_env = os.environ.get("ZIVY_CONFIG_FILE")
OVERRIDE_CONFIG_FILE: Optional[Path] = Path(_override_env) if _override_env else None

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "ZIVY_"

DEFAULT_ENCODING = "utf-8"


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig, description="Vendor and model selection"
    )
    assistant: AssistantConfig = Field(
        default_factory=AssistantConfig,
        description="Assistants relay settings (provider=assistant only)",
    )
    knowledge: KnowledgeConfig = Field(
        default_factory=KnowledgeConfig, description="Knowledge file settings"
    )
    prompt: PromptConfig = Field(
        default_factory=PromptConfig, description="Persona and keyword routing"
    )
    fallbacks: FallbackConfig = Field(
        default_factory=FallbackConfig,
        description="User-facing replies for vendor errors",
    )
    pricing: PricingConfig = Field(
        default_factory=PricingConfig, description="Cost estimate prices"
    )
    sessions: SessionConfig = Field(
        default_factory=SessionConfig, description="Session registry settings"
    )
    api: APIConfig = Field(default_factory=APIConfig, description="API settings")
    cors: CORSConfig = Field(default_factory=CORSConfig, description="CORS policy")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging settings"
    )
    tracing: TracingConfig = Field(
        default_factory=TracingConfig, description="OpenTelemetry settings"
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig, description="Uvicorn bind settings"
    )

    @property
    def knowledge_path(self) -> Path:
        """Knowledge file path; a relative directory is under ``PROJECT_ROOT``."""
        path = Path(self.knowledge.path)
        if path.is_absolute():
            return path
        return PROJECT_ROOT / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings]

        if OVERRIDE_CONFIG_FILE is not None and OVERRIDE_CONFIG_FILE.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=OVERRIDE_CONFIG_FILE,
                )
            )

        sources.append(env_settings)
        sources.append(dotenv_settings)
        sources.append(YamlConfigSettingsSource(settings_cls))
        sources.append(file_secret_settings)

        return tuple(sources)


def get_app_config() -> AppConfig:
    """Build the application configuration from all sources."""
    return AppConfig()
