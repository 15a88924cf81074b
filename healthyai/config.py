"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """HealthyAI configuration. All values come from environment variables."""

    # Ollama inference service
    ollama_base_url: str = Field(default="http://localhost:11434")
    ollama_models_path: str = Field(default="/api/tags")
    ollama_generate_path: str = Field(default="/api/generate")
    ollama_pull_path: str = Field(default="/api/pull")

    # Generation
    default_model: str = Field(default="llama3.2")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1)
    request_timeout: float = Field(default=120.0)
    discovery_timeout: float = Field(default=5.0)

    # Knowledge base
    knowledge_enabled: bool = Field(default=True)
    retrieval_top_k: int = Field(default=3, ge=1)

    # Storage
    database_path: Path = Field(default=Path("data/healthyai.db"))

    # Chat history grouping ("Today", "Yesterday", ...) is anchored to this zone
    display_timezone: str = Field(default="UTC")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def _url(self, path: str) -> str:
        return self.ollama_base_url.rstrip("/") + "/" + path.lstrip("/")

    def models_url(self) -> str:
        """Full URL of the model-listing endpoint."""
        return self._url(self.ollama_models_path)

    def generate_url(self) -> str:
        """Full URL of the completion endpoint."""
        return self._url(self.ollama_generate_path)

    def pull_url(self) -> str:
        return self._url(self.ollama_pull_path)


settings = Settings()
