from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_TOKENS = 3000
DEFAULT_TEMPERATURE = 0.7


class OpenAISettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    deployment_name: Optional[str] = None
    # api_version vide : endpoint compatible OpenAI (ex: OpenRouter) au lieu d'Azure.
    api_version: str = "2024-06-01"
    timeout: float = 60.0


class PromptSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    system: str = "You are a helpful assistant that summarises YouTube video transcripts."
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE

    @field_validator("max_tokens", mode="before")
    @classmethod
    def parse_max_tokens(cls, value: Any) -> int:
        """Valeur par défaut si la clé est absente ou n'est pas un entier."""
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_MAX_TOKENS

    @field_validator("temperature", mode="before")
    @classmethod
    def parse_temperature(cls, value: Any) -> float:
        """Valeur par défaut si la clé est absente ou n'est pas un flottant."""
        try:
            return float(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_TEMPERATURE


class Settings(BaseSettings):
    openai: OpenAISettings = OpenAISettings()
    prompt: PromptSettings = PromptSettings()
    proxy_url: str = ""
    # Threads de youtube-transcript-api ; une extraction abandonnée occupe le sien jusqu'au retour de la librairie.
    extraction_workers: int = 4
    environment: str = "development"
    https_redirect: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

settings = Settings()
