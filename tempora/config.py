import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class OpenAISettings:
    api_key: Optional[str]
    model: str = "gpt-5-mini"
    max_completion_tokens: int = 800
    reasoning_effort: Optional[str] = "low"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class Settings:
    database_url: str
    secret_key: str
    openai: OpenAISettings
    session_max_age: int = 14 * 24 * 60 * 60
    chat_max_tool_iterations: int = 6
    default_timezone: str = "UTC"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=list)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    openai = OpenAISettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-5-mini"),
        max_completion_tokens=int(os.getenv("OPENAI_MAX_COMPLETION_TOKENS", "800")),
        reasoning_effort=os.getenv("OPENAI_REASONING_EFFORT", "low") or None,
    )
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./tempora.db"),
        secret_key=os.getenv("SECRET_KEY", "change-me-in-production"),
        openai=openai,
        session_max_age=int(os.getenv("SESSION_MAX_AGE", str(14 * 24 * 60 * 60))),
        chat_max_tool_iterations=int(os.getenv("CHAT_MAX_TOOL_ITERATIONS", "6")),
        default_timezone=os.getenv("DEFAULT_TIMEZONE", "UTC"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cors_origins=_split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        ),
    )
