import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-latest",
    "gemini": "gemini-2.0-flash",
}


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    llm_provider: str = "gemini"
    llm_model: str = ""
    llm_api_key: Optional[str] = None
    openai_base: str = "https://api.openai.com/v1"
    llm_timeout: float = 60.0
    llm_max_attempts: int = 2
    fetch_timeout: float = 15.0
    default_theme: str = "professional"
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    @property
    def model(self) -> str:
        return self.llm_model or DEFAULT_MODELS.get(self.llm_provider, "")

    @classmethod
    def from_env(cls) -> "Settings":
        provider = (os.getenv("LLM_PROVIDER") or "gemini").strip().lower()
        api_key = os.getenv("LLM_API_KEY") or os.getenv(PROVIDER_KEY_ENV.get(provider, ""), "") or None
        origins = tuple(
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ) or ("*",)
        return cls(
            llm_provider=provider,
            llm_model=(os.getenv("LLM_MODEL") or "").strip(),
            llm_api_key=api_key,
            openai_base=os.getenv("OPENAI_BASE", "https://api.openai.com/v1"),
            llm_timeout=_float_env("LLM_TIMEOUT", 60.0),
            llm_max_attempts=_int_env("LLM_MAX_ATTEMPTS", 2),
            fetch_timeout=_float_env("FETCH_TIMEOUT", 15.0),
            default_theme=(os.getenv("DEFAULT_THEME") or "professional").strip().lower(),
            cors_origins=origins,
        )
