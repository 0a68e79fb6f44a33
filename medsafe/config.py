import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

API_KEY_ENV = "GEMINI_API_KEY"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
MAX_HISTORY_TURNS = 10


class Settings(BaseModel):
    """Server configuration, resolved once and handed to the request handler."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    timeout: float = 60.0
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    max_history_turns: int = MAX_HISTORY_TURNS

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/models/{self.model}:generateContent"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = ".env") -> "Settings":
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path)

        origins_env = os.getenv("ALLOWED_ORIGINS", "")
        origins = [o.strip() for o in origins_env.split(",") if o.strip()]

        try:
            timeout = float(os.getenv("GEMINI_TIMEOUT", "60"))
        except ValueError:
            timeout = 60.0

        return cls(
            api_key=(os.getenv(API_KEY_ENV) or "").strip() or None,
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            api_base=os.getenv("GEMINI_API_BASE", DEFAULT_API_BASE),
            timeout=timeout,
            allowed_origins=origins or ["*"],
        )
