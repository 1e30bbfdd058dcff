"""Runtime settings.

Values come from ``MINIMAX_CHESS_*`` environment variables and are validated
by pydantic; anything unset falls back to the field default.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, model_validator


ENV_PREFIX = "MINIMAX_CHESS_"


class Settings(BaseModel):
    host: str = Field(default="127.0.0.1", description="Bind address for the HTTP server")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    default_depth: int = Field(default=3, ge=1, description="Search depth when a request omits it")
    max_depth: int = Field(default=6, ge=1, description="Largest search depth the API accepts")
    max_perft_depth: int = Field(default=5, ge=0)
    max_sessions: int = Field(default=1000, ge=1, description="Oldest games evicted beyond this")

    @model_validator(mode="after")
    def _default_within_max(self) -> "Settings":
        if self.default_depth > self.max_depth:
            raise ValueError("default_depth must not exceed max_depth")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (default: ``os.environ``).

        Raises:
            pydantic.ValidationError: If a variable fails validation.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw.upper() if name == "log_level" else raw
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
