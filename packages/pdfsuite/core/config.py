"""Runtime settings for pdfsuite."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping

ENV_PREFIX = "PDFSUITE_"


@dataclass(frozen=True)
class Settings:
    """Process-wide knobs that are not part of a tool's options.

    Attributes:
        fallback_delay: Seconds the generic fallback waits before echoing
            unimplemented tool inputs back.
        min_password_length: Shortest password accepted by encrypting tools.
        fallback_char_limit: Number of characters rendered by the text
            fallback for unimplemented ``*-to-pdf`` tools.
        default_font: Standard font used for generated text.
        log_level: Level name applied to the ``pdfsuite`` logger.
    """

    fallback_delay: float = 1.0
    min_password_length: int = 6
    fallback_char_limit: int = 2000
    default_font: str = "Helvetica"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        settings = cls()
        updates: dict[str, object] = {}
        if f"{ENV_PREFIX}FALLBACK_DELAY" in env:
            updates["fallback_delay"] = float(env[f"{ENV_PREFIX}FALLBACK_DELAY"])
        if f"{ENV_PREFIX}MIN_PASSWORD_LENGTH" in env:
            updates["min_password_length"] = int(env[f"{ENV_PREFIX}MIN_PASSWORD_LENGTH"])
        if f"{ENV_PREFIX}FALLBACK_CHAR_LIMIT" in env:
            updates["fallback_char_limit"] = int(env[f"{ENV_PREFIX}FALLBACK_CHAR_LIMIT"])
        if f"{ENV_PREFIX}DEFAULT_FONT" in env:
            updates["default_font"] = env[f"{ENV_PREFIX}DEFAULT_FONT"]
        if f"{ENV_PREFIX}LOG_LEVEL" in env:
            updates["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"].upper()
        return replace(settings, **updates) if updates else settings


__all__ = ["Settings", "ENV_PREFIX"]
