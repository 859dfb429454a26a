#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_LANGUAGE, FOOTNOTE_BACKLINK, LOG_FILE, LOG_LEVEL, MAX_BLANK_LINES,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Logging ==========
    log_level: str = LOG_LEVEL
    log_file: Optional[str] = LOG_FILE or None  # None: console only

    # ========== Sanitizer ==========
    max_blank_lines: int = MAX_BLANK_LINES
    strip_prompt_echoes: bool = True
    # Language-aware removal of stock LLM phrasing ("It is worth noting that")
    remove_ai_phrases: bool = False

    # ========== Transpiler ==========
    default_language: str = DEFAULT_LANGUAGE
    footnote_backlink: str = FOOTNOTE_BACKLINK
    callout_icons: bool = True

    class Config:
        env_prefix = "BOOKFORGE_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def describe(self) -> dict:
        """Configuration summary for logging"""
        return {
            "log_level": self.log_level,
            "log_file": self.log_file or "-",
            "max_blank_lines": self.max_blank_lines,
            "strip_prompt_echoes": self.strip_prompt_echoes,
            "remove_ai_phrases": self.remove_ai_phrases,
            "default_language": self.default_language,
            "callout_icons": self.callout_icons,
        }


# Global settings instance
settings = Settings()
