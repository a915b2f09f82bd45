#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_PAGE_SIZE, DEFAULT_ORIENTATION, DEFAULT_MARGIN,
    DEFAULT_NUMBER_DECIMALS, IMAGE_TIMEOUT_SECONDS, IMAGE_MAX_BYTES,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== Page Defaults ==========
    # Used when a layout schema leaves page fields unset
    default_page_size: str = DEFAULT_PAGE_SIZE  # A4 | A3 | Letter
    default_orientation: str = DEFAULT_ORIENTATION  # portrait | landscape
    default_margin: float = DEFAULT_MARGIN  # mm

    # ========== Report Chrome ==========
    brand_title: str = "WORKLEDGER"
    report_title: str = "WORK REPORT"
    include_report_header: bool = True  # Brand/contract banner before first block
    include_page_numbers: bool = True  # "Page i of n" footer

    # ========== Formatting ==========
    number_decimals: int = DEFAULT_NUMBER_DECIMALS

    # ========== Images ==========
    image_timeout_seconds: float = IMAGE_TIMEOUT_SECONDS
    image_max_bytes: int = IMAGE_MAX_BYTES

    # ========== Directories ==========
    output_dir: Path = BASE_DIR / "data" / "output"
    logs_dir: Path = BASE_DIR / "data" / "logs"

    class Config:
        env_prefix = "WORKLEDGER_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def ensure_dirs(self) -> None:
        """Create output directories on demand"""
        for dir_path in [self.output_dir, self.logs_dir]:
            dir_path.mkdir(exist_ok=True, parents=True)

    def page_defaults(self) -> dict:
        """Page config used to fill unset schema fields"""
        margin = self.default_margin
        return {
            "size": self.default_page_size,
            "orientation": self.default_orientation,
            "margins": {"top": margin, "bottom": margin, "left": margin, "right": margin},
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Global settings instance (lazy)"""
    return Settings()
