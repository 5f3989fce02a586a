"""
Category presentation lookup.

The converter only emits a Category; colours and health descriptions are
presentation data owned by config/naqi_categories.json.
"""

import json
import logging
import os
from typing import Dict, List, Optional

from pipeline import config
from pipeline.aqi.converter import Category

logger = logging.getLogger(__name__)

_CATEGORIES_CONFIG: Optional[Dict[str, dict]] = None


def _load_categories() -> Dict[str, dict]:
    global _CATEGORIES_CONFIG
    if _CATEGORIES_CONFIG is not None:
        return _CATEGORIES_CONFIG
    if os.path.exists(config.CATEGORIES_CONFIG):
        with open(config.CATEGORIES_CONFIG, "r") as f:
            raw = json.load(f)
        _CATEGORIES_CONFIG = {c["label"]: c for c in raw.get("categories", [])}
        logger.info("Category table loaded from %s", config.CATEGORIES_CONFIG)
    else:
        logger.warning("naqi_categories.json not found, using label-only categories")
        _CATEGORIES_CONFIG = {}
    return _CATEGORIES_CONFIG


def get_category_info(category: Category) -> dict:
    """Return {label, color, text_color, description} for a category."""
    label = Category(category).value
    info = _load_categories().get(label, {})
    return {
        "label": label,
        "color": info.get("color"),
        "text_color": info.get("text_color"),
        "description": info.get("description", ""),
    }


def all_categories() -> List[dict]:
    """All categories in ascending severity."""
    return [get_category_info(c) for c in Category]
