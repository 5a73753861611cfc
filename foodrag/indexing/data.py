"""
Food record collection: loading, validation and simple statistics.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from foodrag.config import settings
from foodrag.errors import DataLoadError
from foodrag.models.schemas import FoodItem, FoodStats

logger = logging.getLogger(__name__)


def load_food_items(path: str | Path | None = None) -> List[FoodItem]:
    """
    Read the JSON array of records. Invalid entries are dropped with a warning.
    """
    file_path = Path(path or settings.foods_path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise DataLoadError(f"Failed to load foods data from {file_path}: {exc}") from exc

    if not isinstance(raw, list):
        raise DataLoadError(f"Foods data in {file_path} must be a JSON array")

    items: List[FoodItem] = []
    for entry in raw:
        try:
            items.append(FoodItem.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Invalid food item skipped", extra={"item": entry, "errors": exc.errors()})

    logger.info("Loaded food items", extra={"count": len(items), "path": str(file_path)})
    return items


def get_food_by_id(items: List[FoodItem], food_id: str) -> FoodItem | None:
    return next((item for item in items if item.id == food_id), None)


def food_stats(items: List[FoodItem]) -> FoodStats:
    return FoodStats(
        total=len(items),
        regions=len({i.region for i in items if i.region}),
        types=len({i.type for i in items if i.type}),
        with_region=sum(1 for i in items if i.region),
        with_type=sum(1 for i in items if i.type),
    )


__all__ = ["load_food_items", "get_food_by_id", "food_stats"]
