"""Province and district reference data for the submission form."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def load_regions(source: Optional[Path] = None) -> dict[str, tuple[str, ...]]:
    """Load the province -> districts mapping from the configured JSON file."""

    json_path = source or settings.regions_file
    if not json_path.exists():
        logger.warning(f"Region reference file not found: {json_path}; district checks disabled")
        return {}

    with json_path.open(mode="r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Region file '{json_path}' must contain an object of province -> districts.")

    regions: dict[str, tuple[str, ...]] = {}
    for province, districts in payload.items():
        name = str(province).strip()
        if not name:
            continue
        regions[name] = tuple(str(district).strip() for district in districts or () if str(district).strip())
    return regions


def list_provinces() -> list[str]:
    return sorted(load_regions())


def list_districts(province: str) -> list[str]:
    return list(load_regions().get(province.strip(), ()))


def is_known_province(province: str) -> bool:
    return province.strip() in load_regions()


def is_known_district(province: str, district: str) -> bool:
    """True when ``district`` belongs to ``province``; unknown provinces are not checked."""
    districts = load_regions().get(province.strip())
    if districts is None:
        return True
    return district.strip() in districts
