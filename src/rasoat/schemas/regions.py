"""Region reference API schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class ProvinceListResponse(BaseModel):
    provinces: List[str]


class DistrictListResponse(BaseModel):
    province: str
    districts: List[str]
