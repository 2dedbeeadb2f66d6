"""Province/district lookups backing the cascading form selects."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Path, status

from ...data.regions_repository import is_known_province, list_districts, list_provinces
from ...schemas.regions import DistrictListResponse, ProvinceListResponse

router = APIRouter(prefix="/regions", tags=["regions"])


@router.get("/provinces", response_model=ProvinceListResponse, status_code=status.HTTP_200_OK)
def get_provinces() -> ProvinceListResponse:
    return ProvinceListResponse(provinces=list_provinces())


@router.get(
    "/provinces/{province}/districts",
    response_model=DistrictListResponse,
    status_code=status.HTTP_200_OK,
)
def get_districts(province: str = Path(..., description="Province name as listed by /regions/provinces")) -> DistrictListResponse:
    if not is_known_province(province):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown province: {province}")
    return DistrictListResponse(province=province, districts=list_districts(province))
