"""Residence record API schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from ..data.regions_repository import is_known_district
from ..models.domain import ElectionConsent, ResidenceRecord, ResidenceType, TemporaryStatus
from ..services.records.validation import (
    NATIONAL_ID_ERROR,
    PHONE_ERROR,
    NATIONAL_ID_LENGTH,
    PHONE_LENGTH,
    mask_digits,
)


class RecordSubmission(BaseModel):
    """A form submission, keyed by the same names the store uses."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(..., alias="hoTen", min_length=1)
    date_of_birth: str = Field(..., alias="ngaySinh", min_length=1)
    national_id: str = Field(..., alias="cccd")
    district: str = Field(..., alias="hkttXaPhuong", min_length=1)
    province: str = Field(..., alias="hkttTinhTP", min_length=1)
    current_address: str = Field(..., alias="noiOHienTai", min_length=1)
    temporary_status: str = Field("", alias="dangKyTamTru")
    occupation: str = Field(..., alias="ngheNghiep", min_length=1)
    phone: str = Field(..., alias="soDienThoai")
    submitted_at: str = Field("", alias="dauThoiGian")
    election_consent: str = Field("", alias="dangKyBauCuTanLap")
    record_type: Optional[ResidenceType] = Field(None, alias="loaiCuTru")

    @field_validator("national_id", mode="before")
    @classmethod
    def _normalize_national_id(cls, value: object) -> str:
        digits = mask_digits(None if value is None else str(value), NATIONAL_ID_LENGTH)
        if len(digits) != NATIONAL_ID_LENGTH:
            raise PydanticCustomError("national_id_length", NATIONAL_ID_ERROR)
        return digits

    @field_validator("phone", mode="before")
    @classmethod
    def _normalize_phone(cls, value: object) -> str:
        digits = mask_digits(None if value is None else str(value), PHONE_LENGTH)
        if len(digits) != PHONE_LENGTH:
            raise PydanticCustomError("phone_length", PHONE_ERROR)
        return digits

    @model_validator(mode="after")
    def _check_type_specific_fields(self) -> "RecordSubmission":
        if not is_known_district(self.province, self.district):
            raise PydanticCustomError(
                "district_mismatch",
                "Xã/phường không thuộc tỉnh/thành phố đã chọn.",
            )
        if self.record_type is ResidenceType.PERMANENT:
            # permanent residence has neither question
            self.temporary_status = ""
            self.election_consent = ""
        elif self.record_type is ResidenceType.TEMPORARY:
            if self.temporary_status not in {status.value for status in TemporaryStatus}:
                raise PydanticCustomError("temporary_status", "Vui lòng chọn tình trạng đăng ký tạm trú.")
            if self.election_consent not in {consent.value for consent in ElectionConsent}:
                raise PydanticCustomError("election_consent", "Vui lòng chọn đồng ý hoặc không đồng ý bầu cử.")
        if not self.submitted_at:
            self.submitted_at = datetime.now(timezone.utc).isoformat()
        return self


class RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str = Field(..., alias="hoTen")
    date_of_birth: str = Field(..., alias="ngaySinh")
    national_id: str = Field(..., alias="cccd")
    district: str = Field(..., alias="hkttXaPhuong")
    province: str = Field(..., alias="hkttTinhTP")
    current_address: str = Field(..., alias="noiOHienTai")
    temporary_status: str = Field("", alias="dangKyTamTru")
    occupation: str = Field(..., alias="ngheNghiep")
    phone: str = Field(..., alias="soDienThoai")
    submitted_at: str = Field("", alias="dauThoiGian")
    election_consent: str = Field("", alias="dangKyBauCuTanLap")
    record_type: Optional[ResidenceType] = Field(None, alias="loaiCuTru")
    check_date: str = Field("", alias="ngayKiemTra")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @classmethod
    def from_record(cls, record: ResidenceRecord) -> "RecordModel":
        return cls(
            id=record.id,
            full_name=record.full_name,
            date_of_birth=record.date_of_birth,
            national_id=record.national_id,
            district=record.district,
            province=record.province,
            current_address=record.current_address,
            temporary_status=record.temporary_status,
            occupation=record.occupation,
            phone=record.phone,
            submitted_at=record.submitted_at,
            election_consent=record.election_consent,
            record_type=record.record_type,
            check_date=record.check_date,
            created_at=record.created_at,
        )


class RecordListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    record_type: ResidenceType = Field(..., alias="recordType")
    total: int
    items: List[RecordModel]


class CreateRecordResponse(BaseModel):
    id: str
    message: str = "Thêm bản ghi thành công!"
