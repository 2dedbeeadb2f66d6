"""Domain models for residence review records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..db.store import Document


class ResidenceType(str, Enum):
    """Record type discriminant, stored under ``loaiCuTru``."""

    TEMPORARY = "tamTru"
    PERMANENT = "thuongTru"


class TemporaryStatus(str, Enum):
    DONE = "rồi"
    NOT_DONE = "chưa"
    UNDETERMINED = "không xác định"


class ElectionConsent(str, Enum):
    AGREE = "Đồng ý"
    DISAGREE = "Không đồng ý"


# Document keys as persisted in every collection, legacy included.
RECORD_TYPE_FIELD = "loaiCuTru"
CREATED_AT_FIELD = "createdAt"
CHECK_DATE_FIELD = "ngayKiemTra"

# Fractional seconds of any length, as PostgREST trims trailing zeros.
_FRACTION = re.compile(r"\.([0-9]+)")


def _pad_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a stored creation timestamp into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            text = _FRACTION.sub(_pad_fraction, value.strip().replace("Z", "+00:00"), count=1)
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    elif isinstance(value, (int, float)):
        # epoch milliseconds
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


@dataclass(slots=True)
class ResidenceRecord:
    """A persisted residence entry as read back from the store."""

    id: str
    record_type: Optional[ResidenceType]
    full_name: str
    date_of_birth: str
    national_id: str
    district: str
    province: str
    current_address: str
    temporary_status: str
    occupation: str
    phone: str
    submitted_at: str
    election_consent: str
    check_date: str
    created_at: Optional[datetime]
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Document, record_type: ResidenceType | None = None) -> "ResidenceRecord":
        """Build a record; ``record_type`` overrides whatever the document carries."""
        data = document.data
        if record_type is None:
            stored = data.get(RECORD_TYPE_FIELD)
            try:
                record_type = ResidenceType(stored) if stored else None
            except ValueError:
                record_type = None
        return cls(
            id=document.id,
            record_type=record_type,
            full_name=_text(data, "hoTen"),
            date_of_birth=_text(data, "ngaySinh"),
            national_id=_text(data, "cccd"),
            district=_text(data, "hkttXaPhuong"),
            province=_text(data, "hkttTinhTP"),
            current_address=_text(data, "noiOHienTai"),
            temporary_status=_text(data, "dangKyTamTru"),
            occupation=_text(data, "ngheNghiep"),
            phone=_text(data, "soDienThoai"),
            submitted_at=_text(data, "dauThoiGian"),
            election_consent=_text(data, "dangKyBauCuTanLap"),
            check_date=_text(data, CHECK_DATE_FIELD),
            created_at=parse_timestamp(data.get(CREATED_AT_FIELD)),
            raw=dict(data),
        )
