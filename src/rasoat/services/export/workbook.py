"""Excel export of the records list in the official annex layout."""

from __future__ import annotations

import re
from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from ...config import settings
from ...models.domain import ResidenceRecord, ResidenceType, TemporaryStatus

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_THIN = Side(style="thin")
THIN_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)

# (key, width) for columns A..M
COLUMNS: tuple[tuple[str, int], ...] = (
    ("stt", 6),
    ("hoten", 22),
    ("ngaysinh", 16),
    ("sodinhdanh", 20),
    ("xaphuong", 18),
    ("tinh", 18),
    ("noio", 32),
    ("datamtru", 10),
    ("chuatamtru", 10),
    ("nghenghiep", 18),
    ("sdt", 16),
    ("baucu", 12),
    ("ngayGioNhap", 18),
)

HEADER_LABELS = {
    "A3": "STT",
    "B3": "Họ tên",
    "C3": "Ngày, tháng,\n năm sinh",
    "D3": "Số định danh\ncá nhân",
    "E3": "Hộ khẩu thường trú",
    "E4": "Xã/phường",
    "F4": "Tỉnh/thành phố",
    "G3": "Nơi ở hiện tại\n(chi tiết)",
    "H3": "Đã\nĐK\n tạm trú",
    "I3": "Chưa\nĐK\n tạm trú",
    "J3": "Nghề nghiệp",
    "K3": "Số điện thoại",
    "L3": "Đồng ý bầu cử\n tại Tân Uyên",
    "M3": "Ngày giờ\nnhập",
}

_CENTERED_COLUMNS = {1, 3, 4, 8, 9, 12, 13}
_FIRST_DATA_ROW = 5

_SHEETS = {
    ResidenceType.TEMPORARY: ("PHỤ LỤC 1B - TẠM TRÚ", "PHỤ LỤC 1B\nTẠM TRÚ", "PHU_LUC_1B_TAM_TRU"),
    ResidenceType.PERMANENT: ("PHỤ LỤC - THƯỜNG TRÚ", "PHỤ LỤC\nTHƯỜNG TRÚ", "PHU_LUC_THUONG_TRU"),
}

TITLE = "TỔNG RÀ SOÁT KIỂM TRA CƯ TRÚ TRÊN ĐỊA BÀN PHƯỜNG TÂN UYÊN"

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{2})[-/](\d{2})$")
_VN_DATE = re.compile(r"^\d{2}/\d{2}/\d{4}$")


def format_date_dd_mm_yyyy(value: str) -> str:
    """Render yyyy-mm-dd (or yyyy/mm/dd) as dd/mm/yyyy; anything else is returned unchanged."""
    if not value:
        return ""
    text = value.strip()
    if _VN_DATE.match(text):
        return text
    match = _ISO_DATE.match(text)
    if match:
        yyyy, mm, dd = match.groups()
        return f"{dd}/{mm}/{yyyy}"
    return value


def format_created_at(created_at: Optional[datetime], tz_name: str | None = None) -> str:
    if created_at is None:
        return ""
    local = created_at.astimezone(ZoneInfo(tz_name or settings.timezone))
    return local.strftime("%d/%m/%Y %H:%M")


def export_file_name(record_type: ResidenceType, today: datetime) -> str:
    return f"{_SHEETS[record_type][2]}_{today.strftime('%d-%m-%Y')}.xlsx"


def _row_values(index: int, record: ResidenceRecord) -> list:
    return [
        index,
        record.full_name,
        format_date_dd_mm_yyyy(record.date_of_birth),
        record.national_id,
        record.district,
        record.province,
        record.current_address,
        "X" if record.temporary_status == TemporaryStatus.DONE.value else "",
        "X" if record.temporary_status == TemporaryStatus.NOT_DONE.value else "",
        record.occupation,
        record.phone,
        record.election_consent or "-",
        format_created_at(record.created_at),
    ]


def build_records_workbook(
    records: Sequence[ResidenceRecord],
    record_type: ResidenceType,
    *,
    today: datetime | None = None,
) -> Workbook:
    """Lay out the annex sheet: title block, two-level header, one row per record."""
    today = today or datetime.now(ZoneInfo(settings.timezone))
    sheet_title, annex_label, _ = _SHEETS[record_type]

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title[:31]

    for idx, (_, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = width

    sheet.merge_cells("A1:H1")
    sheet["A1"] = TITLE
    sheet["A1"].font = Font(bold=True, size=14)
    sheet["A1"].alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    sheet.merge_cells("I1:J1")
    sheet["I1"] = "Ngày:"
    sheet["I1"].alignment = Alignment(horizontal="right", vertical="center")
    sheet["I1"].font = Font(bold=True)

    sheet.merge_cells("K1:L1")
    sheet["K1"] = today.strftime("%d/%m/%Y")
    sheet["K1"].alignment = Alignment(horizontal="left", vertical="center")

    sheet.merge_cells("J2:L2")
    sheet["J2"] = annex_label
    sheet["J2"].font = Font(bold=True, size=12)
    sheet["J2"].alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    sheet.row_dimensions[1].height = 28
    sheet.row_dimensions[2].height = 26
    sheet.row_dimensions[3].height = 28
    sheet.row_dimensions[4].height = 24

    for column in ("A", "B", "C", "D", "G", "H", "I", "J", "K", "L", "M"):
        sheet.merge_cells(f"{column}3:{column}4")
    sheet.merge_cells("E3:F3")

    for address, label in HEADER_LABELS.items():
        sheet[address] = label

    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in range(3, 5):
        for col in range(1, len(COLUMNS) + 1):
            cell = sheet.cell(row=row, column=col)
            cell.font = Font(bold=True, size=11)
            cell.alignment = header_alignment
            cell.border = THIN_BORDER

    for offset, record in enumerate(records):
        row = _FIRST_DATA_ROW + offset
        for col, value in enumerate(_row_values(offset + 1, record), start=1):
            cell = sheet.cell(row=row, column=col)
            cell.value = value
            cell.border = THIN_BORDER
            cell.alignment = Alignment(
                vertical="center",
                horizontal="center" if col in _CENTERED_COLUMNS else "left",
                wrap_text=col == 7,
            )

    return workbook


def export_records_xlsx(
    records: Sequence[ResidenceRecord],
    record_type: ResidenceType,
    *,
    today: datetime | None = None,
) -> bytes:
    workbook = build_records_workbook(records, record_type, today=today)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
