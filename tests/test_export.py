from datetime import datetime, timezone
from io import BytesIO

from openpyxl import load_workbook

from src.rasoat.models.domain import ResidenceRecord, ResidenceType
from src.rasoat.services.export import (
    build_records_workbook,
    export_file_name,
    export_records_xlsx,
    format_created_at,
    format_date_dd_mm_yyyy,
)
from src.rasoat.services.export.workbook import TITLE

from conftest import make_document

TODAY = datetime(2026, 3, 9, 10, 0)


def _record(doc_id: str, **fields) -> ResidenceRecord:
    return ResidenceRecord.from_document(make_document(doc_id, **fields), record_type=ResidenceType.TEMPORARY)


def test_format_date_accepts_iso_and_leaves_other_text() -> None:
    assert format_date_dd_mm_yyyy("1990-05-17") == "17/05/1990"
    assert format_date_dd_mm_yyyy("1990/05/17") == "17/05/1990"
    assert format_date_dd_mm_yyyy("17/05/1990") == "17/05/1990"
    assert format_date_dd_mm_yyyy("năm 1990") == "năm 1990"
    assert format_date_dd_mm_yyyy("") == ""


def test_format_created_at_in_local_time() -> None:
    moment = datetime(2026, 1, 1, 18, 5, tzinfo=timezone.utc)

    assert format_created_at(moment, "Asia/Ho_Chi_Minh") == "02/01/2026 01:05"
    assert format_created_at(None) == ""


def test_export_file_name_per_record_type() -> None:
    assert export_file_name(ResidenceType.TEMPORARY, TODAY) == "PHU_LUC_1B_TAM_TRU_09-03-2026.xlsx"
    assert export_file_name(ResidenceType.PERMANENT, TODAY) == "PHU_LUC_THUONG_TRU_09-03-2026.xlsx"


def test_workbook_header_layout() -> None:
    sheet = build_records_workbook([], ResidenceType.TEMPORARY, today=TODAY).active

    merged = {str(cell_range) for cell_range in sheet.merged_cells.ranges}
    assert {"A1:H1", "I1:J1", "K1:L1", "J2:L2", "E3:F3", "A3:A4", "M3:M4"} <= merged
    assert sheet["A1"].value == TITLE
    assert sheet["K1"].value == "09/03/2026"
    assert sheet["J2"].value == "PHỤ LỤC 1B\nTẠM TRÚ"
    assert sheet["E4"].value == "Xã/phường"
    assert sheet["F4"].value == "Tỉnh/thành phố"
    assert sheet.title == "PHỤ LỤC 1B - TẠM TRÚ"


def test_exported_rows_follow_record_order() -> None:
    records = [
        _record(
            "a",
            created_at=1767225600,
            hoTen="Trần Thị B",
            ngaySinh="1995-12-01",
            dangKyTamTru="chưa",
            dangKyBauCuTanLap="Không đồng ý",
            soDienThoai="0987654321",
        ),
        _record("b", hoTen="Lê Văn C", dangKyTamTru="rồi"),
    ]

    workbook = load_workbook(BytesIO(export_records_xlsx(records, ResidenceType.TEMPORARY, today=TODAY)))
    sheet = workbook.active

    first = [cell.value for cell in sheet[5]]
    assert first[:4] == [1, "Trần Thị B", "01/12/1995", "123456789012"]
    assert first[7:9] == [None, "X"]
    assert first[10:13] == ["0987654321", "Không đồng ý", "01/01/2026 07:00"]

    second = [cell.value for cell in sheet[6]]
    assert second[0] == 2
    assert second[7] == "X"
    assert second[11] == "-"
    assert sheet.max_row == 6


def test_permanent_export_uses_its_own_annex() -> None:
    sheet = build_records_workbook([], ResidenceType.PERMANENT, today=TODAY).active

    assert sheet.title == "PHỤ LỤC - THƯỜNG TRÚ"
    assert sheet["J2"].value == "PHỤ LỤC\nTHƯỜNG TRÚ"
