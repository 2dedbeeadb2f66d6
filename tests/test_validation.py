import pytest
from pydantic import ValidationError

from src.rasoat.models.domain import ResidenceType
from src.rasoat.schemas.records import RecordSubmission
from src.rasoat.services.records.validation import (
    NATIONAL_ID_ERROR,
    PHONE_ERROR,
    digits_only,
    mask_digits,
    normalize_national_id,
    normalize_phone,
)

from conftest import submission_payload


def _messages(exc_info) -> list[str]:
    return [error["msg"] for error in exc_info.value.errors()]


def test_digits_only_strips_everything_but_digits() -> None:
    assert digits_only("0912-345 678") == "0912345678"
    assert digits_only("abc") == ""
    assert digits_only(None) == ""


def test_mask_digits_truncates_to_max_length() -> None:
    assert mask_digits("1234567890123456", 12) == "123456789012"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123456789012", "123456789012"),
        ("123 456 789 012", "123456789012"),
        ("1234-5678-9012-99", "123456789012"),
    ],
)
def test_normalize_national_id_accepts_twelve_digits_after_masking(raw: str, expected: str) -> None:
    assert normalize_national_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "12345", "12345678901a", "CCCD"])
def test_normalize_national_id_rejects_short_input(raw: str) -> None:
    with pytest.raises(ValueError, match=NATIONAL_ID_ERROR):
        normalize_national_id(raw)


def test_normalize_phone_rules() -> None:
    assert normalize_phone("(091) 234-5678") == "0912345678"
    assert normalize_phone("09123456789") == "0912345678"
    with pytest.raises(ValueError, match=PHONE_ERROR):
        normalize_phone("091234567")


def test_submission_normalizes_id_and_phone() -> None:
    submission = RecordSubmission.model_validate(
        submission_payload(cccd="1234 5678 9012", soDienThoai="0912.345.678")
    )

    assert submission.national_id == "123456789012"
    assert submission.phone == "0912345678"
    assert submission.record_type is ResidenceType.TEMPORARY


def test_submission_rejects_bad_national_id_with_form_message() -> None:
    with pytest.raises(ValidationError) as exc_info:
        RecordSubmission.model_validate(submission_payload(cccd="12345"))

    assert NATIONAL_ID_ERROR in _messages(exc_info)


def test_submission_rejects_bad_phone_with_form_message() -> None:
    with pytest.raises(ValidationError) as exc_info:
        RecordSubmission.model_validate(submission_payload(soDienThoai="12345"))

    assert PHONE_ERROR in _messages(exc_info)


def test_temporary_submission_requires_status_and_consent() -> None:
    with pytest.raises(ValidationError):
        RecordSubmission.model_validate(submission_payload(dangKyTamTru=""))
    with pytest.raises(ValidationError):
        RecordSubmission.model_validate(submission_payload(dangKyBauCuTanLap="có"))


def test_permanent_submission_clears_temporary_only_fields() -> None:
    submission = RecordSubmission.model_validate(
        submission_payload(loaiCuTru="thuongTru", dangKyTamTru="rồi", dangKyBauCuTanLap="Đồng ý")
    )

    assert submission.record_type is ResidenceType.PERMANENT
    assert submission.temporary_status == ""
    assert submission.election_consent == ""


def test_district_must_belong_to_known_province() -> None:
    with pytest.raises(ValidationError) as exc_info:
        RecordSubmission.model_validate(
            submission_payload(hkttTinhTP="Tỉnh Bình Dương", hkttXaPhuong="Quận Ba Đình")
        )

    assert "Xã/phường không thuộc tỉnh/thành phố đã chọn." in _messages(exc_info)


def test_unknown_province_is_not_checked() -> None:
    submission = RecordSubmission.model_validate(
        submission_payload(hkttTinhTP="Tỉnh Lâm Đồng", hkttXaPhuong="Thành phố Đà Lạt")
    )

    assert submission.province == "Tỉnh Lâm Đồng"


def test_submission_stamps_submission_time_when_missing() -> None:
    submission = RecordSubmission.model_validate(submission_payload())

    assert submission.submitted_at.endswith("+00:00")


def test_submission_without_record_type_is_allowed_by_schema() -> None:
    payload = submission_payload()
    payload.pop("loaiCuTru")

    submission = RecordSubmission.model_validate(payload)

    assert submission.record_type is None


@pytest.mark.parametrize("raw", ["１２３４５６７８９０１２", "١٢٣٤٥٦٧٨٩٠١٢"])
def test_non_ascii_digits_are_stripped(raw: str) -> None:
    assert digits_only(raw) == ""
    with pytest.raises(ValueError, match=NATIONAL_ID_ERROR):
        normalize_national_id(raw)


def test_submission_rejects_full_width_and_arabic_indic_digits() -> None:
    with pytest.raises(ValidationError) as exc_info:
        RecordSubmission.model_validate(
            submission_payload(cccd="١٢٣٤٥٦٧٨٩٠١٢", soDienThoai="０９１２３４５６７８")
        )

    messages = _messages(exc_info)
    assert NATIONAL_ID_ERROR in messages
    assert PHONE_ERROR in messages


def test_mixed_digits_keep_only_ascii_ones() -> None:
    assert digits_only("09１2 345 678") == "092345678"
