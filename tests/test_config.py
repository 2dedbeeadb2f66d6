from pathlib import Path

from src.rasoat.config import Settings


def test_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.temporary_collection == "tam_tru_records"
    assert config.legacy_record_types == ("tamTru",)
    assert config.regions_file.is_absolute()
    assert "data_root" not in Settings.model_fields


def test_tuple_settings_parse_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("RASOAT_LEGACY_RECORD_TYPES", '["tamTru", "thuongTru"]')
    monkeypatch.setenv("RASOAT_AUTHORIZED_EMAILS", "a@example.com, b@example.com")
    monkeypatch.setenv("RASOAT_REGIONS_FILE", "~/regions.json")

    config = Settings(_env_file=None)

    assert config.legacy_record_types == ("tamTru", "thuongTru")
    assert config.authorized_emails == ("a@example.com", "b@example.com")
    assert config.regions_file == (Path.home() / "regions.json").resolve()
