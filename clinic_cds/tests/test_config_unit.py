from clinic_cds.evidence.table import default_evidence_path
from clinic_cds.internal_core.config import load_config

_ENV_NAMES = (
    "CDS_LOG_LEVEL",
    "CDS_EVIDENCE_PATH",
    "CDS_CORS_ALLOW_ORIGINS",
    "CDS_MAX_TEXT_CHARS",
    "CDS_INCLUDE_TRACE",
)


def test_load_config_defaults(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    config = load_config()
    assert config.CDS_LOG_LEVEL == "INFO"
    assert config.CDS_CORS_ALLOW_ORIGINS == ("*",)
    assert config.CDS_MAX_TEXT_CHARS == 20000
    assert config.CDS_INCLUDE_TRACE is True
    assert config.evidence_path() == default_evidence_path()
    assert config.uses_packaged_evidence() is True


def test_load_config_reads_environment(monkeypatch, tmp_path) -> None:
    custom = tmp_path / "custom_evidence.json"
    monkeypatch.setenv("CDS_LOG_LEVEL", "debug")
    monkeypatch.setenv("CDS_EVIDENCE_PATH", str(custom))
    monkeypatch.setenv("CDS_CORS_ALLOW_ORIGINS", "http://localhost:3000, https://clinic.example")
    monkeypatch.setenv("CDS_MAX_TEXT_CHARS", "500")
    monkeypatch.setenv("CDS_INCLUDE_TRACE", "0")
    config = load_config()
    assert config.CDS_LOG_LEVEL == "DEBUG"
    assert config.CDS_CORS_ALLOW_ORIGINS == ("http://localhost:3000", "https://clinic.example")
    assert config.CDS_MAX_TEXT_CHARS == 500
    assert config.CDS_INCLUDE_TRACE is False
    assert config.evidence_path() == custom.resolve()
    assert config.uses_packaged_evidence() is False
