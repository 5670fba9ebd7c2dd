"""Tests for configuration loading."""

import pytest

from prtriage_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["security_author"] == "github-advanced-security"
    assert config["alert_lookup_workers"] == 1
    assert config["request_timeout"] == 30
    assert config["output"] == "json"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("alert_lookup_workers: 4\noutput: table\n")
    config = load_config(config_path=str(cfg))
    assert config["alert_lookup_workers"] == 4
    assert config["output"] == "table"


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["security_author"] == "github-advanced-security"


def test_non_mapping_config_file_rejected(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(config_path=str(cfg))


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("output: table\n")
    config = load_config(config_path=str(cfg), cli_overrides={"output": "json"})
    assert config["output"] == "json"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("security_author: custom-scanner\n")
    config = load_config(config_path=str(cfg), cli_overrides={"security_author": None})
    assert config["security_author"] == "custom-scanner"


def test_github_token_loaded_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"


def test_github_token_none_when_unset(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] is None


def test_defaults_are_not_shared_between_loads(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["output"] = "table"
    assert config_b["output"] == "json"


@pytest.mark.parametrize("value", ["0", "-2", "abc", "true", "1.5"])
def test_invalid_alert_lookup_workers_rejected(tmp_path, value):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text(f"alert_lookup_workers: {value}\n")
    with pytest.raises(ValueError, match="alert_lookup_workers"):
        load_config(config_path=str(cfg))


def test_invalid_request_timeout_rejected(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("request_timeout: 0\n")
    with pytest.raises(ValueError, match="request_timeout"):
        load_config(config_path=str(cfg))


def test_unknown_output_format_rejected(tmp_path):
    cfg = tmp_path / ".triage.yml"
    cfg.write_text("output: xml\n")
    with pytest.raises(ValueError, match="output"):
        load_config(config_path=str(cfg))
