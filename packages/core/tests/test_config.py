"""Tests for configuration loading."""

from ciguard_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["threshold"] == 80.0
    assert config["report_path"] == "coverage/diff-cover.json"
    assert config["codeowners_path"] == ".github/CODEOWNERS"
    assert config["override_label"] == "coverage-override"
    assert config["enable_collapse"] is True


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".ciguard.yml"
    cfg.write_text("threshold: 90\noverride_label: skip-coverage\n")
    config = load_config(config_path=str(cfg))
    assert config["threshold"] == 90
    assert config["override_label"] == "skip-coverage"


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".ciguard.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["threshold"] == 80.0


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".ciguard.yml"
    cfg.write_text("threshold: 90\n")
    config = load_config(config_path=str(cfg), cli_overrides={"threshold": 70})
    assert config["threshold"] == 70


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".ciguard.yml"
    cfg.write_text("threshold: 90\n")
    config = load_config(config_path=str(cfg), cli_overrides={"threshold": None})
    assert config["threshold"] == 90


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("AXIOM_TOKEN", "axiom-token")
    monkeypatch.setenv("CURL_RETRY_MAX", "5")
    monkeypatch.setenv("CURL_RETRY_BASE_DELAY", "2")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["axiom_token"] == "axiom-token"
    assert config["curl_retry_max"] == 5
    assert config["curl_retry_base_delay"] == 2


def test_retry_defaults(monkeypatch):
    monkeypatch.delenv("CURL_RETRY_MAX", raising=False)
    monkeypatch.delenv("CURL_RETRY_BASE_DELAY", raising=False)
    config = load_config(config_path="nonexistent.yml")
    assert config["curl_retry_max"] == 3
    assert config["curl_retry_base_delay"] == 1


def test_invalid_retry_env_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("CURL_RETRY_MAX", "many")
    config = load_config(config_path="nonexistent.yml")
    assert config["curl_retry_max"] == 3
