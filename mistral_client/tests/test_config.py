from __future__ import annotations

import pytest
from pydantic import ValidationError

from mistral_client.config import ClientConfig, load_client_config
from mistral_client.config.defaults import (
    BASE_API_URL,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_RETRY_WAIT_MAX_SECONDS,
    DEFAULT_RETRY_WAIT_MIN_SECONDS,
)


def test_defaults():
    cfg = load_client_config()
    assert cfg.base_url == BASE_API_URL  # nosec B101
    assert cfg.max_retries == 3  # nosec B101
    assert cfg.retry_status_codes == DEFAULT_RETRY_STATUS_CODES  # nosec B101
    assert cfg.cache_enabled is False  # nosec B101
    assert cfg.api_key == ""  # nosec B101


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MISTRAL_API_KEY", "sk-live")  # pragma: allowlist secret
    monkeypatch.setenv("MISTRAL_BASE_URL", "http://localhost:8080/")
    monkeypatch.setenv("MISTRAL_MAX_RETRIES", "5")
    monkeypatch.setenv("MISTRAL_RETRY_STATUS_CODES", "429, 503")
    monkeypatch.setenv("MISTRAL_VERBOSE", "true")

    cfg = load_client_config()
    assert cfg.api_key == "sk-live"  # nosec B101
    assert cfg.base_url == "http://localhost:8080"  # nosec B101
    assert cfg.max_retries == 5  # nosec B101
    assert cfg.retry_status_codes == (429, 503)  # nosec B101
    assert cfg.verbose is True  # nosec B101


def test_overrides_win_over_env_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("MISTRAL_MAX_RETRIES", "5")
    cfg = load_client_config({"max_retries": 1, "base_url": None})
    assert cfg.max_retries == 1  # nosec B101
    assert cfg.base_url == BASE_API_URL  # nosec B101


def test_placeholder_key_is_dropped(monkeypatch):
    monkeypatch.setenv("MISTRAL_API_KEY", "changeme")
    assert load_client_config().api_key == ""  # nosec B101
    assert ClientConfig(api_key="your-key-placeholder").api_key == ""  # nosec B101


def test_zero_wait_bounds_select_defaults():
    cfg = ClientConfig(retry_wait_min_seconds=0, retry_wait_max_seconds=0)
    assert cfg.retry_wait_min_seconds == DEFAULT_RETRY_WAIT_MIN_SECONDS  # nosec B101
    assert cfg.retry_wait_max_seconds == DEFAULT_RETRY_WAIT_MAX_SECONDS  # nosec B101


def test_inverted_wait_bounds_are_swapped():
    cfg = ClientConfig(retry_wait_min_seconds=4.0, retry_wait_max_seconds=2.0)
    assert (cfg.retry_wait_min_seconds, cfg.retry_wait_max_seconds) == (2.0, 4.0)  # nosec B101


def test_empty_status_codes_select_defaults():
    assert ClientConfig(retry_status_codes=[]).retry_status_codes == DEFAULT_RETRY_STATUS_CODES  # nosec B101


def test_yaml_file_with_section(tmp_path, monkeypatch):
    path = tmp_path / "client.yaml"
    path.write_text(
        "mistral:\n"
        "  base_url: https://eu.proxy.internal\n"
        "  max_retries: 7\n"
        "  retry_status_codes: [503]\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("MISTRAL_CONFIG_FILE", str(path))
    monkeypatch.setenv("MISTRAL_MAX_RETRIES", "2")

    cfg = load_client_config()
    assert cfg.base_url == "https://eu.proxy.internal"  # nosec B101
    assert cfg.retry_status_codes == (503,)  # nosec B101
    assert cfg.max_retries == 2  # nosec B101


def test_flat_json_file(tmp_path, monkeypatch):
    path = tmp_path / "client.json"
    path.write_text('{"timeout_seconds": 12.5}', encoding="utf-8")
    monkeypatch.setenv("MISTRAL_CONFIG_FILE", str(path))
    assert load_client_config().timeout_seconds == 12.5  # nosec B101


def test_missing_config_file_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("MISTRAL_CONFIG_FILE", str(tmp_path / "absent.yaml"))
    assert load_client_config().max_retries == 3  # nosec B101


def test_cache_dir_enables_cache(tmp_path, monkeypatch):
    monkeypatch.setenv("MISTRAL_CACHE_DIR", str(tmp_path))
    cfg = load_client_config()
    assert cfg.cache_enabled is True  # nosec B101
    assert cfg.cache_dir == str(tmp_path)  # nosec B101
    assert ClientConfig(cache_dir=str(tmp_path), cache_enabled=False).cache_enabled is False  # nosec B101


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timeout_seconds": 0},
        {"max_retries": -1},
        {"retry_status_codes": [99]},
        {"base_url": "  "},
        {"rate_limiter": object()},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValidationError):
        ClientConfig(**kwargs)
