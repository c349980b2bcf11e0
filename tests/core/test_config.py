"""Tests for CartConfig and load_config."""

import pytest
from pydantic import ValidationError

from core.config import CartConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """No CART_* variables leak in from the developer's shell."""
    for name in CartConfig.model_fields:
        monkeypatch.delenv(f"CART_{name.upper()}", raising=False)


@pytest.fixture
def no_env_file(tmp_path):
    return tmp_path / "missing.env"


class TestCartConfigDefaults:

    def test_defaults(self):
        config = CartConfig()

        assert config.coupon_timeout_seconds == 3.0
        assert config.storage_key_prefix == "cart"
        assert config.snapshot_ttl_seconds == 30 * 24 * 3600
        assert config.shipping_cents == 0
        assert config.valkey_url is None
        assert config.coupon_directory_url is None
        assert config.max_sessions == 10_000

    @pytest.mark.parametrize("field,value", [
        ("coupon_timeout_seconds", 0),
        ("coupon_timeout_seconds", 31),
        ("snapshot_ttl_seconds", 10),
        ("shipping_cents", -1),
        ("storage_key_prefix", ""),
        ("max_sessions", 0),
    ])
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            CartConfig(**{field: value})


class TestLoadConfig:

    def test_reads_prefixed_environment(self, monkeypatch, no_env_file):
        monkeypatch.setenv("CART_COUPON_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("CART_VALKEY_URL", "redis://localhost:6379/2")
        monkeypatch.setenv("CART_SHIPPING_CENTS", "499")

        config = load_config(no_env_file)

        assert config.coupon_timeout_seconds == 5.0
        assert config.valkey_url == "redis://localhost:6379/2"
        assert config.shipping_cents == 499

    @pytest.mark.parametrize("raw", ["", "none", "None"])
    def test_none_values(self, monkeypatch, no_env_file, raw):
        monkeypatch.setenv("CART_SNAPSHOT_TTL_SECONDS", raw)
        assert load_config(no_env_file).snapshot_ttl_seconds is None

    def test_invalid_value(self, monkeypatch, no_env_file):
        monkeypatch.setenv("CART_COUPON_TIMEOUT_SECONDS", "forever")
        with pytest.raises(ValidationError):
            load_config(no_env_file)

    def test_env_file_loaded(self, monkeypatch, tmp_path):
        # setenv then delenv so monkeypatch removes what load_dotenv writes
        monkeypatch.setenv("CART_STORAGE_KEY_PREFIX", "placeholder")
        monkeypatch.delenv("CART_STORAGE_KEY_PREFIX")
        env_file = tmp_path / ".env"
        env_file.write_text("CART_STORAGE_KEY_PREFIX=shop\n")

        assert load_config(env_file).storage_key_prefix == "shop"

    def test_environment_wins_over_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CART_STORAGE_KEY_PREFIX", "from-shell")
        env_file = tmp_path / ".env"
        env_file.write_text("CART_STORAGE_KEY_PREFIX=from-file\n")

        assert load_config(env_file).storage_key_prefix == "from-shell"
