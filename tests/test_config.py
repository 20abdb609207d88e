"""
Unit tests for configuration loading.

Tests:
- YAML loading and dot-notation lookup
- Bucket settings defaults and environment overrides
- In-memory set and reload
"""
import pytest

from limiter.utils.config import Config, BUCKET_DEFAULTS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep overrides from the surrounding environment out of these tests"""
    for key in ("LIMITER_REFILL_RATE", "LIMITER_CAPACITY", "LIMITER_TICK_INTERVAL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "limiter:\n"
        "  refill_rate: 3\n"
        "  capacity: 9\n"
        "demo:\n"
        "  requests: 4\n"
    )
    return path


class TestConfigLoading:
    """YAML file handling"""

    def test_dot_notation(self, config_file):
        """Nested keys resolve with dots"""
        cfg = Config(str(config_file))
        assert cfg.get("limiter.capacity") == 9
        assert cfg.get("demo.requests") == 4

    def test_missing_key_default(self, config_file):
        """Unknown keys fall back to the default"""
        cfg = Config(str(config_file))
        assert cfg.get("limiter.nope", 42) == 42
        assert cfg.get("limiter.capacity.deeper", "x") == "x"

    def test_missing_file(self, tmp_path):
        """Missing file gives an empty config"""
        cfg = Config(str(tmp_path / "absent.yaml"))
        assert cfg.config == {}
        assert cfg.bucket_settings() == BUCKET_DEFAULTS

    def test_path_from_env(self, config_file, monkeypatch):
        """LIMITER_CONFIG selects the file"""
        monkeypatch.setenv("LIMITER_CONFIG", str(config_file))
        cfg = Config()
        assert cfg.config_path == config_file

    def test_set_and_reload(self, config_file):
        """set is in-memory only, reload restores the file"""
        cfg = Config(str(config_file))
        cfg.set("limiter.capacity", 1)
        cfg.set("new.section.key", "v")
        assert cfg.get("limiter.capacity") == 1
        assert cfg.get("new.section.key") == "v"
        cfg.reload()
        assert cfg.get("limiter.capacity") == 9
        assert cfg.get("new.section.key") is None


class TestBucketSettings:
    """Bucket parameters with defaults and env overrides"""

    def test_file_values_with_defaults(self, config_file):
        """Keys absent from the file use the defaults"""
        settings = Config(str(config_file)).bucket_settings()
        assert settings == {"refill_rate": 3, "capacity": 9, "tick_interval": 1.0}

    def test_env_overrides(self, config_file, monkeypatch):
        """Environment wins over the file"""
        monkeypatch.setenv("LIMITER_CAPACITY", "20")
        monkeypatch.setenv("LIMITER_TICK_INTERVAL", "0.25")
        settings = Config(str(config_file)).bucket_settings()
        assert settings["capacity"] == 20
        assert settings["tick_interval"] == 0.25
        assert settings["refill_rate"] == 3

    def test_bad_env_value(self, config_file, monkeypatch):
        """Unparseable override raises ValueError"""
        monkeypatch.setenv("LIMITER_REFILL_RATE", "fast")
        with pytest.raises(ValueError, match="LIMITER_REFILL_RATE"):
            Config(str(config_file)).bucket_settings()
