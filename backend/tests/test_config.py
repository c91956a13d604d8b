"""
配置、计数器与命令行入口测试
"""

import threading

import pytest
from pydantic import ValidationError

from imgcache.__main__ import build_parser
from imgcache.config import (
    DEFAULT_ADDRESS,
    DEFAULT_CACHE_DIR,
    ImageCacheSettings,
    parse_address,
)
from imgcache.metrics import REQUESTS_ERROR, REQUESTS_SUCCESS, InMemoryMetrics


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in (
            "IMGCACHE_ADDRESS",
            "IMAGE_CACHE_DIR",
            "IMAGE_FETCH_TIMEOUT_SECONDS",
            "IMAGE_CACHE_ENABLED",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = ImageCacheSettings.from_env()

        assert settings.address == DEFAULT_ADDRESS == ":8081"
        assert settings.cache_dir == DEFAULT_CACHE_DIR
        assert settings.fetch_timeout == 10.0
        assert settings.cache_enabled is True
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("IMGCACHE_ADDRESS", "127.0.0.1:9000")
        monkeypatch.setenv("IMAGE_CACHE_DIR", "/tmp/imgs")
        monkeypatch.setenv("IMAGE_FETCH_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("IMAGE_CACHE_ENABLED", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = ImageCacheSettings.from_env()

        assert settings.address == "127.0.0.1:9000"
        assert settings.cache_dir == "/tmp/imgs"
        assert settings.fetch_timeout == 2.5
        assert settings.cache_enabled is False
        assert settings.log_level == "DEBUG"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ImageCacheSettings(fetch_timeout=0)


class TestParseAddress:

    @pytest.mark.parametrize("address, expected", [
        (":8081", ("0.0.0.0", 8081)),
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        ("localhost:80", ("localhost", 80)),
        ("[::1]:8081", ("::1", 8081)),
    ])
    def test_valid(self, address, expected):
        assert parse_address(address) == expected

    @pytest.mark.parametrize("address", ["8081", "host:", "host:http", ":70000"])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            parse_address(address)


class TestCommandLine:

    def test_address_flag(self):
        args = build_parser().parse_args(["-address", ":9090"])
        assert args.address == ":9090"

    def test_long_flags(self):
        args = build_parser().parse_args(["--address", "0.0.0.0:1", "--cache-dir", "/tmp/c"])
        assert args.address == "0.0.0.0:1"
        assert args.cache_dir == "/tmp/c"

    def test_flags_default_to_none(self):
        args = build_parser().parse_args([])
        assert args.address is None
        assert args.cache_dir is None


class TestMetrics:

    def test_counts(self):
        metrics = InMemoryMetrics()
        metrics.increment(REQUESTS_SUCCESS)
        metrics.increment(REQUESTS_SUCCESS)
        metrics.increment(REQUESTS_ERROR, 3)

        assert metrics.get(REQUESTS_SUCCESS) == 2
        assert metrics.get(REQUESTS_ERROR) == 3
        assert metrics.get("unknown") == 0

    def test_snapshot_is_copy(self):
        metrics = InMemoryMetrics()
        snapshot = metrics.snapshot()
        snapshot[REQUESTS_SUCCESS] = 100
        assert metrics.get(REQUESTS_SUCCESS) == 0

    def test_concurrent_increments(self):
        metrics = InMemoryMetrics()

        def worker():
            for _ in range(1000):
                metrics.increment(REQUESTS_SUCCESS)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert metrics.get(REQUESTS_SUCCESS) == 8000
