"""Tests for CellgraphSettings and the global settings instance."""

import threading

import pytest

from cellgraph.settings import CellgraphSettings
from cellgraph.settings import get_global_settings
from cellgraph.settings import set_global_settings


class TestCellgraphSettings:
    """Tests for settings validation."""

    def test_defaults(self) -> None:
        settings = CellgraphSettings()
        assert settings.max_concurrency is None
        assert settings.strict_validation is False
        assert settings.download_timeout == 30.0
        assert settings.run_timeout is None
        assert settings.offload_sync_compute is False

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"max_concurrency": 0}, "max_concurrency must be a positive integer"),
            ({"download_timeout": 0}, "download_timeout must be positive"),
            ({"run_timeout": -1.0}, "run_timeout must be positive"),
        ],
    )
    def test_invalid_values(self, kwargs, message) -> None:
        with pytest.raises(ValueError, match=message):
            CellgraphSettings(**kwargs)

    def test_frozen(self) -> None:
        settings = CellgraphSettings()
        with pytest.raises(AttributeError):
            settings.max_concurrency = 3  # type: ignore[misc]


class TestGlobalSettings:
    """Tests for the global settings instance."""

    def test_set_and_get(self) -> None:
        custom = CellgraphSettings(max_concurrency=2)
        set_global_settings(custom)
        assert get_global_settings() is custom

    def test_concurrent_access(self) -> None:
        results = []

        def worker(n):
            set_global_settings(CellgraphSettings(max_concurrency=n))
            results.append(get_global_settings())

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(isinstance(r, CellgraphSettings) for r in results)
