"""Pytest configuration and fixtures for jsondb tests."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from jsondb.adapters.outbound import JsonFileStore
from jsondb.application import DatabaseEngine
from jsondb.infrastructure.config import Config, EngineConfig, StorageConfig
from jsondb.infrastructure.container import Container
from jsondb.infrastructure.metrics import MetricsRegistry

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Path of the JSON document inside a not-yet-created data directory."""
    return temp_dir / "data" / "db.json"


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with temporary directories."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "data",
            sync_mode="none",  # Faster for tests
        ),
        engine=EngineConfig(update_policy="error"),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def store(db_path: Path, metrics_registry: MetricsRegistry) -> JsonFileStore:
    """Provide a store over a fresh document path."""
    return JsonFileStore(db_path, sync_mode="none", metrics=metrics_registry)


@pytest.fixture
def engine(store: JsonFileStore, metrics_registry: MetricsRegistry) -> DatabaseEngine:
    """Provide an engine over the test store."""
    return DatabaseEngine(store, metrics=metrics_registry)


@pytest.fixture
def container_reset() -> Generator[None, None, None]:
    """Make sure no container singleton leaks between tests."""
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def read_document(db_path: Path) -> Callable[[], Any]:
    """Read the JSON document as written on disk."""

    def _read() -> Any:
        return json.loads(db_path.read_text(encoding="utf-8"))

    return _read


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "property: Property-style behavioral tests")
