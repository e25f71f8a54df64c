"""Shared pytest fixtures for Silhouette tests."""
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Generator

import pytest
import yaml

from silhouette.infrastructure.config_manager import ConfigManager, set_global_config
from silhouette.integration.preloader import set_default_loader


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample Silhouette configuration."""
    return {
        "silhouette": {
            "logging": {"level": "DEBUG"},
            "representation": {"collection_name": "results", "max_workers": 2},
            "serialization": {"json_indent": 2, "sort_keys": True, "xml_root": "response"},
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "silhouette.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def config() -> ConfigManager:
    """Global configuration without environment overrides."""
    manager = ConfigManager(load_environment=False)
    set_global_config(manager)
    return manager


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset global configuration and loaders between tests."""
    set_global_config(ConfigManager(load_environment=False))
    set_default_loader(None)
    yield
    set_global_config(None)
    set_default_loader(None)


@pytest.fixture
def person():
    """A person object with plain attributes."""
    return SimpleNamespace(name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def classroom():
    """A classroom with one teacher and four students."""
    teacher = SimpleNamespace(name="Charles Babbage", email="charles@example.com")
    students = [SimpleNamespace(name=f"Student {i}", email=f"student{i}@example.com") for i in range(4)]
    return SimpleNamespace(teacher=teacher, students=students)
