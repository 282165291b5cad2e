"""Shared test fixtures."""

import pytest
from unittest.mock import Mock

from reforge.engine.service import AnalysisEngine, Identifier, RenameLocation
from reforge.models import TextSpan


@pytest.fixture
def config():
    """Default project configuration."""
    from reforge.config import ProjectConfig

    return ProjectConfig()


@pytest.fixture
def registry():
    """Empty source registry."""
    from reforge.registry import SourceRegistry

    return SourceRegistry()


@pytest.fixture
def project(config):
    """Project using the real analysis engine."""
    from reforge.project import Project

    return Project(config)


@pytest.fixture
def fake_engine():
    """Analysis engine double whose rename locations are set per test.

    Usage: ``fake_engine.locations = [("a", 4, 3), ...]``
    """
    engine = Mock(spec=AnalysisEngine)
    engine.locations = []

    def find_rename_locations(file_name, position):
        return [
            RenameLocation(path, TextSpan(start, length))
            for path, start, length in engine.locations
        ]

    engine.find_rename_locations.side_effect = find_rename_locations
    engine.get_identifier_at.side_effect = lambda file_name, position: Identifier(
        "symbol", position
    )
    return engine


@pytest.fixture
def fake_project(config, fake_engine):
    """Project wired to the fake engine."""
    from reforge.project import Project

    return Project(config, engine_factory=lambda host: fake_engine)
