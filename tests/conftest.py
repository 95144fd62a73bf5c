"""Shared pytest fixtures for dirules tests."""

import pytest

from dirules import Container
from dirules._internal.parameters import ParameterInspector
from dirules._internal.type_catalog import RuntimeTypeCatalog


@pytest.fixture()
def container() -> Container:
    """Fresh container with only the wildcard rule."""
    return Container()


@pytest.fixture()
def type_catalog() -> RuntimeTypeCatalog:
    """Empty runtime type catalog."""
    return RuntimeTypeCatalog()


@pytest.fixture()
def parameter_inspector() -> ParameterInspector:
    """ParameterInspector instance."""
    return ParameterInspector()


@pytest.fixture(params=[False, True], ids=["not_shared", "shared"])
def shared(request: pytest.FixtureRequest) -> bool:
    """Run a test once with non-shared and once with shared defaults."""
    return request.param
