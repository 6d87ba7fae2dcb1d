"""Shared pytest fixtures for markwire tests."""

import pytest

from markwire.injector import Injector
from tests.fakes import FakeContainer


@pytest.fixture()
def container() -> FakeContainer:
    """Empty recording container."""
    return FakeContainer()


@pytest.fixture()
def injector(container: FakeContainer) -> Injector:
    """Injector backed by the recording container."""
    return Injector(container)
