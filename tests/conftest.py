"""Shared fixtures for batch_uploader tests."""
import pytest

from tests.fakes import make_items


@pytest.fixture
def items():
    return make_items
