"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from mirrorshuttle.core.config import ShuttleOptions, validate_options
from mirrorshuttle.core.log import LOGGER_NAME
from mirrorshuttle.filesystem.memory import MemoryFileSystem

MIRROR = "/mirror"
TARGET = "/real"


@pytest.fixture
def memfs() -> MemoryFileSystem:
    """In-memory filesystem with empty mirror and target roots."""
    fs = MemoryFileSystem()
    fs.makedirs(MIRROR)
    fs.makedirs(TARGET)
    return fs


@pytest.fixture
def make_options() -> Callable[..., ShuttleOptions]:
    """Factory for validated options pointing at the test roots."""

    def factory(**overrides: Any) -> ShuttleOptions:
        values: dict[str, Any] = {"mirror": MIRROR, "target": TARGET}
        values.update(overrides)
        return validate_options(ShuttleOptions(**values))

    return factory


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging between tests."""
    logger = logging.getLogger(LOGGER_NAME)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(level)
