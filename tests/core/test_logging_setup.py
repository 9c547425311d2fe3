#!/usr/bin/env python3
import logging

import pytest

from fmdirectives.core.logging_setup import PACKAGE_LOGGER, configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved_level, saved_handlers = logger.level, list(logger.handlers)
    logger.handlers = []
    yield logger
    logger.setLevel(saved_level)
    logger.handlers = saved_handlers


@pytest.mark.parametrize("config, expected", [
    ({"logging": {"level": "debug"}}, logging.DEBUG),
    ({"logging": {"level": "WARNING"}}, logging.WARNING),
    ({"logging": {"level": "LOUD"}}, logging.INFO),
    ({}, logging.INFO),
    (None, logging.INFO),
])
def test_configure_logging_sets_level(package_logger, config, expected):
    assert configure_logging(config) is package_logger
    assert package_logger.level == expected


def test_configure_logging_respects_host_handlers(package_logger):
    root = logging.getLogger()
    host = logging.NullHandler()
    root.addHandler(host)
    try:
        configure_logging({"logging": {"level": "INFO"}})
    finally:
        root.removeHandler(host)
    assert package_logger.handlers == []


def test_configure_logging_adds_single_handler_when_unconfigured(package_logger):
    root = logging.getLogger()
    saved = root.handlers[:]
    root.handlers.clear()
    try:
        configure_logging({})
        configure_logging({})
    finally:
        root.handlers[:] = saved
    assert len(package_logger.handlers) == 1
    assert isinstance(package_logger.handlers[0], logging.StreamHandler)
