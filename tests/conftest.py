"""
Pytest configuration and shared fixtures.

Skips GUI tests when PySide6 is not installed so the default CI matrix can
still run core tests, and forces Qt onto the offscreen platform.
"""

import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "gui: tests that require olsearch[gui] (PySide6).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    try:
        import PySide6  # noqa: F401

        has_pyside = True
    except ImportError:
        has_pyside = False

    for item in items:
        path = str(getattr(item, "path", None) or getattr(item, "fspath", None) or "")
        if "test_gui" in path:
            if not has_pyside:
                item.add_marker(
                    pytest.mark.skip(reason="PySide6 not installed; pip install olsearch[gui,dev]")
                )
            else:
                item.add_marker(pytest.mark.gui)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("OLSEARCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_olsearch_logger():
    logger = logging.getLogger("olsearch")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
