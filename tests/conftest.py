"""Shared pytest setup.

Puts the repository root on ``sys.path`` so ``import workflowkit`` works
without an install, and restores the package logger after every test because
debug-mode workflows attach a stderr handler to it.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from workflowkit.logs import setup_logging  # noqa: E402


@pytest.fixture(autouse=True)
def quiet_package_logger():
    yield
    setup_logging(False)
