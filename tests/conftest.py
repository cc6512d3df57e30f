from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.fake_git import FakeGit


@pytest.fixture
def fake_git(tmp_path: Path) -> FakeGit:
    """Provide scripted git history rooted at the pytest tmp_path."""
    return FakeGit(tmp_path)


@pytest.fixture(autouse=True)
def _reset_relcat_logger() -> Iterator[None]:
    """Undo configure_logging so caplog keeps seeing relcat records."""
    yield
    logger = logging.getLogger("relcat")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
