from __future__ import annotations

import logging

import pytest

from rag_server.utils.log_utils import HANDLER_MARKER
from rag_server.utils.log_utils import configure_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _own_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, HANDLER_MARKER, False)]


def test_repeated_setup_keeps_one_handler():
    configure_logging("debug")
    configure_logging("INFO")

    assert len(_own_handlers()) == 1
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_leaves_other_handlers_attached(caplog):
    configure_logging()
    configure_logging()

    logging.getLogger("rag_server.test").warning("still captured")
    assert "still captured" in caplog.text
