import logging
import sys
from pathlib import Path

import pytest

# Ensure repo_root/src is available on sys.path before any tests import project modules
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    """Drop the CLI stderr handler so it never outlives a captured stream."""
    yield
    logger = logging.getLogger("vueprune")
    for handler in list(logger.handlers):
        if handler.get_name() == "vueprune-cli":
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
