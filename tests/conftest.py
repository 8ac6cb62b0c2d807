import os
from pathlib import Path

import pytest

# Directory name -> marker applied to every test collected beneath it
_LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "bdd": pytest.mark.bdd,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV to run the suite under",
    )


def pytest_sessionstart(session):
    """Set PROTEAN_ENV before the marketplace domain (and its logging) is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for layer, marker in _LAYER_MARKERS.items():
            if layer in parts:
                item.add_marker(marker)
                break
