from __future__ import annotations

import pytest

from pixie_stitch.core.pipeline import load_resources


@pytest.fixture(scope="session")
def resources():
    return load_resources()
