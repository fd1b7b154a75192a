from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from salat import Coordinates  # noqa: E402

TUNIS = Coordinates(36.8065, 10.1815)


@pytest.fixture(scope="session")
def tunis() -> Coordinates:
    return TUNIS


@pytest.fixture(scope="session")
def api_client() -> Iterable[TestClient]:
    from prayer_api import app

    with TestClient(app) as client:
        yield client
