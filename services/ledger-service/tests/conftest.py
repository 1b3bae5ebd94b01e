"""Pytest configuration for ledger-service tests.

Puts the service's src directory and the services root (for the shared
package) at the front of sys.path.
"""

import sys
from pathlib import Path

import pytest

SERVICES_ROOT = Path(__file__).resolve().parents[2]
SERVICE_SRC = Path(__file__).resolve().parents[1] / "src"

for path in (SERVICE_SRC, SERVICES_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
