"""Pytest configuration for root-level integration tests.

Adds the ledger service src directory and the services root (for the shared
package) to sys.path.
"""

import sys
from pathlib import Path

import pytest

SERVICES_ROOT = Path(__file__).resolve().parents[1] / "services"

SERVICE_PATHS = [
    SERVICES_ROOT / "ledger-service" / "src",
    SERVICES_ROOT,
]

for path in SERVICE_PATHS:
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
