"""
Each module must import cleanly as the first thing a fresh interpreter loads.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@pytest.mark.parametrize(
    "module",
    [
        "order_service.app.repository",
        "order_service.app.repository.product_replica_repository",
        "order_service.app.events",
        "order_service.app.events.schemas",
        "order_service.app.events.consumers",
        "order_service.app.api.v1.product_sync",
    ],
)
def test_module_imports_in_fresh_interpreter(module):
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=PROJECT_ROOT,
        env={**os.environ, "ENVIRONMENT": "test"},
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, result.stderr
