# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Root conftest.py to make upload_store importable from a source checkout."""

import sys
from pathlib import Path

# Add repo root to sys.path so upload_store can be imported without installing
_repo_root = Path(__file__).parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: tests that need a running MongoDB server"
    )
