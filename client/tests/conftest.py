"""
client/tests/conftest.py

Purpose:
    Shared pytest bootstrap: puts client/ on the import path so tests run
    without an editable install.
"""

from __future__ import annotations

import sys
from pathlib import Path

_THIS_FILE = Path(__file__).resolve()
_CLIENT_DIR = _THIS_FILE.parents[1]

if str(_CLIENT_DIR) not in sys.path:
    sys.path.insert(0, str(_CLIENT_DIR))
