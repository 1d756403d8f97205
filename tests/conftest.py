"""Pytest configuration and fixtures.

The sys.path manipulation below lets the suite run from a source checkout
without `pip install -e .`.
"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
