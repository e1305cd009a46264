"""Startup script for the pyxapp build of fruitstar.

The web player resolves imports relative to the startup script's folder, so
the script sits next to the fruitstar/ package and runs the serpentine level.
"""
import os
import sys

# Folder holding this script and fruitstar/.
_root = os.path.dirname(os.path.abspath(__file__))
if _root not in sys.path:
    sys.path.insert(0, _root)

from fruitstar.grids import builtin_level  # noqa: E402
from fruitstar.main import App  # noqa: E402

App(builtin_level("serpentine"))
