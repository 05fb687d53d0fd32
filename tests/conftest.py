"""Root test conftest — shared fixtures for all test suites.

Unit fixtures (the simulated DOM) live in tests/unit/conftest.py; browser
fixtures for the smoke suite live in tests/ui/conftest.py.
"""

import sys
from pathlib import Path

# src/ is the Python root for the tabburst package
_SRC = Path(__file__).parent.parent / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))
