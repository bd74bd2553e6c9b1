# conftest.py at the project root
#
# Ensures that the repository root is on sys.path when pytest is invoked
# from the project root, so ``level_cascade`` and the root ``runner``
# wrapper import without requiring a package install.
#
# Usage:
#   pytest level_cascade/tests/ -v
#   pytest level_cascade/tests/test_propagation.py -v

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
