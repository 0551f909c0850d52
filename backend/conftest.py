"""
Root conftest.py: make the backend packages importable under pytest.

The packages (config, container, updates, utils) live directly in backend/
rather than under a common parent package, so this directory has to be on
sys.path before any test module is collected.
"""
import os
import sys

backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# tests/unit/updates/ has no __init__.py and shares its name with the
# updates package; cache the real packages before pytest puts test
# directories on sys.path
import container  # noqa: E402,F401
import updates  # noqa: E402,F401
