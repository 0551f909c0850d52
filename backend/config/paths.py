"""
Centralized path configuration for dockshift
"""

import os

# Base directory for runtime files (logs); mount a volume here when containerized
DATA_DIR = os.getenv('DOCKSHIFT_DATA_DIR', './data')

LOG_DIR = os.path.join(DATA_DIR, 'logs')
LOG_FILE = os.path.join(LOG_DIR, 'dockshift.log')


def ensure_data_dirs():
    """Create data directories if they don't exist"""
    for directory in [DATA_DIR, LOG_DIR]:
        os.makedirs(directory, exist_ok=True)
        try:
            os.chmod(directory, 0o700)
        except OSError:
            pass  # May not have permission in some environments
