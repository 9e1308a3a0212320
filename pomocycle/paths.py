"""On-disk locations for PomoCycle.

Everything lives under one app-support directory:
    ~/Library/Application Support/PomoCycle

Set ``POMOCYCLE_HOME`` to point the whole tree somewhere else
(handy for portable installs and throwaway profiles).
"""

from __future__ import annotations

import os
from pathlib import Path


APP_NAME = "PomoCycle"

APP_SUPPORT_DIR = Path(
    os.environ.get(
        "POMOCYCLE_HOME",
        Path.home() / "Library" / "Application Support" / APP_NAME,
    )
)
DB_PATH = APP_SUPPORT_DIR / "pomocycle.db"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"
LOGS_DIR = APP_SUPPORT_DIR / "logs"
