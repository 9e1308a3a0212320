"""Packaging for PomoCycle.

Install for development:
    pip install -e .[test]

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,  # Replace with .icns path when a proper icon exists
    "plist": {
        "CFBundleName": "PomoCycle",
        "CFBundleDisplayName": "PomoCycle",
        "CFBundleIdentifier": "com.pomocycle.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
        "LSUIElement": True,  # tray-only, no Dock icon
    },
}

# py2app is only needed (and only installable) when building the bundle.
app_kwargs = {}
if "py2app" in sys.argv:
    app_kwargs = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="PomoCycle",
    version="0.1.0",
    description="Focus/break work cycles with history, alarms and reminders.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["pomocycle = pomocycle.__main__:main"],
    },
    **app_kwargs,
)
