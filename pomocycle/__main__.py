"""Allow running PomoCycle as a module: python -m pomocycle.

Runs the timer from the system tray: the tray menu drives
start / pause / resume / reset, the tooltip shows the countdown and
phase-complete alerts appear as tray messages.
"""

import logging
import sys

from PyQt6.QtGui import QColor, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .app import PomoCycleApp
from .audio.sounds import SoundManager
from .clock import format_remaining
from .database.db import init_db
from .paths import APP_SUPPORT_DIR
from .services.haptics import HapticsService
from .services.notifications import NotificationService
from .timer.models import TimerStatus
from .utils.logging_handler import setup_logger


def _make_icon() -> QIcon:
    """Placeholder tomato-red circle."""
    icon = QPixmap(64, 64)
    icon.fill(QColor(0, 0, 0, 0))
    p = QPainter(icon)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor("#E5484D"))
    p.setPen(QColor("#E5484D").darker(120))
    p.drawEllipse(4, 4, 56, 56)
    p.end()
    return QIcon(icon)


def _build_menu(core: PomoCycleApp, app: QApplication) -> QMenu:
    menu = QMenu()
    menu.addAction("Start").triggered.connect(core.start)
    menu.addAction("Pause").triggered.connect(core.pause)
    menu.addAction("Resume").triggered.connect(core.resume)
    menu.addAction("Reset").triggered.connect(core.reset)
    menu.addSeparator()
    menu.addAction("Export History").triggered.connect(
        lambda: core.write_export(APP_SUPPORT_DIR / "exports")
    )
    menu.addAction("Clear History").triggered.connect(core.clear_history)
    menu.addSeparator()
    menu.addAction("Quit").triggered.connect(app.quit)
    return menu


def main() -> None:
    logger = setup_logger("pomocycle", level=logging.INFO)
    init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("PomoCycle")
    app.setOrganizationName("PomoCycle")
    app.setQuitOnLastWindowClosed(False)

    tray = QSystemTrayIcon(_make_icon())
    tray.setToolTip("PomoCycle: Ready")

    core = PomoCycleApp(
        notifications=NotificationService(tray=tray),
        audio=SoundManager(),
        haptics=HapticsService(),
    )

    menu = _build_menu(core, app)
    tray.setContextMenu(menu)

    def _update_tooltip(*_args) -> None:
        engine = core.engine
        label = engine.phase.value.capitalize()
        if engine.status is TimerStatus.PAUSED:
            label += " (paused)"
        tray.setToolTip(f"PomoCycle: {label} {format_remaining(engine.remaining_time)}")

    core.engine.ticked.connect(_update_tooltip)
    core.engine.status_changed.connect(_update_tooltip)
    app.aboutToQuit.connect(core.shutdown)

    tray.show()
    _update_tooltip()
    logger.info("PomoCycle ready")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
