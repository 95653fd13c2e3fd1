# main_qt.py
import sys

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from infra.logging_config import setup_logging
from infra.services import build_service_graph
from ui.app_controller import AppController
from ui.settings import QSettingsSessionStore


def build_services():
    return build_service_graph(QSettingsSessionStore())


def main():
    setup_logging()

    app = QApplication(sys.argv)
    app.setFont(QFont("Segoe UI", 9))

    services = build_services()
    controller = AppController(app, services)
    if not controller.start():
        sys.exit(0)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
