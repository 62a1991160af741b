"""Allow running Training Timer as a module: python -m trainingtimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .logs import configure_logging
from .settings import load_settings
from .storage.db import configure_engine, init_db
from .app import TrainingTimerApp

logger = logging.getLogger("trainingtimer")


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if settings.db_path:
        configure_engine(f"sqlite:///{settings.db_path}")
    init_db()
    logger.info("Training Timer ready")

    app = QApplication(sys.argv)
    app.setApplicationName("Training Timer")
    app.setOrganizationName("TrainingTimer")

    window = TrainingTimerApp(settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
