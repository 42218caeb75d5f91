"""Entry point for the Billing Desk desktop app."""

from PyQt5.QtWidgets import QApplication
import sys

from billing.ui.main_window import MainWindow
from billing.utils.logging import configure_logging


def main() -> None:
    configure_logging()
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
