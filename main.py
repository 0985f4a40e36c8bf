import sys
from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QFont
from qt_material import apply_stylesheet

from core.config import load_settings
from core.models import DEFAULT_THEME
from ui import MainWindow


def main():
    app = QApplication(sys.argv)
    app.setApplicationName("Batch Transcoder")

    # Base font
    font = QFont("Segoe UI", 10)
    app.setFont(font)

    theme = load_settings().theme or DEFAULT_THEME
    print(f"[MAIN] Theme: {theme}")
    apply_stylesheet(app, theme=theme)

    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
