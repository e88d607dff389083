# theme.py
from __future__ import annotations

from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication


def apply_dark_theme(app: QApplication) -> None:
    app.setStyle("Fusion")

    pal = QPalette()
    pal.setColor(QPalette.Window, QColor(49, 51, 56))
    pal.setColor(QPalette.WindowText, QColor(219, 222, 225))
    pal.setColor(QPalette.Base, QColor(30, 31, 34))
    pal.setColor(QPalette.AlternateBase, QColor(43, 45, 49))
    pal.setColor(QPalette.Text, QColor(219, 222, 225))
    pal.setColor(QPalette.Button, QColor(64, 66, 73))
    pal.setColor(QPalette.ButtonText, QColor(219, 222, 225))
    pal.setColor(QPalette.Highlight, QColor(88, 101, 242))
    pal.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    pal.setColor(QPalette.Disabled, QPalette.Text, QColor(128, 132, 142))
    pal.setColor(QPalette.Disabled, QPalette.ButtonText, QColor(128, 132, 142))
    pal.setColor(QPalette.Disabled, QPalette.WindowText, QColor(128, 132, 142))
    app.setPalette(pal)

    app.setStyleSheet(
        """
        QLabel#Title { font-size: 16px; font-weight: 650; }
        QLabel#Section {
            color: #b5bac1;
            font-size: 11px;
            font-weight: 700;
        }
        QLabel#Hint { color: #949ba4; }

        QFrame#Card {
            background: #2b2d31;
            border: 1px solid #1e1f22;
            border-radius: 8px;
        }

        QToolButton#ScreenTile {
            background: #2b2d31;
            border: 2px solid transparent;
            border-radius: 8px;
            padding: 6px;
        }
        QToolButton#ScreenTile:hover { border-color: #5865f2; }

        QListWidget {
            background: #1e1f22;
            border: 1px solid #1e1f22;
            border-radius: 6px;
        }

        QPushButton {
            padding: 6px 12px;
            border-radius: 4px;
            border: none;
            background: #4e5058;
        }
        QPushButton:hover { background: #6d6f78; }
        QPushButton:disabled { background: #3a3c42; color: #80848e; }

        QPushButton#Primary { background: #5865f2; color: #ffffff; }
        QPushButton#Primary:hover { background: #4752c4; }

        QPushButton#Transparent { background: transparent; }
        QPushButton#Transparent:hover { color: #ffffff; }

        QPushButton#Choice {
            background: #1e1f22;
            border: 1px solid #3f4147;
            border-radius: 4px;
            font-weight: 700;
        }
        QPushButton#Choice:checked { background: #5865f2; border-color: #5865f2; color: #ffffff; }
        """
    )
