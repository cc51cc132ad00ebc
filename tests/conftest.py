# Minimal conftest providing a fallback 'qtbot' fixture if pytest-qt is not installed.
# Table model tests only need a QApplication instance; if pytest-qt is installed,
# its fixture wins.

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv)  # type: ignore

        class Bot:
            def __init__(self):
                self.app = app
                self.widgets = []

            def addWidget(self, w):  # mimic pytest-qt API subset
                self.widgets.append(w)

        return Bot()
