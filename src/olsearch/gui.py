"""Interactive search window (requires the ``gui`` extra: PySide6).

Run with ``olsearch-gui`` or ``python -m olsearch.gui``. Searches go through
:meth:`SearchOrchestrator.search_async`; completions are posted back to the
Qt GUI thread through a queued signal, so widgets are only touched there.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from olsearch.client import OLClient
from olsearch.config import OLConfig
from olsearch.logging import configure_logging
from olsearch.orchestrator import SearchOrchestrator, SearchOutcome

logger = logging.getLogger(__name__)


class QtDispatcher(QObject):
    """Runs callables on the thread this object lives in (the GUI thread)."""

    posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.posted.connect(self._run, Qt.QueuedConnection)

    @Slot(object)
    def _run(self, callback: Callable[[], None]) -> None:
        callback()

    def __call__(self, callback: Callable[[], None]) -> None:
        self.posted.emit(callback)


class SearchWindow(QMainWindow):
    """Query field, search button, result list and a status line."""

    def __init__(self, config: OLConfig | None = None, client: OLClient | None = None) -> None:
        super().__init__()
        self._config = config or (client.config if client is not None else OLConfig.from_env())
        self.dispatcher = QtDispatcher(self)
        self.orchestrator = SearchOrchestrator(
            client, dispatch=self.dispatcher, config=self._config
        )

        self.setWindowTitle("OpenLibrary Search")
        self.resize(640, 480)

        self.query_field = QLineEdit()
        self.query_field.setPlaceholderText("Введите запрос, например: Толкин")
        self.search_button = QPushButton("Искать")
        self.results = QListWidget()
        self.status = QLabel("Готово")

        self.search_button.clicked.connect(self.run_search)
        self.query_field.returnPressed.connect(self.run_search)

        controls = QHBoxLayout()
        controls.setContentsMargins(10, 10, 10, 10)
        controls.setSpacing(8)
        controls.addWidget(self.query_field)
        controls.addWidget(self.search_button)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addLayout(controls)
        layout.addWidget(self.results)
        layout.addWidget(self.status)
        self.setCentralWidget(container)

    def run_search(self) -> None:
        query = self.query_field.text().strip()
        if not query:
            self.status.setText("Введите поисковый запрос")
            return
        self.search_button.setEnabled(False)
        self.status.setText("Поиск...")
        self.results.clear()
        self.orchestrator.search_async(query, self._config.gui_limit, self.show_outcome)

    def show_outcome(self, outcome: SearchOutcome) -> None:
        self.search_button.setEnabled(True)
        if not outcome.ok:
            self.status.setText(f"Ошибка: {outcome.error}")
            return
        self.results.addItems(list(outcome.lines))
        if outcome.lines:
            self.status.setText(f"Найдено: {len(outcome.lines)}")
        else:
            self.status.setText("Ничего не найдено")

    def closeEvent(self, event):  # type: ignore[override]
        self.orchestrator.shutdown()
        super().closeEvent(event)


def main() -> None:
    configure_logging()
    app = QApplication(sys.argv)
    window = SearchWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
