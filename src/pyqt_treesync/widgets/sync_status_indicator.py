"""Status indicator bound to a ReconciliationController: colored dot, title, label, refresh button."""

import logging
from typing import Optional
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QPushButton
from PyQt6.QtGui import QFont

from pyqt_treesync.services import SyncPhase
from pyqt_treesync.sync import ReconciliationController
from pyqt_treesync.theming import ColorScheme

logger = logging.getLogger(__name__)

_DEFAULT_MESSAGES = {
    SyncPhase.IDLE: "No collection selected",
    SyncPhase.LOADING: "Loading items...",
    SyncPhase.BUILDING: "Updating...",
    SyncPhase.STEADY: "Up to date",
    SyncPhase.ERROR: "Error",
}


def get_status_color(phase: SyncPhase, color_scheme: ColorScheme) -> str:
    """Resolve sync phase to color from scheme."""
    color_map = {
        SyncPhase.IDLE: color_scheme.text_secondary,
        SyncPhase.LOADING: color_scheme.status_warning,
        SyncPhase.BUILDING: color_scheme.status_info,
        SyncPhase.STEADY: color_scheme.status_success,
        SyncPhase.ERROR: color_scheme.status_error,
    }
    return color_scheme.to_hex(color_map[phase])


class SyncStatusIndicator(QWidget):
    """
    Shows where a synchronized region is in its lifecycle.

    Usage:
        indicator = SyncStatusIndicator(title="Category products", parent=self)
        indicator.bind(controller)
        layout.addWidget(indicator)

    The title wrapper is hidden while the region is embedded in another
    structural container, which supplies its own presentation.
    """

    def __init__(
        self,
        title: str = "",
        color_scheme: Optional[ColorScheme] = None,
        show_refresh: bool = True,
        parent=None
    ):
        super().__init__(parent)
        self._color_scheme = color_scheme or ColorScheme()
        self._controller: Optional[ReconciliationController] = None
        self._phase = SyncPhase.IDLE
        self._item_count = 0

        self._setup_ui(title, show_refresh)

    def _setup_ui(self, title: str, show_refresh: bool):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self._title = QLabel(title)
        self._title.setVisible(bool(title))
        layout.addWidget(self._title)

        # Colored dot
        self._dot = QLabel("●")
        self._dot.setFixedWidth(12)
        layout.addWidget(self._dot)

        # Status text
        self._label = QLabel()
        self._label.setFont(QFont("Arial", 8))
        layout.addWidget(self._label)

        if show_refresh:
            self._refresh_btn = QPushButton("↻")
            self._refresh_btn.setFixedSize(20, 20)
            self._refresh_btn.setToolTip("Fetch items again")
            self._refresh_btn.clicked.connect(self._on_refresh_clicked)
            layout.addWidget(self._refresh_btn)
        else:
            self._refresh_btn = None

        self.set_phase(SyncPhase.IDLE)

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def text(self) -> str:
        return self._label.text()

    @property
    def title_visible(self) -> bool:
        return not self._title.isHidden()

    def bind(self, controller: ReconciliationController):
        """Follow a controller's phase, error and embedding signals."""
        self._controller = controller
        controller.phase_changed.connect(self._on_phase_changed)
        controller.error_changed.connect(self._on_error_changed)
        controller.structure_changed.connect(self._on_structure_changed)
        controller.embedding_changed.connect(self._on_embedding_changed)
        self._on_embedding_changed(controller.refresh_embedding())
        self.set_phase(controller.phase, controller.error_message)

    def set_phase(self, phase: SyncPhase, message: Optional[str] = None):
        """Update visual state."""
        self._phase = phase
        self._dot.setStyleSheet(f"color: {get_status_color(phase, self._color_scheme)};")
        self._label.setText(message or self._default_message(phase))

        if self._refresh_btn:
            self._refresh_btn.setEnabled(phase not in (SyncPhase.LOADING, SyncPhase.BUILDING))

    def _default_message(self, phase: SyncPhase) -> str:
        if phase is SyncPhase.STEADY and self._item_count:
            return f"{self._item_count} item(s)"
        return _DEFAULT_MESSAGES[phase]

    def _on_phase_changed(self, phase: SyncPhase):
        message = self._controller.error_message if phase is SyncPhase.ERROR else None
        self.set_phase(phase, message)

    def _on_error_changed(self, message: str):
        if self._phase is SyncPhase.ERROR and message:
            self._label.setText(message)

    def _on_structure_changed(self, count: int):
        self._item_count = count
        if self._phase is SyncPhase.STEADY:
            self._label.setText(self._default_message(SyncPhase.STEADY))

    def _on_embedding_changed(self, embedded: bool):
        self._title.setVisible(bool(self._title.text()) and not embedded)

    def _on_refresh_clicked(self):
        if self._controller is not None:
            logger.debug("Manual refresh requested")
            self._controller.refresh()
