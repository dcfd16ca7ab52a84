from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PyQt5 import QtGui, QtWidgets

from sonar_core.errors import SonarDecodeError
from sonar_core.loader import FILE_DIALOG_FILTER, open_sonar_log
from sonar_core.model import ChannelKind
from sonar_viewer.config import ViewerSettings, save_settings
from sonar_viewer.rendering.palettes import palette_names
from sonar_viewer.services.tile_source import SonarTileSource
from sonar_viewer.widget.sonar_view import SonarView

logger = logging.getLogger(__name__)

_CHANNEL_LABELS = {
    ChannelKind.TRADITIONAL: "Traditional",
    ChannelKind.DOWNSCAN: "Down-scan",
    ChannelKind.SIDESCAN: "Side-scan",
}


class SonarViewerApp(QtWidgets.QApplication):
    """Thin application wrapper for the sonar viewer."""

    def __init__(self, argv: List[str]):
        super().__init__(argv)
        self.setQuitOnLastWindowClosed(True)
        self.window: SonarViewerWindow | None = None


class SonarViewerWindow(QtWidgets.QMainWindow):
    """Main window: toolbar with display settings above the scrolling view."""

    def __init__(
        self,
        settings: ViewerSettings | None = None,
        main_script_path: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Sonar Viewer")
        self.resize(1100, 520)

        self._settings = settings or ViewerSettings()
        self._main_script_path = main_script_path
        self._log_path: Path | None = None

        self._view = SonarView()
        self.setCentralWidget(self._view)

        self._open_action = QtWidgets.QAction("Open…", self)
        self._open_action.setShortcut("Ctrl+O")
        self._reload_action = QtWidgets.QAction("Reload missing tiles", self)
        self._reload_action.setEnabled(False)

        self._channel_combo = QtWidgets.QComboBox()
        for kind, label in _CHANNEL_LABELS.items():
            self._channel_combo.addItem(label, kind)
        self._channel_combo.setCurrentIndex(
            list(_CHANNEL_LABELS).index(self._settings.channel)
        )

        self._palette_combo = QtWidgets.QComboBox()
        self._palette_combo.addItems(palette_names())
        palette_index = self._palette_combo.findText(self._settings.color)
        self._palette_combo.setCurrentIndex(max(palette_index, 0))

        self._overlay_check = QtWidgets.QCheckBox("Depth overlay")
        self._overlay_check.setChecked(self._settings.overlay)

        self._range_spin = QtWidgets.QDoubleSpinBox()
        self._range_spin.setRange(0.0, 500.0)
        self._range_spin.setDecimals(1)
        self._range_spin.setSingleStep(1.0)
        self._range_spin.setSuffix(" m")
        self._range_spin.setSpecialValueText("Auto")
        self._range_spin.setValue(self._settings.depth_range)

        toolbar = self.addToolBar("Sonar")
        toolbar.setMovable(False)
        toolbar.addAction(self._open_action)
        toolbar.addSeparator()
        toolbar.addWidget(QtWidgets.QLabel("Channel "))
        toolbar.addWidget(self._channel_combo)
        toolbar.addWidget(QtWidgets.QLabel(" Palette "))
        toolbar.addWidget(self._palette_combo)
        toolbar.addWidget(QtWidgets.QLabel(" Range "))
        toolbar.addWidget(self._range_spin)
        toolbar.addWidget(self._overlay_check)
        toolbar.addSeparator()
        toolbar.addAction(self._reload_action)

        self._ping_label = QtWidgets.QLabel("")
        self.statusBar().addPermanentWidget(self._ping_label)
        self.statusBar().showMessage("Open a Humminbird .DAT or Lowrance .sl2 log")

        self._open_action.triggered.connect(self._on_open_triggered)
        self._reload_action.triggered.connect(self._on_reload_missing)
        self._channel_combo.currentIndexChanged.connect(self._on_channel_changed)
        self._palette_combo.currentTextChanged.connect(self._on_display_changed)
        self._overlay_check.toggled.connect(self._on_display_changed)
        self._range_spin.valueChanged.connect(self._on_display_changed)
        self._view.pingClicked.connect(self._on_ping_clicked)
        self._view.tileFailed.connect(self._on_tile_failed)

    # ------------------------------------------------------------------
    # Opening logs
    # ------------------------------------------------------------------
    @property
    def view(self) -> SonarView:
        return self._view

    @property
    def settings(self) -> ViewerSettings:
        return self._settings

    def _on_open_triggered(self) -> None:
        start_dir = ""
        if self._settings.last_log is not None:
            start_dir = str(self._settings.last_log.parent)
        path_str, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Open Sonar Log", start_dir, FILE_DIALOG_FILTER
        )
        if path_str:
            self.open_log(Path(path_str))

    def open_log(self, path: Path) -> bool:
        channel = self._channel_combo.currentData()
        try:
            log = open_sonar_log(path, channel)
        except (SonarDecodeError, OSError) as exc:
            logger.exception("Failed to open sonar log %s", path)
            QtWidgets.QMessageBox.critical(self, "Open Sonar Log", str(exc))
            self.statusBar().showMessage(f"Could not open {path.name}")
            return False

        self._log_path = path
        self._settings.last_log = path
        self._settings.channel = channel
        self._view.set_source(
            SonarTileSource(log),
            self._settings.display_options(),
            self._settings.tile_width,
        )
        self._reload_action.setEnabled(True)
        self._ping_label.clear()
        self.setWindowTitle(f"Sonar Viewer - {path.name}")
        self.statusBar().showMessage(
            f"{path.name}: {log.length()} pings ({_CHANNEL_LABELS[channel]})"
        )
        logger.info("Opened %s with %s pings", path, log.length())
        return True

    # ------------------------------------------------------------------
    # Display settings
    # ------------------------------------------------------------------
    def _on_channel_changed(self, _index: int) -> None:
        self._settings.channel = self._channel_combo.currentData()
        if self._log_path is not None:
            self.open_log(self._log_path)

    def _on_display_changed(self, *_args) -> None:
        self._settings.color = self._palette_combo.currentText()
        self._settings.overlay = self._overlay_check.isChecked()
        self._settings.depth_range = self._range_spin.value()
        self._view.set_options(self._settings.display_options())

    def _on_reload_missing(self) -> None:
        count = self._view.reload_missing()
        self.statusBar().showMessage(f"Requested {count} missing tiles", 3000)

    def _on_tile_failed(self, offset: int, message: str) -> None:
        self.statusBar().showMessage(f"Tile at {offset} failed: {message}", 5000)

    def _on_ping_clicked(self, index: int) -> None:
        source = self._view.source
        if source is None:
            return
        try:
            ping = source.ping_at(index)
        except (SonarDecodeError, OSError) as exc:
            logger.warning("Could not read ping %s: %s", index, exc)
            return
        if ping is None:
            self._ping_label.clear()
            return
        self._ping_label.setText(
            f"Ping {index}: t={ping.timestamp}  "
            f"{ping.latitude:.6f}, {ping.longitude:.6f}  "
            f"{ping.speed:.1f} km/h  {ping.track:.0f}°"
        )

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        save_settings(self._settings, self._main_script_path)
        super().closeEvent(event)
