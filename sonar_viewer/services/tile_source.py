"""
tile_source.py

SonarTileSource turns ping ranges of an open log into TileData payloads.
TileFetcher defers each request to the Qt event loop and reports the result
through `tileLoaded` (TileData) or `tileFailed` (offset, exception).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5 import QtCore

from sonar_core.errors import SonarDecodeError
from sonar_core.model import Ping, SonarLog
from sonar_viewer.model.tiles import TileData
from sonar_viewer.rendering.tile_image import build_tile_data

logger = logging.getLogger(__name__)

Schedule = Callable[[Callable[[], None]], None]


class SonarTileSource:
    def __init__(self, log: SonarLog) -> None:
        self._log = log

    @property
    def log(self) -> SonarLog:
        return self._log

    @property
    def total_width(self) -> int:
        return self._log.length()

    def build_tile(self, height: int, tile_width: int, offset: int) -> TileData:
        """Decode up to ``tile_width`` pings starting at ``offset``."""
        count = max(0, min(tile_width, self.total_width - offset))
        pings = self._log.ping_range(offset, count) if count else []
        return build_tile_data(pings, height, offset)

    def ping_at(self, index: int) -> Optional[Ping]:
        if not 0 <= index < self.total_width:
            return None
        return self._log.ping_range(index, 1)[0]


def _qt_schedule(callback: Callable[[], None]) -> None:
    QtCore.QTimer.singleShot(0, callback)


class TileFetcher(QtCore.QObject):
    tileLoaded = QtCore.pyqtSignal(object)  # TileData
    tileFailed = QtCore.pyqtSignal(int, object)

    def __init__(
        self,
        source: SonarTileSource,
        schedule: Schedule | None = None,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._source = source
        self._schedule = schedule or _qt_schedule
        self._cancelled = False

    @property
    def source(self) -> SonarTileSource:
        return self._source

    def cancel(self) -> None:
        """Drop deliveries that are still queued; the QObject may be deleted next."""
        self._cancelled = True

    def fetch(self, height: int, width: int, offset: int) -> None:
        self._schedule(lambda: self._deliver(height, width, offset))

    def _deliver(self, height: int, width: int, offset: int) -> None:
        if self._cancelled:
            return
        try:
            tile = self._source.build_tile(height, width, offset)
        except (SonarDecodeError, OSError, IndexError) as exc:
            logger.exception("Failed to build tile at %s", offset)
            self.tileFailed.emit(offset, exc)
            return
        self.tileLoaded.emit(tile)
