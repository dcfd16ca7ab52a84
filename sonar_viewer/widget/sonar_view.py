from __future__ import annotations

import logging

import numpy as np
from PyQt5 import QtCore, QtGui, QtWidgets

from sonar_viewer.controllers.viewport_controller import (
    CursorReadout,
    SonarViewportController,
)
from sonar_viewer.model.display_options import DisplayOptions
from sonar_viewer.model.tiles import DEFAULT_TILE_WIDTH
from sonar_viewer.services.tile_source import SonarTileSource, TileFetcher

logger = logging.getLogger(__name__)

RULER_COLOR = QtGui.QColor(255, 255, 255, 160)
MARKER_COLOR = QtGui.QColor("#ff5722")
LABEL_BACKGROUND = QtGui.QColor(0, 0, 0, 170)
LABEL_TEXT = QtGui.QColor("#eee")


def array_to_qimage(image: np.ndarray) -> QtGui.QImage:
    """Copy a ``height x width`` uint32 ARGB raster into a QImage."""

    data = np.ascontiguousarray(image, dtype=np.uint32)
    height, width = data.shape
    qimage = QtGui.QImage(data.data, width, height, width * 4, QtGui.QImage.Format_ARGB32)
    return qimage.copy()


class SonarView(QtWidgets.QAbstractScrollArea):
    """Horizontally scrolling sonar strip built from lazily fetched tiles."""

    pingClicked = QtCore.pyqtSignal(int)
    tileFailed = QtCore.pyqtSignal(int, str)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOn)
        self.viewport().setMouseTracking(True)
        self.setMinimumSize(320, 200)

        self._source: SonarTileSource | None = None
        self._fetcher: TileFetcher | None = None
        self._controller: SonarViewportController | None = None
        self._images: dict[int, tuple[np.ndarray, QtGui.QImage]] = {}
        self._pointer: QtCore.QPoint | None = None

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    @property
    def controller(self) -> SonarViewportController | None:
        return self._controller

    @property
    def source(self) -> SonarTileSource | None:
        return self._source

    def set_source(
        self,
        source: SonarTileSource | None,
        options: DisplayOptions | None = None,
        tile_width: int = DEFAULT_TILE_WIDTH,
    ) -> None:
        if self._fetcher is not None:
            self._fetcher.cancel()
            self._fetcher.tileLoaded.disconnect()
            self._fetcher.tileFailed.disconnect()
            self._fetcher.deleteLater()
        self._fetcher = None
        self._controller = None
        self._images.clear()
        self._pointer = None
        self._source = source

        if source is None:
            self.horizontalScrollBar().setRange(0, 0)
            self.viewport().update()
            return

        fetcher = TileFetcher(source, parent=self)
        controller = SonarViewportController(
            fetcher.fetch,
            tile_width=tile_width,
            options=options,
            on_repaint=self.viewport().update,
            on_click=self.pingClicked.emit,
        )
        fetcher.tileLoaded.connect(controller.tile_loaded)
        fetcher.tileFailed.connect(self._on_tile_failed)
        self._fetcher = fetcher
        self._controller = controller

        controller.initialize(source.total_width)
        self.horizontalScrollBar().setValue(0)
        self._update_scroll_range()
        viewport = self.viewport()
        controller.set_viewport_size(viewport.width(), viewport.height())
        viewport.update()

    def set_options(self, options: DisplayOptions) -> None:
        if self._controller is not None:
            self._controller.set_options(options)

    def reload_missing(self) -> int:
        if self._controller is None:
            return 0
        return len(self._controller.retry_failed())

    def _on_tile_failed(self, offset: int, error: object) -> None:
        if self._controller is not None:
            self._controller.tile_failed(offset, error)
        self.tileFailed.emit(offset, str(error))

    # ------------------------------------------------------------------
    # Scrolling and layout
    # ------------------------------------------------------------------
    def _update_scroll_range(self) -> None:
        bar = self.horizontalScrollBar()
        width = self.viewport().width()
        total = self._source.total_width if self._source is not None else 0
        bar.setRange(0, max(0, total - width))
        bar.setPageStep(max(1, width))
        bar.setSingleStep(max(1, width // 10))

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._update_scroll_range()
        if self._controller is None:
            return
        viewport = self.viewport()
        self._controller.set_viewport_size(viewport.width(), viewport.height())
        logger.debug("Viewport resized to %sx%s", viewport.width(), viewport.height())
        self._controller.on_scroll(self.horizontalScrollBar().value())

    def scrollContentsBy(self, dx: int, dy: int) -> None:
        if self._controller is not None:
            self._controller.on_scroll(self.horizontalScrollBar().value())
        self.viewport().update()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def _qimage_for(self, offset: int, image: np.ndarray) -> QtGui.QImage:
        cached = self._images.get(offset)
        if cached is not None and cached[0] is image:
            return cached[1]
        qimage = array_to_qimage(image)
        self._images[offset] = (image, qimage)
        return qimage

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # noqa: D401
        painter = QtGui.QPainter(self.viewport())
        painter.fillRect(self.viewport().rect(), QtGui.QColor("black"))

        controller = self._controller
        if controller is None:
            painter.setPen(QtGui.QPen(QtGui.QColor("#888")))
            painter.drawText(
                self.viewport().rect(),
                QtCore.Qt.AlignCenter,
                "Open a sonar log to view soundings.",
            )
            painter.end()
            return

        for renderer in controller.visible_renderers():
            if renderer.image is None:
                continue
            target = QtCore.QRect(*controller.paint_rect(renderer))
            painter.drawImage(target, self._qimage_for(renderer.offset, renderer.image))

        pointer = self.pointer_logical()
        if pointer is not None:
            self._draw_ruler(painter, *pointer)
        painter.end()

    def _draw_ruler(self, painter: QtGui.QPainter, x: int, y: int) -> None:
        controller = self._controller
        assert controller is not None
        marker = controller.ruler(x)
        painter.save()
        painter.setPen(QtGui.QPen(RULER_COLOR, 1.0))
        painter.drawLine(marker.screen_x, 0, marker.screen_x, marker.height)

        if marker.marker_row is not None:
            row = marker.marker_row
            arrow = QtGui.QPolygon(
                [
                    QtCore.QPoint(marker.screen_x, row),
                    QtCore.QPoint(marker.screen_x - 8, row - 5),
                    QtCore.QPoint(marker.screen_x - 8, row + 5),
                ]
            )
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(MARKER_COLOR)
            painter.drawPolygon(arrow)

        self._draw_labels(painter, marker.screen_x, y, controller.readout(x, y))
        painter.restore()

    def _draw_labels(
        self, painter: QtGui.QPainter, screen_x: int, y: int, readout: CursorReadout
    ) -> None:
        lines = SonarViewportController.label_texts(readout)
        metrics = painter.fontMetrics()
        width = max(metrics.horizontalAdvance(line) for line in lines) + 12
        height = metrics.height() * len(lines) + 8
        left = screen_x + 12
        if left + width > self.viewport().width():
            left = screen_x - 12 - width
        top = min(max(y - height // 2, 0), max(self.viewport().height() - height, 0))

        box = QtCore.QRect(left, top, width, height)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(LABEL_BACKGROUND)
        painter.drawRect(box)
        painter.setPen(LABEL_TEXT)
        for index, line in enumerate(lines):
            baseline = top + 4 + metrics.ascent() + index * metrics.height()
            painter.drawText(left + 6, baseline, line)

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------
    def pointer_logical(self) -> tuple[int, int] | None:
        """Logical position under the last known pointer, at the current scroll."""
        if self._controller is None or self._pointer is None:
            return None
        return self._controller.to_logical(self._pointer.x(), self._pointer.y(), 0, 0)

    def _logical(self, event: QtGui.QMouseEvent) -> tuple[int, int] | None:
        if self._controller is None:
            return None
        pos = event.pos()
        return self._controller.to_logical(pos.x(), pos.y(), 0, 0)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        # screen position; the logical column follows scrolling
        self._pointer = QtCore.QPoint(event.pos())
        self.viewport().update()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        point = self._logical(event)
        if point is not None and event.button() == QtCore.Qt.LeftButton:
            self._controller.click(point[0])
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        self._pointer = None
        self.viewport().update()
        super().leaveEvent(event)
