"""Preview window showing the rendered frame of a texture pipeline."""

import logging

import numpy as np
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QImage, QPainter
from PyQt5.QtWidgets import QLabel, QMainWindow, QMessageBox, QWidget

from mipview.constants import DEFAULT_PREVIEW_SCALE
from mipview.errors import MipviewError
from mipview.models.render_parameters import preview_transform

logger = logging.getLogger(__name__)


class FramePreview(QWidget):
    """Paints a rendered frame scaled by the preview scale.
    
    A frame taller than the widget is shifted up so that it stays
    vertically centred.
    """

    BACKGROUND = QColor(32, 32, 32)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._image = None
        self.preview_scale = DEFAULT_PREVIEW_SCALE

    @property
    def frame_side(self) -> int:
        return self._image.width() if self._image is not None else 0

    def set_frame(self, pixels):
        """Show an S x S x 4 uint8 frame (None clears the preview)."""
        if pixels is None:
            self._image = None
        else:
            height, width = pixels.shape[:2]
            data = np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()
            # copy() detaches the QImage from the byte buffer
            self._image = QImage(data, width, height, 4 * width,
                                 QImage.Format_RGBA8888).copy()
        self.update()

    def set_preview_scale(self, scale):
        self.preview_scale = scale
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.BACKGROUND)
        if self._image is None:
            painter.end()
            return

        side = self.frame_side
        scale, translate = preview_transform(side, self.height(), self.preview_scale)

        # Scale about the frame centre, then apply the upward shift
        painter.translate(self.width() / 2.0, side / 2.0)
        painter.scale(scale, scale)
        painter.translate(-side / 2.0, -side / 2.0 - translate)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, False)
        painter.drawImage(0, 0, self._image)
        painter.end()


class PreviewWindow(QMainWindow):
    """Main window: frame preview plus a status line.
    
    Keys: E exports every mip level, S exports the current frame, Esc closes.
    
    Args:
        pipeline: TexturePipeline to display
        gl_context: OffscreenGLContext made current before every render
    """

    def __init__(self, pipeline, gl_context=None, parent=None):
        super().__init__(parent)
        self.pipeline = pipeline
        self.gl_context = gl_context

        self.setWindowTitle("mipview")
        self.resize(1024, 768)

        self.preview = FramePreview(self)
        self.preview.set_preview_scale(pipeline.params.preview_scale)
        self.setCentralWidget(self.preview)

        self.status_label = QLabel("Open an image to begin")
        self.statusBar().addWidget(self.status_label)

    def open_file(self, path):
        """Load an image into the pipeline and show it."""
        try:
            if self.gl_context is not None:
                self.gl_context.make_current()
            canonical = self.pipeline.load_file(path)
        except MipviewError as e:
            logger.error("Could not open %s: %s", path, e)
            QMessageBox.warning(self, "Open Failed", f"Could not open image:\n{path}\n\n{e}")
            return False

        self.setWindowTitle(f"mipview - {self.pipeline.source.name}")
        logger.info("Opened %s (%dx%d)", path, canonical.side, canonical.side)
        self.refresh()
        return True

    def set_parameter(self, name, value):
        """Apply a render parameter and refresh the preview if accepted."""
        if not self.pipeline.set_parameter(name, value):
            return False
        self.preview.set_preview_scale(self.pipeline.params.preview_scale)
        self.refresh()
        return True

    def refresh(self):
        """Re-render the current frame into the preview."""
        if self.pipeline.source is None:
            self.preview.set_frame(None)
            return
        if self.gl_context is not None:
            self.gl_context.make_current()
        self.preview.set_frame(self.pipeline.render())

        params = self.pipeline.params
        self.status_label.setText(
            f"{self.pipeline.source.name}  |  {self.pipeline.side}x{self.pipeline.side}"
            f"  |  levels 0-{self.pipeline.power}  |  bias {params.mip_bias:g}"
            f"  |  geometry {params.geometry_scale:g}  |  preview x{params.preview_scale:g}"
        )

    def export_all_levels(self):
        """Export one artifact per mip level through the pipeline's sink."""
        return self._export(self.pipeline.export_all_levels)

    def export_current(self):
        """Export the frame as currently shown."""
        def export():
            artifact = self.pipeline.export_at()
            return [artifact] if artifact is not None else []
        return self._export(export)

    def _export(self, action):
        if self.pipeline.source is None:
            return []
        try:
            if self.gl_context is not None:
                self.gl_context.make_current()
            artifacts = action()
        except (MipviewError, OSError) as e:
            logger.error("Export failed: %s", e)
            QMessageBox.warning(self, "Export Failed", f"Could not export:\n\n{e}")
            return []

        # Exporting at a level leaves that level on screen
        self.refresh()
        self.statusBar().showMessage(f"Exported {len(artifacts)} image(s)", 5000)
        return artifacts

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.close()
            return
        if event.key() == Qt.Key_E:
            self.export_all_levels()
            return
        if event.key() == Qt.Key_S:
            self.export_current()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):
        if self.gl_context is not None:
            self.gl_context.make_current()
        self.pipeline.close()
        super().closeEvent(event)
