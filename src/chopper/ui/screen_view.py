"""
フレームバッファ表示ウィジェット。

64x32のピクセルをscale倍の矩形として描画します。
"""
from typing import Tuple

from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtGui import QPainter, QColor, QPaintEvent
from PySide6.QtCore import QRect

from chopper.io.framebuffer import Framebuffer, SCREEN_WIDTH, SCREEN_HEIGHT
from chopper.driver.runner import Display

# @intent:responsibility 最後に受け取ったフレームバッファの内容を描画します。
class ScreenView(QWidget):
    def __init__(self, scale: int = 20, screen_color: int = 0x1A237E, sprite_color: int = 0x9FA8DA, parent=None):
        super().__init__(parent)
        self._scale = scale
        self._screen_color = QColor(f"#{screen_color:06X}")
        self._sprite_color = QColor(f"#{sprite_color:06X}")
        self._pixels: Tuple[Tuple[int, ...], ...] = tuple(
            tuple(0 for _ in range(SCREEN_HEIGHT)) for _ in range(SCREEN_WIDTH)
        )
        self.setFixedSize(SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale)
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

    @property
    def pixels(self) -> Tuple[Tuple[int, ...], ...]:
        return self._pixels

    def clear_surface(self) -> None:
        self._pixels = tuple(tuple(0 for _ in column) for column in self._pixels)
        self.update()

    def show_framebuffer(self, framebuffer: Framebuffer) -> None:
        self._pixels = framebuffer.copy()
        self.update()

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._screen_color)
        s = self._scale
        for x, column in enumerate(self._pixels):
            for y, value in enumerate(column):
                if value == 1:
                    painter.fillRect(QRect(x * s, y * s, s, s), self._sprite_color)
        painter.end()

# @intent:responsibility ScreenViewをドライバのDisplayインターフェースに適合させます。
# @intent:rationale QWidgetとABCはメタクラスが異なるため、多重継承せずに委譲で接続する。
class WidgetDisplay(Display):
    def __init__(self, view: ScreenView):
        self._view = view

    def clear(self) -> None:
        self._view.clear_surface()

    def draw(self, framebuffer: Framebuffer) -> None:
        self._view.show_framebuffer(framebuffer)
