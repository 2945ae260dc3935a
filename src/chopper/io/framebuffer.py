# chopper/io/framebuffer.py
"""
64x32 モノクロフレームバッファ。

ピクセルは`[x][y]`でアドレスされ、値は常に0または1です。
表示層はdraw要求を受けた時点でこのバッファを読み取ってラスタライズします。
"""
from typing import List, Tuple

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

# @intent:responsibility VMの表示メモリを保持し、XOR描画と衝突判定を提供します。
class Framebuffer:
    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self._width = width
        self._height = height
        self._pixels: List[List[int]] = [[0] * height for _ in range(width)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def __getitem__(self, x: int) -> List[int]:
        return self._pixels[x]

    def get_pixel(self, x: int, y: int) -> int:
        return self._pixels[x % self._width][y % self._height]

    # @intent:responsibility 指定座標にビットをXORで描画し、衝突（1が1に重なった）かどうかを返します。
    # @intent:post-condition 座標は幅/高さでラップされ、スプライトが画面端で切れることはありません。
    def xor_pixel(self, x: int, y: int, bit: int) -> bool:
        column = self._pixels[x % self._width]
        row = y % self._height
        collided = bit == 1 and column[row] == 1
        column[row] ^= bit
        return collided

    def clear(self) -> None:
        for column in self._pixels:
            for y in range(self._height):
                column[y] = 0

    # @intent:responsibility 表示層/デバッガに渡すための不変コピーを返します。
    def copy(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(column) for column in self._pixels)

    def restore(self, pixels: Tuple[Tuple[int, ...], ...]) -> None:
        for x, column in enumerate(pixels):
            self._pixels[x][:] = column

    def lit_pixels(self) -> List[Tuple[int, int]]:
        return [
            (x, y)
            for x, column in enumerate(self._pixels)
            for y, value in enumerate(column)
            if value
        ]
