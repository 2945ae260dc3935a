# tests/io/test_framebuffer.py
"""
chopper.io.framebufferモジュールの単体テスト。
"""
from chopper.io.framebuffer import Framebuffer, SCREEN_WIDTH, SCREEN_HEIGHT

# @intent:test_suite XOR描画、ラップ、コピーと復元の検証。
class TestFramebuffer:
    def test_dimensions(self):
        fb = Framebuffer()
        assert (fb.width, fb.height) == (SCREEN_WIDTH, SCREEN_HEIGHT) == (64, 32)
        assert len(fb[0]) == 32
        assert fb.lit_pixels() == []

    def test_xor_and_collision(self):
        fb = Framebuffer()
        assert fb.xor_pixel(3, 4, 1) is False
        assert fb[3][4] == 1
        assert fb.xor_pixel(3, 4, 0) is False
        assert fb[3][4] == 1
        assert fb.xor_pixel(3, 4, 1) is True
        assert fb[3][4] == 0

    def test_coordinates_wrap(self):
        fb = Framebuffer()
        fb.xor_pixel(64, 32, 1)
        fb.xor_pixel(-1, 33, 1)
        assert fb.lit_pixels() == [(0, 0), (63, 1)]
        assert fb.get_pixel(128, 64) == 1

    def test_copy_is_detached(self):
        fb = Framebuffer()
        fb.xor_pixel(10, 10, 1)
        pixels = fb.copy()
        fb.clear()
        assert fb.lit_pixels() == []
        assert pixels[10][10] == 1

        fb.restore(pixels)
        assert fb.lit_pixels() == [(10, 10)]
