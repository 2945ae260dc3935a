# chopper/io/keypad.py
"""
16キーの入力デバイス。

キー状態は16bitのマスクとして保持され、キーkが押されている間はビットkがセットされます。
マスクは入力層からのみ更新され、VMは読み取りだけを行います。
"""
from typing import Dict, Optional

KEY_COUNT = 16

# @intent:map QWERTYキーボードからCHIP-8キーパッドへの対応表。
# +---+---+---+---+      +---+---+---+---+
# | 1 | 2 | 3 | 4 |      | 1 | 2 | 3 | C |
# | Q | W | E | R |  ->  | 4 | 5 | 6 | D |
# | A | S | D | F |      | 7 | 8 | 9 | E |
# | Z | X | C | V |      | A | 0 | B | F |
# +---+---+---+---+      +---+---+---+---+
DEFAULT_KEYMAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "Q": 0x4, "W": 0x5, "E": 0x6, "R": 0xD,
    "A": 0x7, "S": 0x8, "D": 0x9, "F": 0xE,
    "Z": 0xA, "X": 0x0, "C": 0xB, "V": 0xF,
}

# @intent:responsibility キーの押下状態を16bitマスクとして管理します。
class Keypad:
    def __init__(self):
        self._mask = 0

    @property
    def mask(self) -> int:
        return self._mask

    def set_mask(self, mask: int) -> None:
        self._mask = mask & 0xFFFF

    def press(self, key: int) -> None:
        if 0 <= key < KEY_COUNT:
            self._mask |= 1 << key

    # @intent:rationale 押されていないキーの解放でビットが反転しないよう、XORではなくクリアする。
    def release(self, key: int) -> None:
        if 0 <= key < KEY_COUNT:
            self._mask &= ~(1 << key) & 0xFFFF

    def is_down(self, key: int) -> bool:
        if not 0 <= key < KEY_COUNT:
            return False
        return bool(self._mask & (1 << key))

    # @intent:responsibility 押されているキーのうち最小のコードを返します。なければNone。
    def first_pressed(self) -> Optional[int]:
        for key in range(KEY_COUNT):
            if self._mask & (1 << key):
                return key
        return None

    def clear(self) -> None:
        self._mask = 0


# @intent:responsibility キー名（大文字小文字は区別しない）をキーパッドのコードに変換します。
def map_key(name: str, keymap: Optional[Dict[str, int]] = None) -> Optional[int]:
    table = keymap if keymap is not None else DEFAULT_KEYMAP
    return table.get(name.upper())
