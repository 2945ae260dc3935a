"""
VMコアが送出する例外の定義。

コアはプロセスを終了させたりメッセージを出力したりせず、全ての異常を例外として
呼び出し側（ドライバ/UI）へ伝えます。
"""

class Chip8Error(Exception):
    """CHIP-8 VMの全ての例外の基底クラス。"""


class InitError(Chip8Error):
    """VMの構築（フォントセットのコピー）に失敗した場合に送出されます。"""


# @intent:rationale ValueErrorを継承し、呼び出し側が組み込み例外で捕捉しても動作するようにする。
class ProgramTooLarge(Chip8Error, ValueError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Program size {size} exceeds the maximum size of {limit} bytes")
        self.size = size
        self.limit = limit


class UnknownOpcode(Chip8Error):
    def __init__(self, opcode: int):
        super().__init__(f"Unknown opcode: {opcode:04X}")
        self.opcode = opcode


class OutOfBounds(Chip8Error, IndexError):
    """アドレス空間外へのアクセス。PCやIが壊れていることを示します。"""


class StackOverflow(Chip8Error):
    """17段目のサブルーチン呼び出し。"""


class StackUnderflow(Chip8Error):
    """呼び出しスタックが空の状態でのRET。"""
