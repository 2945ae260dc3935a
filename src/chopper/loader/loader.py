# chopper/loader/loader.py
"""
プログラムローダーモジュール。

CHIP-8のプログラムファイルはヘッダを持たない生バイト列（ビッグエンディアン16bit命令の並び）です。
"""
from pathlib import Path
from typing import Union

from chopper.common.errors import ProgramTooLarge
from chopper.arch.chip8.state import MAX_PROGRAM_SIZE
from chopper.arch.chip8.cpu import Chip8Cpu

class ProgramLoader:
    """
    プログラムファイルを読み込み、サイズを検証してVMへ配置するローダー。
    """
    # @intent:responsibility ファイルを読み込み、最大サイズを超えていないことを確認してバイト列を返します。
    # @intent:post-condition 最大サイズを超える場合はProgramTooLargeを送出し、VMには何も書き込まれません。
    def read_program(self, file_path: Union[str, Path]) -> bytes:
        data = Path(file_path).read_bytes()
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
        return data

    def load_program(self, file_path: Union[str, Path], cpu: Chip8Cpu) -> int:
        """
        ファイルを読み込んでVMの0x200以降に配置し、ロードしたバイト数を返します。
        """
        data = self.read_program(file_path)
        cpu.load_program(data)
        return len(data)
