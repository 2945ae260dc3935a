# chopper/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータをCHIP-8のニーモニックに変換します。
Instruction Layerのデコードロジックを再利用し、peekで読み出すためバスアクセスログを汚しません。
"""
from typing import List, Tuple

from chopper.transport.bus import Bus
from chopper.common.errors import UnknownOpcode
from chopper.arch.chip8.state import MEMORY_SIZE
from chopper.arch.chip8.instructions import decode_opcode

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    指定された範囲のメモリを2バイト単位で逆アセンブルします。
    命令として解釈できないワードは"DW"として表示します。

    Returns:
        List of (address, hex_bytes, mnemonic) tuples.
    """
    result = []
    current_addr = start_addr
    end_addr = min(start_addr + length, MEMORY_SIZE)

    while current_addr + 1 < end_addr:
        high = bus.peek(current_addr)
        low = bus.peek(current_addr + 1)
        opcode = (high << 8) | low

        try:
            operation = decode_opcode(opcode)
            mnemonic_str = operation.mnemonic
            if operation.operands:
                mnemonic_str += " " + ", ".join(operation.operands)
        except UnknownOpcode:
            mnemonic_str = f"DW ${opcode:04X}"

        result.append((current_addr, f"{high:02X} {low:02X}", mnemonic_str))
        current_addr += 2

    return result
