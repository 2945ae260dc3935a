"""
CHIP-8命令実装用の共通ユーティリティ。
"""
import random
from dataclasses import dataclass, field
from typing import NamedTuple

from chopper.core.snapshot import Operation
from chopper.common.errors import OutOfBounds
from chopper.io.framebuffer import Framebuffer
from chopper.io.keypad import Keypad
from chopper.arch.chip8.state import MEMORY_SIZE

# @intent:data_structure オペコードから切り出した共通フィールド。
class OpcodeFields(NamedTuple):
    x: int    # 上位バイトの下位4bit (レジスタ番号)
    y: int    # 下位バイトの上位4bit (レジスタ番号)
    n: int    # 最下位4bit
    kk: int   # 下位8bit
    nnn: int  # 下位12bit (アドレス)

# @intent:responsibility 命令の実行に必要な、レジスタ以外の周辺装置をまとめます。
@dataclass
class Peripherals:
    framebuffer: Framebuffer = field(default_factory=Framebuffer)
    keypad: Keypad = field(default_factory=Keypad)
    rng: random.Random = field(default_factory=random.Random)

def decode_fields(opcode: int) -> OpcodeFields:
    return OpcodeFields(
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        kk=opcode & 0xFF,
        nnn=opcode & 0xFFF,
    )

def fields(op: Operation) -> OpcodeFields:
    return decode_fields(int(op.opcode_hex, 16))

# @intent:utility_function 上位ニブルと、命令ファミリーごとの副判別子からマップのキーを作ります。
# @intent:rationale 0/E/F系は下位バイト、5/8/9系は下位ニブルで複数の命令を多重化している。
def pattern_key(opcode: int) -> int:
    family = opcode & 0xF000
    if family in (0x0000, 0xE000, 0xF000):
        return opcode & 0xF0FF
    if family in (0x5000, 0x8000, 0x9000):
        return opcode & 0xF00F
    return family

# @intent:utility_function Iを起点とするメモリアクセスが4KB内に収まることを検証します。
def check_range(start: int, count: int) -> None:
    if start < 0 or start + count > MEMORY_SIZE:
        raise OutOfBounds(
            f"Access {start:#05x}-{start + count - 1:#05x} exceeds memory size {MEMORY_SIZE:#06x}"
        )

def skip_next(state) -> None:
    state.pc = (state.pc + 2) & 0xFFFF

def reg(index: int) -> str:
    return f"V{index:X}"

def byte(value: int) -> str:
    return f"${value:02X}"

def addr(value: int) -> str:
    return f"${value:03X}"

def make_op(opcode: int, mnemonic: str, *operands: str) -> Operation:
    return Operation(opcode_hex=f"{opcode:04X}", mnemonic=mnemonic, operands=list(operands))
