# chopper/arch/chip8/state.py
"""
CHIP-8 VM固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from chopper.core.state import CpuState

# @intent:constant メモリマップとレジスタ構成の定数。
MEMORY_SIZE = 0x1000
FONT_START = 0x000
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START # 3584 bytes
REGISTER_COUNT = 16
STACK_DEPTH = 16
FLAG_REGISTER = 0xF

# @intent:responsibility CHIP-8 VMの全てのレジスタ、スタック、タイマ、表示要求フラグを保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 VMのレジスタ状態を保持するデータクラス。
    VFはキャリー/ボロー/衝突の結果レジスタを兼ねます。
    """
    pc: int = PROGRAM_START
    sp: int = 0
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT) # V0-VF
    i: int = 0x000     # Address Register
    delay_timer: int = 0
    sound_timer: int = 0
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)

    # 表示層への要求。表示層が処理した後にクリアする。
    clear_requested: bool = False
    draw_requested: bool = False

    # Fx0Aでキー入力待ちの場合、格納先レジスタ番号を保持する
    key_wait_register: Optional[int] = None

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF

    @property
    def waiting_for_key(self) -> bool:
        return self.key_wait_register is not None
