# chopper/arch/chip8/cpu.py
"""
CHIP-8 VMエミュレーションの中心モジュール。

命令サイクル（フェッチ/デコード/実行）、フォントセットとプログラムのロード、
タイマとキー入力へのアクセスを提供します。実行ループ自体は持たず、
ドライバが`step()`を繰り返し呼び出します。
"""
import random
from typing import Dict, List, Optional, Tuple

from chopper.core.cpu import AbstractCpu
from chopper.core.snapshot import Operation, Snapshot
from chopper.core.state import RegisterGroup, RegisterField
from chopper.common.errors import Chip8Error, InitError, OutOfBounds, ProgramTooLarge
from chopper.transport.bus import Bus, RAM
from chopper.io.framebuffer import Framebuffer
from chopper.arch.chip8.state import (
    Chip8CpuState, MEMORY_SIZE, FONT_START, PROGRAM_START, MAX_PROGRAM_SIZE, REGISTER_COUNT,
)
from chopper.arch.chip8.instructions import decode_opcode, execute_instruction
from chopper.arch.chip8.instructions.base import Peripherals
from chopper.arch.chip8 import disassembler

# @intent:constant 16進数字0-Fのグリフ（各5バイト）。0x000から配置される。
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0, # 0
    0x20, 0x60, 0x20, 0x20, 0x70, # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0, # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0, # 3
    0x90, 0x90, 0xF0, 0x10, 0x10, # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0, # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0, # 6
    0xF0, 0x10, 0x20, 0x40, 0x40, # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0, # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0, # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90, # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0, # B
    0xF0, 0x80, 0x80, 0x80, 0xF0, # C
    0xE0, 0x90, 0x90, 0x90, 0xE0, # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0, # E
    0xF0, 0x80, 0xF0, 0x80, 0x80, # F
])

# @intent:responsibility CHIP-8 VMの具体的なエミュレーションロジックを提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 VMをエミュレートするクラス。

    メモリはBus経由でアクセスし、フレームバッファ/キーパッド/乱数源はPeripheralsとして保持します。
    呼び出しは単一スレッドから行う前提で、内部同期は行いません。
    """
    # @intent:pre-condition busは0x000-0xFFFの全域をマップしている必要があります。
    def __init__(self, bus: Bus, rng: Optional[random.Random] = None):
        self._io = Peripherals(rng=rng if rng is not None else random.Random())
        super().__init__(bus)
        self._load_fontset()

    # @intent:responsibility 4KB RAMを接続したバスを生成し、その上にVMを構築します。
    @classmethod
    def create(cls, rng: Optional[random.Random] = None) -> "Chip8Cpu":
        bus = Bus()
        bus.register_device(0x000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))
        return cls(bus, rng)

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    def _load_fontset(self) -> None:
        if not self._bus.is_mapped(0x000, MEMORY_SIZE - 1):
            raise InitError("Error copying fontset data to memory: address space is not fully mapped")
        self._bus.load_block(FONT_START, FONTSET)

    # @intent:responsibility プログラムを0x200から配置します。他のメモリとレジスタは変更しません。
    def load_program(self, data: bytes) -> None:
        """
        ヘッダなしの生バイト列（ビッグエンディアン16bit命令の並び）をロードします。
        再度呼び出した場合はレジスタをリセットせずにプログラム領域だけを上書きします。
        """
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
        self._bus.load_block(PROGRAM_START, bytes(data))

    # @intent:responsibility レジスタ、タイマ、表示要求、フレームバッファ、キー状態を初期化します。
    # @intent:rationale メモリ（フォントとプログラム）は保持し、同じプログラムを最初から実行し直せるようにする。
    def reset(self) -> None:
        super().reset()
        self._io.framebuffer.clear()
        self._io.keypad.clear()

    def restore_state(self, state: Chip8CpuState, pixels: Optional[Tuple[Tuple[int, ...], ...]] = None) -> None:
        super().restore_state(state)
        if pixels is not None:
            self._io.framebuffer.restore(pixels)

    # @intent:responsibility キー入力待ち（Fx0A）の間、フェッチを行わずに待機状態を返します。
    # @intent:rationale 待機を明示的な状態として扱い、ドライバのイベント処理とタイマ更新を止めない。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        state = self._state
        register = state.key_wait_register
        if register is None:
            return None

        opcode_hex = f"F{register:X}0A"
        key = self._io.keypad.first_pressed()
        if key is None:
            operation = Operation(opcode_hex, "WAIT", ["K"], cycle_count=0, length=0)
        else:
            state.v[register] = key
            state.key_wait_register = None
            operation = Operation(opcode_hex, "KEY", [f"V{register:X}", f"{key:X}"], cycle_count=0, length=0)
        return self._create_snapshot(current_pc, operation)

    # @intent:responsibility PCの位置から16bitのオペコードをビッグエンディアンで読み出します。
    def _fetch(self) -> int:
        pc = self._state.pc
        if pc < 0 or pc + 1 >= MEMORY_SIZE:
            raise OutOfBounds(f"Program counter {pc:#06x} outside memory")
        return (self._bus.read(pc) << 8) | self._bus.read(pc + 1)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode)

    # @intent:post-condition 実行中にエラーが発生した場合、PCを命令の先頭へ戻してから再送出します。
    def _execute(self, operation: Operation) -> None:
        next_pc = self._state.pc
        try:
            execute_instruction(operation, self._state, self._bus, self._io)
        except Chip8Error:
            self._state.pc = (next_pc - operation.length) & 0xFFFF
            raise

    # --- Timers ---

    # @intent:responsibility 遅延タイマとサウンドタイマを1ずつ減算します（0未満にはならない）。
    def decrement_timers(self) -> None:
        self.decrement_delay_timer()
        self.decrement_sound_timer()

    def decrement_delay_timer(self) -> None:
        if self._state.delay_timer > 0:
            self._state.delay_timer -= 1

    def decrement_sound_timer(self) -> None:
        if self._state.sound_timer > 0:
            self._state.sound_timer -= 1

    @property
    def delay_timer(self) -> int:
        return self._state.delay_timer

    @property
    def sound_timer(self) -> int:
        return self._state.sound_timer

    # --- Input ---

    @property
    def key_mask(self) -> int:
        return self._io.keypad.mask

    def set_key_mask(self, mask: int) -> None:
        self._io.keypad.set_mask(mask)

    def press_key(self, key: int) -> None:
        self._io.keypad.press(key)

    def release_key(self, key: int) -> None:
        self._io.keypad.release(key)

    def is_key_down(self, key: int) -> bool:
        return self._io.keypad.is_down(key)

    # --- Display ---

    @property
    def framebuffer(self) -> Framebuffer:
        return self._io.framebuffer

    @property
    def clear_requested(self) -> bool:
        return self._state.clear_requested

    @property
    def draw_requested(self) -> bool:
        return self._state.draw_requested

    def clear_framebuffer(self) -> None:
        self._io.framebuffer.clear()

    def acknowledge_clear(self) -> None:
        self._state.clear_requested = False

    def acknowledge_draw(self) -> None:
        self._state.draw_requested = False

    # --- UI向けAPI ---

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{index:X}": s.v[index] for index in range(REGISTER_COUNT)}
        registers.update({"I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer})
        return registers

    def get_register_layout(self) -> List[RegisterGroup]:
        return [
            RegisterGroup("General", [RegisterField(f"V{index:X}", 8) for index in range(REGISTER_COUNT)]),
            RegisterGroup("Index/Pointers", [
                RegisterField("I", 16), RegisterField("PC", 16), RegisterField("SP", 8)
            ]),
            RegisterGroup("Timers", [RegisterField("DT", 8), RegisterField("ST", 8)]),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {
            "VF": s.vf != 0,
            "CLEAR": s.clear_requested,
            "DRAW": s.draw_requested,
            "WAIT": s.waiting_for_key,
            "SOUND": s.sound_timer > 0,
        }

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
