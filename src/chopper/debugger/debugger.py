# chopper/debugger/debugger.py
"""
VMの実行制御。

1命令ずつの実行、条件付きの連続実行（ブレークポイント）、履歴を使ったステップバックを提供します。
ステップバックは実行前のレジスタと画面のコピー、およびSnapshotに記録された
書き込み前の値を使ってメモリを元に戻します。
"""
import copy
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.arch.chip8.state import Chip8CpuState
from chopper.core.snapshot import Snapshot
from chopper.transport.bus import BusAccessType

class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # 命令の実行前、PCがvalueに一致
    MEMORY_READ = "MEMORY_READ"         # 命令がaddressを読んだ
    MEMORY_WRITE = "MEMORY_WRITE"       # 命令がaddressに書いた
    REGISTER_VALUE = "REGISTER_VALUE"   # register_nameの値がvalueになった
    REGISTER_CHANGE = "REGISTER_CHANGE" # register_nameの値が命令の前後で変わった

# @intent:data_structure 停止条件。フィールドの組み合わせはcondition_typeで決まる。
@dataclass(frozen=True)
class BreakpointCondition:
    condition_type: BreakpointConditionType
    value: Optional[int] = None
    address: Optional[int] = None
    register_name: Optional[str] = None  # get_register_map()のキー ("V3", "I", "DT" など)
    enabled: bool = True

@dataclass(frozen=True)
class HistoryEntry:
    state_before: Chip8CpuState
    pixels_before: Tuple[Tuple[int, ...], ...]
    snapshot: Snapshot

# @intent:responsibility VMを停止条件付きで実行し、実行履歴を保持します。
class Debugger:
    def __init__(self, cpu: Chip8Cpu, history_limit: int = 10000):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running = False
        self._last_snapshot: Optional[Snapshot] = None
        self._registers_before: Dict[str, int] = cpu.get_register_map()
        self._history: Deque[HistoryEntry] = deque(maxlen=history_limit)

    # --- ブレークポイント ---

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def _active(self, condition_type: BreakpointConditionType) -> List[BreakpointCondition]:
        return [bp for bp in self._breakpoints if bp.enabled and bp.condition_type == condition_type]

    def _stops_before(self, pc: int) -> bool:
        return any(bp.value == pc for bp in self._active(BreakpointConditionType.PC_MATCH))

    # @intent:responsibility 実行済みの命令が、PC以外の停止条件を満たしたかを判定します。
    def _stops_after(self, snapshot: Snapshot) -> bool:
        touched = {
            BusAccessType.READ: {a.address for a in snapshot.bus_activity if a.access_type == BusAccessType.READ},
            BusAccessType.WRITE: {a.address for a in snapshot.bus_activity if a.access_type == BusAccessType.WRITE},
        }
        if any(bp.address in touched[BusAccessType.READ] for bp in self._active(BreakpointConditionType.MEMORY_READ)):
            return True
        if any(bp.address in touched[BusAccessType.WRITE] for bp in self._active(BreakpointConditionType.MEMORY_WRITE)):
            return True

        registers = self._cpu.get_register_map()
        for bp in self._active(BreakpointConditionType.REGISTER_VALUE):
            if registers.get(bp.register_name) == bp.value:
                return True
        for bp in self._active(BreakpointConditionType.REGISTER_CHANGE):
            name = bp.register_name
            if name in registers and registers[name] != self._registers_before.get(name):
                return True
        return False

    # --- 実行制御 ---

    @property
    def is_running(self) -> bool:
        return self._running

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def get_history(self) -> List[Snapshot]:
        return [entry.snapshot for entry in self._history]

    def step_instruction(self) -> Snapshot:
        """
        1命令を実行して履歴に積みます。
        VMの例外はそのまま送出され、その命令は履歴に残りません。
        """
        state_before = copy.deepcopy(self._cpu.get_state())
        pixels_before = self._cpu.framebuffer.copy()
        self._registers_before = self._cpu.get_register_map()

        snapshot = self._cpu.step()
        self._history.append(HistoryEntry(state_before, pixels_before, snapshot))
        self._last_snapshot = snapshot
        return snapshot

    # @intent:responsibility 直近の1命令を取り消し、その前のSnapshot（なければNone）を返します。
    def step_back(self) -> Optional[Snapshot]:
        if not self._history:
            return None

        entry = self._history.pop()
        for access in reversed(entry.snapshot.bus_activity):
            if access.access_type == BusAccessType.WRITE and access.previous_data is not None:
                self._cpu.bus.load(access.address, access.previous_data)
        self._cpu.restore_state(entry.state_before, entry.pixels_before)

        self._last_snapshot = self._history[-1].snapshot if self._history else None
        return self._last_snapshot

    def run(self, max_steps: Optional[int] = None) -> int:
        """
        停止条件、キー入力待ち、max_stepsのいずれかに達するまで実行し、実行した命令数を返します。
        PCブレークポイント上から再開した場合は、その命令を先に1つ実行します。
        """
        self._running = True
        steps = 0
        if self._stops_before(self._cpu.get_state().pc):
            self.step_instruction()
            steps += 1

        while self._running and (max_steps is None or steps < max_steps):
            pc = self._cpu.get_state().pc
            if self._stops_before(pc):
                print(f"Breakpoint hit at PC: {pc:#06x}")
                break

            snapshot = self.step_instruction()
            steps += 1
            if snapshot.operation.mnemonic == "WAIT":
                break
            if self._stops_after(snapshot):
                print(f"Breakpoint hit at PC: {snapshot.state.pc:#06x}")
                break

        self._running = False
        return steps

    def stop(self) -> None:
        self._running = False
