# tests/core/test_abstract_cpu.py
"""
chopper.core.cpuモジュールの単体テスト。
命令サイクルのテンプレート（フェッチ→デコード→PC更新→実行→Snapshot生成）を検証します。
"""
import pytest
from typing import Dict, List, Optional, Tuple

from chopper.core.state import CpuState
from chopper.core.cpu import AbstractCpu
from chopper.core.snapshot import Snapshot, Operation
from chopper.transport.bus import Bus, RAM, BusAccessType
from chopper.core.state import RegisterGroup, RegisterField

class DummyCpu(AbstractCpu):
    """1バイト命令のみを持つテスト用CPU。0xFFで待機状態に入ります。"""
    def __init__(self, bus: Bus):
        super().__init__(bus)
        self.halted = False
        self.executed: List[str] = []

    def _create_initial_state(self) -> CpuState:
        return CpuState(pc=0x0010, sp=0x00F0)

    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        if not self.halted:
            return None
        return self._create_snapshot(current_pc, Operation("FF", "HALT", cycle_count=0, length=0))

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        if opcode == 0xFF:
            return Operation(opcode_hex="FF", mnemonic="HALT", length=1)
        return Operation(opcode_hex=f"{opcode:02X}", mnemonic="NOP", length=1, cycle_count=2)

    def _execute(self, operation: Operation) -> None:
        self.executed.append(operation.mnemonic)
        if operation.mnemonic == "HALT":
            self.halted = True
        else:
            self._bus.write(0x0020, 0xAA)

    def get_register_map(self) -> Dict[str, int]:
        return {"PC": self._state.pc, "SP": self._state.sp}

    def get_register_layout(self) -> List[RegisterGroup]:
        return [RegisterGroup("Test Group", [RegisterField("PC", 16), RegisterField("SP", 16)])]

    def get_flag_state(self) -> Dict[str, bool]:
        return {"HALT": self.halted}

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return [(start_addr + i, "00", "NOP") for i in range(length)]

# @intent:test_suite 抽象CPUの状態管理と命令サイクルの検証。
class TestAbstractCpu:
    @pytest.fixture
    def cpu(self):
        bus = Bus()
        bus.register_device(0x0000, 0x00FF, RAM(0x100))
        return DummyCpu(bus)

    # @intent:test_case_initial_state 構築直後に初期状態が生成されていることを検証します。
    def test_initial_state(self, cpu):
        assert cpu.get_state() == CpuState(pc=0x0010, sp=0x00F0)
        assert cpu.cycle_count == 0

    # @intent:test_case_step 1ステップでPCが進み、バスアクティビティがSnapshotに含まれることを検証します。
    def test_step_produces_snapshot(self, cpu):
        cpu.bus.get_and_clear_activity_log()
        snapshot = cpu.step()

        assert snapshot.state.pc == 0x0011
        assert snapshot.operation.mnemonic == "NOP"
        assert snapshot.metadata.cycle_count == 2
        assert snapshot.metadata.symbol_info == "NOP"
        kinds = [(a.address, a.access_type) for a in snapshot.bus_activity]
        assert kinds == [(0x0010, BusAccessType.READ), (0x0020, BusAccessType.WRITE)]
        assert cpu.bus.get_and_clear_activity_log() == []

    # @intent:test_case_stale_log 前サイクル以前のログは次のSnapshotに混入しないことを検証します。
    def test_step_discards_stale_activity(self, cpu):
        cpu.bus.read(0x0080)
        snapshot = cpu.step()
        assert all(a.address != 0x0080 for a in snapshot.bus_activity)

    # @intent:test_case_halt_hook 待機フックがSnapshotを返す間はフェッチが行われないことを検証します。
    def test_halt_hook_skips_fetch(self, cpu):
        cpu.bus.load(0x0010, 0xFF)
        cpu.step()
        assert cpu.executed == ["HALT"]
        pc = cpu.get_state().pc

        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "HALT"
        assert snapshot.bus_activity == []
        assert cpu.get_state().pc == pc
        assert cpu.executed == ["HALT"]

    def test_reset_and_restore(self, cpu):
        cpu.step()
        saved = CpuState(pc=0x0050, sp=0x0001)
        cpu.restore_state(saved)
        assert cpu.get_state() is saved

        cpu.reset()
        assert cpu.get_state().pc == 0x0010
        assert cpu.cycle_count == 0

    def test_cannot_instantiate_abstract_cpu(self):
        with pytest.raises(TypeError):
            AbstractCpu(Bus())
