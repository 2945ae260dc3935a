# chopper/core/cpu.py
"""
Core Layer (命令サイクル)

VMの1ステップを「待機判定 → フェッチ → デコード → PC更新 → 実行 → Snapshot生成」の
固定の手順として定義します。各段の中身は具体的なアーキテクチャ（arch層）が実装します。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from chopper.transport.bus import Bus
from chopper.core.snapshot import Snapshot, Operation, Metadata
from chopper.core.state import CpuState, RegisterGroup

# @intent:responsibility 命令サイクルの手順と、UIが必要とする参照APIの形を定めます。
class AbstractCpu(ABC):
    """
    バスを介してメモリにアクセスするVMの基底クラス。

    サブクラスは`_create_initial_state`, `_fetch`, `_decode`, `_execute`を実装します。
    待機状態を持つアーキテクチャは`_handle_halt`を上書きします。
    """
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count = 0

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility レジスタを初期状態に戻し、累計サイクル数を0にします。メモリには触れません。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    def get_state(self) -> CpuState:
        return self._state

    def restore_state(self, state: CpuState) -> None:
        self._state = state

    @property
    def bus(self) -> Bus:
        return self._bus

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @abstractmethod
    def _fetch(self) -> int:
        """PCの位置の命令語を読み出します。PCは変更しません。"""
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        命令語をOperationに変換します。
        解釈できない命令語では例外を送出し、状態には一切触れてはいけません。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility 1命令を実行し、そのサイクルで発生したバスアクセスを含むSnapshotを返します。
    # @intent:post-condition フェッチ/デコードで例外が出た場合、PCを含む状態は変化しない。
    def step(self) -> Snapshot:
        # 前のサイクル以降に溜まったアクセス（peek以外の外部アクセス）は捨てる
        self._bus.get_and_clear_activity_log()
        pc_at_start = self._state.pc

        waiting = self._handle_halt(pc_at_start)
        if waiting is not None:
            return waiting

        operation = self._decode(self._fetch())
        self._update_pc(operation)
        self._execute(operation)
        return self._create_snapshot(pc_at_start, operation)

    # @intent:return 待機中ならそのサイクルのSnapshot。通常はNoneで、フェッチに進む。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        return None

    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        self._cycle_count += operation.cycle_count
        text = " ".join([operation.mnemonic, ", ".join(operation.operands)]).rstrip()
        return Snapshot(
            state=self._state,
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info=text),
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # --- UI向けAPI ---

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """レジスタ名から現在値への辞書。UIはこれだけを見て値を表示する。"""
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterGroup]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """(address, hex_bytes, mnemonic) のリストを返します。バスのアクセスログは汚さない。"""
        pass
