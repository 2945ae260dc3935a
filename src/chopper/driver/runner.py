# chopper/driver/runner.py
"""
ドライバ（実行ループ本体）。

VMは自身のループを持たないため、このモジュールが1サイクルごとに
命令実行 → 表示要求の処理 → 60Hzタイマ更新 を順序付けます。
表示とタイマの実体はフロントエンドから注入されます。
"""
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.common.errors import UnknownOpcode
from chopper.core.snapshot import Snapshot
from chopper.io.framebuffer import Framebuffer

# @intent:constant タイマの更新間隔（ミリ秒）。60Hz固定。
TIMER_PERIOD_MS = 1000.0 / 60

# @intent:responsibility 表示層のインターフェースを定義します。
class Display(ABC):
    @abstractmethod
    def clear(self) -> None:
        """表示面を背景色で塗りつぶします。"""
        pass

    @abstractmethod
    def draw(self, framebuffer: Framebuffer) -> None:
        """フレームバッファの内容をラスタライズします。"""
        pass

# @intent:responsibility VMの1サイクル分の処理と、表示要求/タイマの後処理を行います。
class Runner:
    """
    1回の`run_cycle()`で1命令を実行し、VMが立てた表示要求を表示層に伝えてフラグを下ろし、
    前回の更新から1/60秒以上経過していればタイマを1つ減算します。
    """
    def __init__(
        self,
        cpu: Chip8Cpu,
        display: Display,
        clock: Callable[[], float] = time.monotonic,
        unknown_opcode: str = "halt",
    ):
        if unknown_opcode not in ("halt", "skip"):
            raise ValueError(f"Invalid unknown_opcode policy: {unknown_opcode}")
        self._cpu = cpu
        self._display = display
        self._clock = clock
        self._unknown_opcode = unknown_opcode
        self._last_timer_update = clock()

    @property
    def cpu(self) -> Chip8Cpu:
        return self._cpu

    # @intent:responsibility 1命令を実行し、その後の表示要求とタイマ更新を処理します。
    # @intent:post-condition 未定義命令はポリシーが"halt"なら再送出、"skip"なら報告してPCを2進める。
    def run_cycle(self) -> Optional[Snapshot]:
        snapshot = None
        try:
            snapshot = self._cpu.step()
        except UnknownOpcode as e:
            if self._unknown_opcode == "halt":
                raise
            state = self._cpu.get_state()
            print(f"{e} at {state.pc:#05x}, skipped")
            state.pc = (state.pc + 2) & 0xFFFF

        self.service_display()
        self.tick_timers()
        return snapshot

    def service_display(self) -> None:
        cpu = self._cpu
        if cpu.clear_requested:
            self._display.clear()
            cpu.clear_framebuffer()
            cpu.acknowledge_clear()

        if cpu.draw_requested:
            self._display.draw(cpu.framebuffer)
            cpu.acknowledge_draw()

    # @intent:responsibility 前回の更新から1/60秒以上経過していれば、タイマを1つ減算します。
    def tick_timers(self) -> bool:
        now = self._clock()
        if (now - self._last_timer_update) * 1000.0 >= TIMER_PERIOD_MS:
            self._cpu.decrement_timers()
            self._last_timer_update = now
            return True
        return False

    def run(self, cycles: int) -> int:
        """
        指定サイクル数だけ実行し、実行したサイクル数を返します。
        """
        for _ in range(cycles):
            self.run_cycle()
        return cycles
