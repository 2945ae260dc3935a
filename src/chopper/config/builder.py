import random
from typing import Tuple

from chopper.transport.bus import Bus
from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.arch.chip8.state import REGISTER_COUNT
from chopper.loader.loader import ProgramLoader
from .models import SystemConfig, CpuInitialState

# @intent:responsibility システム構成（Config）に基づいて、BusとVMを生成し、プログラムと初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[Chip8Cpu, Bus]:
        rng = random.Random(config.seed) if config.seed is not None else None
        cpu = Chip8Cpu.create(rng)

        if config.program:
            ProgramLoader().load_program(config.program, cpu)

        self.apply_initial_state(cpu, config.initial_state)
        return cpu, cpu.bus

    # @intent:responsibility Configで定義された初期状態をVMに適用します。
    def apply_initial_state(self, cpu: Chip8Cpu, config_state: CpuInitialState) -> None:
        """
        VMをリセットし、Configから指定された初期値を適用します。
        """
        if config_state.pc % 2 != 0 or not 0 <= config_state.pc <= 0xFFE:
            raise ValueError(f"Initial pc must be an even address in 0x000-0xFFE: {config_state.pc:#x}")

        cpu.reset()
        state = cpu.get_state()

        if len(config_state.registers) > REGISTER_COUNT:
            print(f"Warning: {len(config_state.registers)} initial register values given, only V0-VF are applied")

        state.pc = config_state.pc
        state.i = config_state.i & 0xFFFF
        state.delay_timer = config_state.delay_timer & 0xFF
        state.sound_timer = config_state.sound_timer & 0xFF
        for index, value in enumerate(config_state.registers[:REGISTER_COUNT]):
            state.v[index] = value & 0xFF
