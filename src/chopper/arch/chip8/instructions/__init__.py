"""
CHIP-8命令セット実装パッケージ。
"""
from chopper.transport.bus import Bus
from chopper.core.snapshot import Operation
from chopper.common.errors import UnknownOpcode
from chopper.arch.chip8.state import Chip8CpuState
from .base import Peripherals, pattern_key
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility CHIP-8のオペコードをデコードします。
# @intent:post-condition 未定義のオペコードはUnknownOpcodeを送出し、黙って無視しない。
def decode_opcode(opcode: int) -> Operation:
    decoder = DECODE_MAP.get(pattern_key(opcode))
    if decoder is None:
        raise UnknownOpcode(opcode)
    return decoder(opcode)

# @intent:responsibility デコードされたCHIP-8命令を実行します。
def execute_instruction(operation: Operation, state: Chip8CpuState, bus: Bus, io: Peripherals) -> None:
    opcode = int(operation.opcode_hex, 16)
    executor = EXECUTE_MAP.get(pattern_key(opcode))
    if executor is None:
        raise UnknownOpcode(opcode)
    executor(state, bus, operation, io)
