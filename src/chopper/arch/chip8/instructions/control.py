"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。

CPUは実行前にPCを次の命令へ進めているため、ここでのstate.pcは「次の命令」を指します。
"""
from chopper.core.snapshot import Operation
from chopper.transport.bus import Bus
from chopper.common.errors import StackOverflow, StackUnderflow
from chopper.arch.chip8.state import Chip8CpuState, STACK_DEPTH
from .base import Peripherals, fields, skip_next, make_op, reg, byte, addr

# --- 00EE RET ---
def decode_ret(opcode: int) -> Operation:
    return make_op(opcode, "RET")

# @intent:responsibility スタックから呼び出し元アドレスを取り出し、その次の命令へ戻ります。
def execute_ret(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    if state.sp == 0:
        raise StackUnderflow(f"RET with empty stack at {state.pc - 2:#05x}")
    state.sp -= 1
    state.pc = (state.stack[state.sp] + 2) & 0xFFFF

# --- 1nnn JP ---
def decode_jp(opcode: int) -> Operation:
    return make_op(opcode, "JP", addr(opcode & 0xFFF))

def execute_jp(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.pc = fields(op).nnn

# --- 2nnn CALL ---
def decode_call(opcode: int) -> Operation:
    return make_op(opcode, "CALL", addr(opcode & 0xFFF))

# @intent:responsibility 呼び出し元（CALL命令自身）のアドレスをスタックに積み、nnnへジャンプします。
def execute_call(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    if state.sp >= STACK_DEPTH:
        raise StackOverflow(f"CALL nesting exceeds {STACK_DEPTH} levels at {state.pc - 2:#05x}")
    # RETが+2するので、積むのは進める前のPC
    state.stack[state.sp] = (state.pc - 2) & 0xFFFF
    state.sp += 1
    state.pc = fields(op).nnn

# --- 3xkk SE Vx, byte ---
def decode_se_byte(opcode: int) -> Operation:
    return make_op(opcode, "SE", reg((opcode >> 8) & 0xF), byte(opcode & 0xFF))

def execute_se_byte(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    if state.v[f.x] == f.kk:
        skip_next(state)

# --- 4xkk SNE Vx, byte ---
def decode_sne_byte(opcode: int) -> Operation:
    return make_op(opcode, "SNE", reg((opcode >> 8) & 0xF), byte(opcode & 0xFF))

def execute_sne_byte(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    if state.v[f.x] != f.kk:
        skip_next(state)

# --- 5xy0 SE Vx, Vy ---
def decode_se_reg(opcode: int) -> Operation:
    return make_op(opcode, "SE", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF))

def execute_se_reg(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    if state.v[f.x] == state.v[f.y]:
        skip_next(state)

# --- 9xy0 SNE Vx, Vy ---
def decode_sne_reg(opcode: int) -> Operation:
    return make_op(opcode, "SNE", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF))

def execute_sne_reg(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    if state.v[f.x] != state.v[f.y]:
        skip_next(state)

# --- Bnnn JP V0, addr ---
def decode_jp_v0(opcode: int) -> Operation:
    return make_op(opcode, "JP", "V0", addr(opcode & 0xFFF))

def execute_jp_v0(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.pc = (fields(op).nnn + state.v[0]) & 0xFFFF

# --- Ex9E SKP Vx ---
def decode_skp(opcode: int) -> Operation:
    return make_op(opcode, "SKP", reg((opcode >> 8) & 0xF))

def execute_skp(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    if io.keypad.is_down(state.v[fields(op).x]):
        skip_next(state)

# --- ExA1 SKNP Vx ---
def decode_sknp(opcode: int) -> Operation:
    return make_op(opcode, "SKNP", reg((opcode >> 8) & 0xF))

def execute_sknp(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    if not io.keypad.is_down(state.v[fields(op).x]):
        skip_next(state)
