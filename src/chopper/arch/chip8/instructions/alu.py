"""
算術/論理命令の実装。

フラグを定義する命令は、元の主演算の前後いずれかでVFを無条件に上書きします。
8xy6/8xyEはVyを参照せずVxのみをシフトします。
"""
from chopper.core.snapshot import Operation
from chopper.transport.bus import Bus
from chopper.arch.chip8.state import Chip8CpuState
from .base import Peripherals, fields, make_op, reg, byte

def _xy(opcode: int):
    return reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF)

# --- 7xkk ADD Vx, byte ---
def decode_add_byte(opcode: int) -> Operation:
    return make_op(opcode, "ADD", reg((opcode >> 8) & 0xF), byte(opcode & 0xFF))

# @intent:responsibility キャリーフラグを変更せずにVxへ即値を加算します（mod 256）。
def execute_add_byte(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] = (state.v[f.x] + f.kk) & 0xFF

# --- 8xy1 OR / 8xy2 AND / 8xy3 XOR ---
def decode_or(opcode: int) -> Operation:
    return make_op(opcode, "OR", *_xy(opcode))

def execute_or(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] |= state.v[f.y]

def decode_and(opcode: int) -> Operation:
    return make_op(opcode, "AND", *_xy(opcode))

def execute_and(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] &= state.v[f.y]

def decode_xor(opcode: int) -> Operation:
    return make_op(opcode, "XOR", *_xy(opcode))

def execute_xor(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] ^= state.v[f.y]

# --- 8xy4 ADD Vx, Vy ---
def decode_add_reg(opcode: int) -> Operation:
    return make_op(opcode, "ADD", *_xy(opcode))

# @intent:responsibility Vx + Vy を計算し、255を超えた場合にVF=1（キャリー）とします。
def execute_add_reg(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    total = state.v[f.x] + state.v[f.y]
    state.vf = 1 if total > 0xFF else 0
    state.v[f.x] = total & 0xFF

# --- 8xy5 SUB Vx, Vy ---
def decode_sub(opcode: int) -> Operation:
    return make_op(opcode, "SUB", *_xy(opcode))

# @intent:responsibility Vx - Vy を計算します。VFはVx > Vyのとき1（ボローなし）。
def execute_sub(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.vf = 1 if state.v[f.x] > state.v[f.y] else 0
    state.v[f.x] = (state.v[f.x] - state.v[f.y]) & 0xFF

# --- 8xy6 SHR Vx ---
def decode_shr(opcode: int) -> Operation:
    return make_op(opcode, "SHR", reg((opcode >> 8) & 0xF))

def execute_shr(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    x = fields(op).x
    state.vf = state.v[x] & 0x01
    state.v[x] = state.v[x] >> 1

# --- 8xy7 SUBN Vx, Vy ---
def decode_subn(opcode: int) -> Operation:
    return make_op(opcode, "SUBN", *_xy(opcode))

def execute_subn(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.vf = 1 if state.v[f.y] > state.v[f.x] else 0
    state.v[f.x] = (state.v[f.y] - state.v[f.x]) & 0xFF

# --- 8xyE SHL Vx ---
def decode_shl(opcode: int) -> Operation:
    return make_op(opcode, "SHL", reg((opcode >> 8) & 0xF))

def execute_shl(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    x = fields(op).x
    state.vf = 1 if state.v[x] & 0x80 else 0
    state.v[x] = (state.v[x] << 1) & 0xFF

# --- Cxkk RND Vx, byte ---
def decode_rnd(opcode: int) -> Operation:
    return make_op(opcode, "RND", reg((opcode >> 8) & 0xF), byte(opcode & 0xFF))

def execute_rnd(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] = io.rng.randrange(256) & f.kk

# --- Fx1E ADD I, Vx ---
def decode_add_i(opcode: int) -> Operation:
    return make_op(opcode, "ADD", "I", reg((opcode >> 8) & 0xF))

# @intent:responsibility IにVxを加算します。オーバーフローフラグは変更しません。
def execute_add_i(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.i = (state.i + state.v[fields(op).x]) & 0xFFFF
