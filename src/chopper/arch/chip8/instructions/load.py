"""
転送命令（レジスタ、I、タイマ、メモリ間のロード/ストア）の実装。
"""
from chopper.core.snapshot import Operation
from chopper.transport.bus import Bus
from chopper.arch.chip8.state import Chip8CpuState, FONT_START
from .base import Peripherals, fields, check_range, make_op, reg, byte, addr

# --- 6xkk LD Vx, byte ---
def decode_ld_byte(opcode: int) -> Operation:
    return make_op(opcode, "LD", reg((opcode >> 8) & 0xF), byte(opcode & 0xFF))

def execute_ld_byte(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] = f.kk

# --- 8xy0 LD Vx, Vy ---
def decode_ld_reg(opcode: int) -> Operation:
    return make_op(opcode, "LD", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF))

def execute_ld_reg(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    state.v[f.x] = state.v[f.y]

# --- Annn LD I, addr ---
def decode_ld_i(opcode: int) -> Operation:
    return make_op(opcode, "LD", "I", addr(opcode & 0xFFF))

def execute_ld_i(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.i = fields(op).nnn

# --- Fx07 LD Vx, DT ---
def decode_ld_vx_dt(opcode: int) -> Operation:
    return make_op(opcode, "LD", reg((opcode >> 8) & 0xF), "DT")

def execute_ld_vx_dt(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.v[fields(op).x] = state.delay_timer

# --- Fx0A LD Vx, K ---
def decode_ld_key(opcode: int) -> Operation:
    return make_op(opcode, "LD", reg((opcode >> 8) & 0xF), "K")

# @intent:responsibility 押下中のキーがあれば即座に格納し、なければキー待ち状態に入ります。
# @intent:rationale ブロッキングせず、以降のサイクルでCPUが待ち状態を解決するため、
#                  ドライバのイベント処理とタイマ更新は待機中も継続する。
def execute_ld_key(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    x = fields(op).x
    key = io.keypad.first_pressed()
    if key is None:
        state.key_wait_register = x
    else:
        state.v[x] = key

# --- Fx15 LD DT, Vx ---
def decode_ld_dt(opcode: int) -> Operation:
    return make_op(opcode, "LD", "DT", reg((opcode >> 8) & 0xF))

def execute_ld_dt(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.delay_timer = state.v[fields(op).x]

# --- Fx18 LD ST, Vx ---
def decode_ld_st(opcode: int) -> Operation:
    return make_op(opcode, "LD", "ST", reg((opcode >> 8) & 0xF))

def execute_ld_st(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.sound_timer = state.v[fields(op).x]

# --- Fx29 LD F, Vx ---
def decode_ld_font(opcode: int) -> Operation:
    return make_op(opcode, "LD", "F", reg((opcode >> 8) & 0xF))

# @intent:responsibility Vxの値に対応するフォントグリフ（5バイト）の先頭アドレスをIに設定します。
def execute_ld_font(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.i = (FONT_START + 5 * state.v[fields(op).x]) & 0xFFFF

# --- Fx33 LD B, Vx ---
def decode_ld_bcd(opcode: int) -> Operation:
    return make_op(opcode, "LD", "B", reg((opcode >> 8) & 0xF))

# @intent:responsibility Vxを10進数の百/十/一の位に分解し、I, I+1, I+2に格納します。
def execute_ld_bcd(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    value = state.v[fields(op).x]
    check_range(state.i, 3)
    bus.write(state.i, (value // 100) % 10)
    bus.write(state.i + 1, (value // 10) % 10)
    bus.write(state.i + 2, value % 10)

# --- Fx55 LD [I], Vx ---
def decode_store_regs(opcode: int) -> Operation:
    return make_op(opcode, "LD", "[I]", reg((opcode >> 8) & 0xF))

def execute_store_regs(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    x = fields(op).x
    check_range(state.i, x + 1)
    for index in range(x + 1):
        bus.write(state.i + index, state.v[index])

# --- Fx65 LD Vx, [I] ---
def decode_load_regs(opcode: int) -> Operation:
    return make_op(opcode, "LD", reg((opcode >> 8) & 0xF), "[I]")

def execute_load_regs(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    x = fields(op).x
    check_range(state.i, x + 1)
    for index in range(x + 1):
        state.v[index] = bus.read(state.i + index)
