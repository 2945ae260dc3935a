"""
表示命令（画面クリア要求、スプライト描画）の実装。
"""
from chopper.core.snapshot import Operation
from chopper.transport.bus import Bus
from chopper.common.errors import UnknownOpcode
from chopper.arch.chip8.state import Chip8CpuState
from .base import Peripherals, fields, check_range, make_op, reg

# --- 00E0 CLS ---
def decode_cls(opcode: int) -> Operation:
    return make_op(opcode, "CLS")

# @intent:responsibility 画面クリアを表示層へ要求します。フレームバッファの消去は表示層の処理後に行われます。
def execute_cls(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    state.clear_requested = True

# --- Dxyn DRW Vx, Vy, nibble ---
# @intent:pre-condition スプライトの高さnは1-15。0は未定義命令として扱う。
def decode_drw(opcode: int) -> Operation:
    n = opcode & 0xF
    if n == 0:
        raise UnknownOpcode(opcode)
    return make_op(opcode, "DRW", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF), str(n))

# @intent:responsibility Iから読み出したnバイトのスプライトを(Vx, Vy)にXOR描画し、衝突をVFに設定します。
# @intent:post-condition 座標は画面サイズでラップし、描画要求フラグを立てます。
def execute_drw(state: Chip8CpuState, bus: Bus, op: Operation, io: Peripherals) -> None:
    f = fields(op)
    check_range(state.i, f.n)
    origin_x = state.v[f.x]
    origin_y = state.v[f.y]
    framebuffer = io.framebuffer

    state.vf = 0
    for row in range(f.n):
        sprite_byte = bus.read(state.i + row)
        for bit_index in range(8):
            bit = (sprite_byte >> bit_index) & 0x1
            # 最上位ビットが左端
            if framebuffer.xor_pixel(origin_x + (7 - bit_index), origin_y + row, bit):
                state.vf = 1
    state.draw_requested = True
