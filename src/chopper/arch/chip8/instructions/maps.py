"""
オペコードパターンと命令実装のマッピング定義。

キーは`base.pattern_key()`で正規化したオペコード（オペランド部を0にしたもの）です。
"""
from . import load
from . import alu
from . import control
from . import display

# @intent:map パターンキーからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    # Display
    0x00E0: display.decode_cls,
    0xD000: display.decode_drw,

    # Control
    0x00EE: control.decode_ret,
    0x1000: control.decode_jp,
    0x2000: control.decode_call,
    0x3000: control.decode_se_byte,
    0x4000: control.decode_sne_byte,
    0x5000: control.decode_se_reg,
    0x9000: control.decode_sne_reg,
    0xB000: control.decode_jp_v0,
    0xE09E: control.decode_skp,
    0xE0A1: control.decode_sknp,

    # Load/Store
    0x6000: load.decode_ld_byte,
    0x8000: load.decode_ld_reg,
    0xA000: load.decode_ld_i,
    0xF007: load.decode_ld_vx_dt,
    0xF00A: load.decode_ld_key,
    0xF015: load.decode_ld_dt,
    0xF018: load.decode_ld_st,
    0xF029: load.decode_ld_font,
    0xF033: load.decode_ld_bcd,
    0xF055: load.decode_store_regs,
    0xF065: load.decode_load_regs,

    # ALU
    0x7000: alu.decode_add_byte,
    0x8001: alu.decode_or,
    0x8002: alu.decode_and,
    0x8003: alu.decode_xor,
    0x8004: alu.decode_add_reg,
    0x8005: alu.decode_sub,
    0x8006: alu.decode_shr,
    0x8007: alu.decode_subn,
    0x800E: alu.decode_shl,
    0xC000: alu.decode_rnd,
    0xF01E: alu.decode_add_i,
}

# @intent:map パターンキーから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Display
    0x00E0: display.execute_cls,
    0xD000: display.execute_drw,

    # Control
    0x00EE: control.execute_ret,
    0x1000: control.execute_jp,
    0x2000: control.execute_call,
    0x3000: control.execute_se_byte,
    0x4000: control.execute_sne_byte,
    0x5000: control.execute_se_reg,
    0x9000: control.execute_sne_reg,
    0xB000: control.execute_jp_v0,
    0xE09E: control.execute_skp,
    0xE0A1: control.execute_sknp,

    # Load/Store
    0x6000: load.execute_ld_byte,
    0x8000: load.execute_ld_reg,
    0xA000: load.execute_ld_i,
    0xF007: load.execute_ld_vx_dt,
    0xF00A: load.execute_ld_key,
    0xF015: load.execute_ld_dt,
    0xF018: load.execute_ld_st,
    0xF029: load.execute_ld_font,
    0xF033: load.execute_ld_bcd,
    0xF055: load.execute_store_regs,
    0xF065: load.execute_load_regs,

    # ALU
    0x7000: alu.execute_add_byte,
    0x8001: alu.execute_or,
    0x8002: alu.execute_and,
    0x8003: alu.execute_xor,
    0x8004: alu.execute_add_reg,
    0x8005: alu.execute_sub,
    0x8006: alu.execute_shr,
    0x8007: alu.execute_subn,
    0x800E: alu.execute_shl,
    0xC000: alu.execute_rnd,
    0xF01E: alu.execute_add_i,
}
