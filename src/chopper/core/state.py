# chopper/core/state.py
"""
VMの状態と、その表示用の記述子。

CpuStateは命令サイクルが共通で扱うPC/SPだけを持ち、CHIP-8固有のレジスタは
arch層のサブクラスが追加します。
"""
from dataclasses import dataclass
from typing import List, NamedTuple

# @intent:responsibility 命令サイクルが参照するプログラムカウンタとスタックポインタを保持します。
@dataclass
class CpuState:
    pc: int = 0x000
    sp: int = 0

# @intent:data_structure 表示するレジスタ1本分。widthはビット幅で、16進の桁数の決定に使う。
class RegisterField(NamedTuple):
    name: str
    width: int

# @intent:data_structure 見出し付きのレジスタのまとまり（"General", "Timers"など）。
class RegisterGroup(NamedTuple):
    title: str
    registers: List[RegisterField]
