# chopper/core/snapshot.py
"""
1命令サイクルの観測記録。

step()の戻り値として、デコード結果、累計サイクル数、そのサイクル中のバスアクセスをまとめます。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from chopper.core.state import CpuState
from chopper.transport.bus import BusAccess

# @intent:responsibility デコードされた1命令。表示とディスパッチの両方に使われる。
@dataclass(frozen=True)
class Operation:
    opcode_hex: str # "A2F0"
    mnemonic: str # "LD"
    operands: List[str] = field(default_factory=list) # ["I", "$2F0"]
    cycle_count: int = 1
    length: int = 2 # PCを進めるバイト数。待機中の疑似命令は0

@dataclass(frozen=True)
class Metadata:
    cycle_count: int # リセットからの累計
    symbol_info: Optional[str] = None # "LD I, $2F0"

# @intent:responsibility あるサイクル直後のVMの観測結果。
@dataclass(frozen=True)
class Snapshot:
    """
    stateはVMが保持している状態オブジェクトそのもので、次のstep()で書き換わります。
    保存したい場合は呼び出し側でコピーを取ってください（Debuggerを参照）。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
