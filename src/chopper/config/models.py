from dataclasses import dataclass, field
from typing import Dict, List, Optional

from chopper.io.keypad import DEFAULT_KEYMAP

UNKNOWN_OPCODE_POLICIES = ("halt", "skip")

@dataclass
class DisplayConfig:
    scale: int = 20
    screen_color: int = 0x1A237E
    sprite_color: int = 0x9FA8DA

@dataclass
class CpuInitialState:
    pc: int = 0x200
    i: int = 0x000
    registers: List[int] = field(default_factory=list) # V0から順に適用
    delay_timer: int = 0
    sound_timer: int = 0

@dataclass
class SystemConfig:
    program: Optional[str] = None
    unknown_opcode: str = "halt"  # "halt", "skip"
    seed: Optional[int] = None    # RND命令の乱数シード
    display: DisplayConfig = field(default_factory=DisplayConfig)
    keymap: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_KEYMAP))
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
