"""
CHIP-8 アーキテクチャ実装パッケージ。
"""
from .cpu import Chip8Cpu

__all__ = ["Chip8Cpu"]
