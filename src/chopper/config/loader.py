import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from .models import SystemConfig, DisplayConfig, CpuInitialState, UNKNOWN_OPCODE_POLICIES
from chopper.io.keypad import DEFAULT_KEYMAP, KEY_COUNT

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            config = self._parse_config(self._read_yaml(f))
        # 相対パスのプログラムは設定ファイルの場所を基準に解決する
        if config.program and not Path(config.program).is_absolute():
            config.program = str(Path(path).parent / config.program)
        return config

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(self._read_yaml(text))

    # @intent:post-condition 構文エラーやマッピング以外の文書はValueErrorとして送出します。
    def _read_yaml(self, stream) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML config: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a mapping, got {type(data).__name__}")
        return data

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        policy = str(data.get("unknown_opcode", "halt")).lower()
        if policy not in UNKNOWN_OPCODE_POLICIES:
            raise ValueError(f"Invalid unknown_opcode policy: {policy}")

        display_data = self._section(data, "display")
        display = DisplayConfig(
            scale=self._parse_int(display_data.get("scale", 20)),
            screen_color=self._parse_int(display_data.get("screen_color", 0x1A237E)),
            sprite_color=self._parse_int(display_data.get("sprite_color", 0x9FA8DA)),
        )
        if display.scale <= 0:
            raise ValueError(f"Display scale must be positive: {display.scale}")

        keymap = dict(DEFAULT_KEYMAP)
        for name, code in self._section(data, "keymap").items():
            value = self._parse_int(code)
            if not 0 <= value < KEY_COUNT:
                raise ValueError(f"Invalid key code for '{name}': {code}")
            keymap[str(name).upper()] = value

        initial_state_data = self._section(data, "initial_state")
        registers = initial_state_data.get("registers") or []
        if not isinstance(registers, list):
            raise ValueError("initial_state.registers must be a list")
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0x200)),
            i=self._parse_int(initial_state_data.get("i", 0)),
            registers=[self._parse_int(v) for v in registers],
            delay_timer=self._parse_int(initial_state_data.get("delay_timer", 0)),
            sound_timer=self._parse_int(initial_state_data.get("sound_timer", 0)),
        )
        # 命令は2バイト境界に並び、最後の命令は0xFFEから始まる
        if initial_state.pc % 2 != 0 or not 0 <= initial_state.pc <= 0xFFE:
            raise ValueError(f"Initial pc must be an even address in 0x000-0xFFE: {initial_state.pc:#x}")

        return SystemConfig(
            program=data.get("program"),
            unknown_opcode=policy,
            seed=self._parse_optional_int(data.get("seed")),
            display=display,
            keymap=keymap,
            initial_state=initial_state,
        )

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"Config section '{name}' must be a mapping")
        return section

    def _parse_optional_int(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return self._parse_int(value)

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
