# chopper/ui/app.py
"""
アプリケーションのエントリポイント。
コマンドライン引数を解釈し、メインウィンドウを起動します。
"""
import argparse
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from chopper.common.errors import Chip8Error
from chopper.config.loader import ConfigLoader
from chopper.config.models import SystemConfig
from .main_window import MainWindow

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chopper", description="CHIP-8 emulator")
    parser.add_argument("program", nargs="?", help="Path to a CHIP-8 program")
    parser.add_argument("--config", help="Path to a YAML system config")
    return parser

# @intent:responsibility 引数と設定ファイルからSystemConfigを組み立てます。引数のプログラムが優先されます。
def load_config(args: argparse.Namespace) -> SystemConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    if args.program:
        config.program = args.program
    return config

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        print(f"chopper: {e}", file=sys.stderr)
        return 1

    app = QApplication.instance() or QApplication(sys.argv[:1])

    try:
        main_win = MainWindow(config)
    except (OSError, ValueError, Chip8Error) as e:
        print(f"chopper: {e}", file=sys.stderr)
        return 1

    main_win.show()
    if args.program:
        main_win.start()
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())
