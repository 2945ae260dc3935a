# chopper/ui/main_window.py
"""
メインウィンドウの実装。
画面、レジスタ表示、実行制御ツールバーを保持し、QTimerでドライバを駆動します。
"""
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QDockWidget, QToolBar, QFileDialog, QMessageBox
from PySide6.QtGui import QAction, QKeyEvent, QKeySequence, QCloseEvent
from PySide6.QtCore import Qt, QTimer, Slot

from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.common.errors import Chip8Error
from chopper.config.builder import SystemBuilder
from chopper.config.models import SystemConfig
from chopper.debugger.debugger import Debugger
from chopper.driver.runner import Runner
from chopper.io.keypad import map_key
from chopper.loader.loader import ProgramLoader
from .screen_view import ScreenView, WidgetDisplay
from .register_view import RegisterView

WINDOW_TITLE = "Chopper | CHIP-8 Emulator"
# 1回のタイマ発火で実行する命令数
CYCLES_PER_TICK = 10

# @intent:responsibility アプリケーションのメインウィンドウを定義し、VMとドライバを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, config: Optional[SystemConfig] = None, parent=None):
        super().__init__(parent)
        self._config = config if config is not None else SystemConfig()
        self.setWindowTitle(WINDOW_TITLE)

        display = self._config.display
        self.screen_view = ScreenView(display.scale, display.screen_color, display.sprite_color)
        self.setCentralWidget(self.screen_view)
        self.setFocusPolicy(Qt.StrongFocus)

        self.register_view = RegisterView()
        dock = QDockWidget("Registers", self)
        dock.setAllowedAreas(Qt.RightDockWidgetArea)
        dock.setWidget(self.register_view)
        self.addDockWidget(Qt.RightDockWidgetArea, dock)

        self._timer = QTimer(self)
        self._timer.setInterval(1)
        self._timer.timeout.connect(self._on_tick)

        self._setup_backend()
        self._create_toolbar()
        self._update_ui_state(False)

    # @intent:responsibility 設定からVM、ドライバ、デバッガを生成します。
    def _setup_backend(self):
        self.cpu, self.bus = SystemBuilder().build_system(self._config)
        self.runner = Runner(self.cpu, WidgetDisplay(self.screen_view), unknown_opcode=self._config.unknown_opcode)
        self.debugger = Debugger(self.cpu)
        self.register_view.set_cpu(self.cpu)

    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.load_action = QAction("Load", self)
        self.load_action.setShortcut(QKeySequence("Ctrl+O"))
        self.load_action.triggered.connect(self._load_program_file)
        toolbar.addAction(self.load_action)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self.start)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self.stop)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step)
        toolbar.addAction(self.step_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self._reset)
        toolbar.addAction(self.reset_action)

    def _update_ui_state(self, is_running: bool):
        self.load_action.setEnabled(not is_running)
        self.run_action.setEnabled(not is_running)
        self.step_action.setEnabled(not is_running)
        self.stop_action.setEnabled(is_running)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @Slot()
    def start(self):
        self._update_ui_state(True)
        self.statusBar().showMessage("Running...")
        self._timer.start()

    @Slot()
    def stop(self):
        self._timer.stop()
        self._update_ui_state(False)
        self.statusBar().showMessage(f"Stopped at PC {self.cpu.get_state().pc:#05x}")
        self.register_view.update_registers()

    # @intent:responsibility 一定数の命令を実行します。VMのエラーで実行を停止し、内容を表示します。
    @Slot()
    def _on_tick(self):
        try:
            for _ in range(CYCLES_PER_TICK):
                self.runner.run_cycle()
        except Chip8Error as e:
            self.stop()
            QMessageBox.critical(self, "Error", str(e))

    # @intent:responsibility デバッガ経由で1命令実行し、表示要求とタイマを処理します。
    @Slot()
    def _step(self):
        try:
            snapshot = self.debugger.step_instruction()
        except Chip8Error as e:
            QMessageBox.critical(self, "Error", str(e))
            return
        self.runner.service_display()
        self.runner.tick_timers()
        self.register_view.update_registers()
        self.statusBar().showMessage(f"{snapshot.state.pc:#05x}: {snapshot.metadata.symbol_info}")

    @Slot()
    def _reset(self):
        self.cpu.reset()
        self.screen_view.clear_surface()
        self.register_view.update_registers()

    def load_program(self, file_name: str) -> None:
        ProgramLoader().load_program(file_name, self.cpu)
        self._reset()
        self.setWindowTitle(f"{WINDOW_TITLE} - {file_name}")

    @Slot()
    def _load_program_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open CHIP-8 Program", "", "CHIP-8 Programs (*.ch8 *.c8);;All Files (*)")
        if file_name:
            try:
                self.load_program(file_name)
            except (OSError, Chip8Error) as e:
                QMessageBox.critical(self, "Error", f"Failed to load program: {e}")

    # @intent:responsibility 物理キーからキーパッドのコードを求めます。
    # @intent:rationale event.text()は修飾キーで変わるため、押下と解放で同じ結果になるevent.key()を使う。
    def _key_code(self, event: QKeyEvent) -> Optional[int]:
        key = event.key()
        code = key.value if hasattr(key, "value") else int(key)
        # Qt::Keyの英数字は大文字のASCIIコードと一致する
        if not 0x20 < code < 0x7F:
            return None
        return map_key(chr(code), self._config.keymap)

    def keyPressEvent(self, event: QKeyEvent):
        code = self._key_code(event)
        if code is None:
            super().keyPressEvent(event)
            return
        if not event.isAutoRepeat():
            self.cpu.press_key(code)

    def keyReleaseEvent(self, event: QKeyEvent):
        code = self._key_code(event)
        if code is None:
            super().keyReleaseEvent(event)
            return
        if not event.isAutoRepeat():
            self.cpu.release_key(code)

    def closeEvent(self, event: QCloseEvent):
        self._timer.stop()
        event.accept()
