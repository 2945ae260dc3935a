"""
VMのレジスタを表示するウィジェット。
CPUのレイアウト情報を利用して動的にUIを構築します。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QVBoxLayout, QFormLayout, QLabel, QGroupBox
from PySide6.QtGui import QFontDatabase
from PySide6.QtCore import Qt

from chopper.core.cpu import AbstractCpu

# @intent:responsibility CPUのレジスタ値とフラグを表示するUIウィジェットを提供します。
class RegisterView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(5, 5, 5, 5)

        self._font_family = QFontDatabase.systemFont(QFontDatabase.FixedFont).family()
        self._value_labels: Dict[str, QLabel] = {}
        self._digits: Dict[str, int] = {}
        self._flag_label = QLabel()
        self._cpu: Optional[AbstractCpu] = None

    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._setup_ui()
        self.update_registers()

    # @intent:responsibility CPUから取得したレイアウト情報に基づいてUIを構築します。
    def _setup_ui(self):
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._value_labels.clear()
        self._digits.clear()

        for group in self._cpu.get_register_layout():
            group_box = QGroupBox(group.title)
            group_box.setStyleSheet("QGroupBox { font-weight: bold; color: #EEE; } QGroupBox::title { color: #00AAAA; }")
            group_layout = QFormLayout(group_box)
            group_layout.setLabelAlignment(Qt.AlignLeft)
            group_layout.setSpacing(3)

            for reg in group.registers:
                digits = (reg.width + 3) // 4
                self._digits[reg.name] = digits

                label_value = QLabel(f"0x{'0' * digits}")
                label_value.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: #FFD700;")
                label_value.setAlignment(Qt.AlignRight)
                group_layout.addRow(QLabel(f"{reg.name}:"), label_value)
                self._value_labels[reg.name] = label_value

            self._layout.addWidget(group_box)

        self._flag_label = QLabel()
        self._flag_label.setStyleSheet(f"font-family: '{self._font_family}', monospace;")
        self._layout.addWidget(self._flag_label)
        self._layout.addStretch()

    def update_registers(self):
        if not self._cpu:
            return

        for name, value in self._cpu.get_register_map().items():
            if name in self._value_labels:
                digits = self._digits[name]
                self._value_labels[name].setText(f"0x{value:0{digits}X}")

        flags = self._cpu.get_flag_state()
        self._flag_label.setText("  ".join(name for name, on in flags.items() if on))

    def register_text(self, name: str) -> str:
        return self._value_labels[name].text()
