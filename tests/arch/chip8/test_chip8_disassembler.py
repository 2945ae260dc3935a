import unittest
from chopper.arch.chip8.cpu import Chip8Cpu

class TestChip8Disassembler(unittest.TestCase):
    def setUp(self):
        self.cpu = Chip8Cpu.create()
        self.cpu.load_program(bytes([0x00, 0xE0, 0xA2, 0xF0, 0xD0, 0x15, 0x50, 0x01, 0x12, 0x00]))

    def test_disassemble_program(self):
        lines = self.cpu.disassemble(0x200, 10)
        self.assertEqual(lines, [
            (0x200, "00 E0", "CLS"),
            (0x202, "A2 F0", "LD I, $2F0"),
            (0x204, "D0 15", "DRW V0, V1, 5"),
            (0x206, "50 01", "DW $5001"),
            (0x208, "12 00", "JP $200"),
        ])

    def test_disassemble_does_not_log_bus_activity(self):
        self.cpu.disassemble(0x200, 10)
        self.assertEqual(self.cpu.bus.get_and_clear_activity_log(), [])

    def test_disassemble_stops_at_end_of_memory(self):
        lines = self.cpu.disassemble(0xFFC, 16)
        self.assertEqual([addr for addr, _, _ in lines], [0xFFC, 0xFFE])

if __name__ == '__main__':
    unittest.main()
