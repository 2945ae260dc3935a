import random
import unittest
from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.arch.chip8.instructions import decode_opcode

class TestChip8ControlInstructions(unittest.TestCase):
    def setUp(self):
        self.cpu = Chip8Cpu.create(random.Random(0))
        self.state = self.cpu.get_state()

    def _execute(self, opcode, current_pc=0x300):
        self.cpu.bus.load(current_pc, (opcode >> 8) & 0xFF)
        self.cpu.bus.load(current_pc + 1, opcode & 0xFF)
        self.state.pc = current_pc
        return self.cpu.step()

    def test_jp(self):
        self._execute(0x1ABC)
        self.assertEqual(self.state.pc, 0xABC)

    def test_jp_v0(self):
        self.state.v[0] = 0x10
        snapshot = self._execute(0xB400)
        self.assertEqual(self.state.pc, 0x410)
        self.assertEqual(snapshot.operation.operands, ["V0", "$400"])

    def test_call_records_call_site(self):
        self._execute(0x2500, current_pc=0x320)
        self.assertEqual(self.state.pc, 0x500)
        self.assertEqual(self.state.stack[0], 0x320)
        self.assertEqual(self.state.sp, 1)

    def test_ret_returns_after_call_site(self):
        self.state.stack[0] = 0x320
        self.state.sp = 1
        self._execute(0x00EE)
        self.assertEqual(self.state.pc, 0x322)
        self.assertEqual(self.state.sp, 0)

    def test_se_byte(self):
        self.state.v[3] = 0x42
        self._execute(0x3342)
        self.assertEqual(self.state.pc, 0x304)
        self._execute(0x3343)
        self.assertEqual(self.state.pc, 0x302)

    def test_sne_byte(self):
        self.state.v[3] = 0x42
        self._execute(0x4342)
        self.assertEqual(self.state.pc, 0x302)
        self._execute(0x4300)
        self.assertEqual(self.state.pc, 0x304)

    def test_se_reg(self):
        self.state.v[1] = 7
        self.state.v[2] = 7
        self._execute(0x5120)
        self.assertEqual(self.state.pc, 0x304)
        self.state.v[2] = 8
        self._execute(0x5120)
        self.assertEqual(self.state.pc, 0x302)

    def test_sne_reg(self):
        self.state.v[1] = 7
        self.state.v[2] = 8
        self._execute(0x9120)
        self.assertEqual(self.state.pc, 0x304)
        self.state.v[2] = 7
        self._execute(0x9120)
        self.assertEqual(self.state.pc, 0x302)

    def test_skp_and_sknp(self):
        self.state.v[4] = 0xA
        self._execute(0xE49E)
        self.assertEqual(self.state.pc, 0x302)
        self._execute(0xE4A1)
        self.assertEqual(self.state.pc, 0x304)

        self.cpu.press_key(0xA)
        self._execute(0xE49E)
        self.assertEqual(self.state.pc, 0x304)
        self._execute(0xE4A1)
        self.assertEqual(self.state.pc, 0x302)

    def test_skp_with_out_of_range_key_value(self):
        # 0xF を超えるキー値は常に「押されていない」として扱う
        self.cpu.set_key_mask(0xFFFF)
        self.state.v[0] = 0x10
        self._execute(0xE09E)
        self.assertEqual(self.state.pc, 0x302)
        self._execute(0xE0A1)
        self.assertEqual(self.state.pc, 0x304)

    def test_decode_mnemonics(self):
        self.assertEqual(decode_opcode(0x00EE).mnemonic, "RET")
        self.assertEqual(decode_opcode(0x2345).operands, ["$345"])
        self.assertEqual(decode_opcode(0xE19E).mnemonic, "SKP")
        self.assertEqual(decode_opcode(0xE1A1).mnemonic, "SKNP")

if __name__ == '__main__':
    unittest.main()
