import random
import unittest
from chopper.arch.chip8.cpu import Chip8Cpu

class TestChip8AluInstructions(unittest.TestCase):
    def setUp(self):
        self.cpu = Chip8Cpu.create(random.Random(7))
        self.state = self.cpu.get_state()

    def _execute(self, opcode):
        self.cpu.bus.load(0x300, (opcode >> 8) & 0xFF)
        self.cpu.bus.load(0x301, opcode & 0xFF)
        self.state.pc = 0x300
        return self.cpu.step()

    def test_add_byte_wraps_without_touching_vf(self):
        self.state.v[2] = 0xFE
        self.state.vf = 0x55
        # ADD V2, $03
        self._execute(0x7203)
        self.assertEqual(self.state.v[2], 0x01)
        self.assertEqual(self.state.vf, 0x55)

    def test_logical_ops(self):
        self.state.v[1] = 0b1100
        self.state.v[2] = 0b1010
        self._execute(0x8121) # OR
        self.assertEqual(self.state.v[1], 0b1110)
        self.state.v[1] = 0b1100
        self._execute(0x8122) # AND
        self.assertEqual(self.state.v[1], 0b1000)
        self.state.v[1] = 0b1100
        self._execute(0x8123) # XOR
        self.assertEqual(self.state.v[1], 0b0110)

    def test_add_reg_with_carry(self):
        self.state.v[0] = 0xFF
        self.state.v[1] = 0x02
        snapshot = self._execute(0x8014)
        self.assertEqual(self.state.v[0], 0x01)
        self.assertEqual(self.state.vf, 1)
        self.assertEqual(snapshot.metadata.symbol_info, "ADD V0, V1")

    def test_add_reg_without_carry(self):
        self.state.v[0] = 0x10
        self.state.v[1] = 0x20
        self.state.vf = 1
        self._execute(0x8014)
        self.assertEqual(self.state.v[0], 0x30)
        self.assertEqual(self.state.vf, 0)

    def test_sub_with_borrow(self):
        self.state.v[0] = 0x05
        self.state.v[1] = 0x09
        self._execute(0x8015)
        self.assertEqual(self.state.v[0], 0xFC)
        self.assertEqual(self.state.vf, 0)

    def test_sub_without_borrow(self):
        self.state.v[0] = 0x09
        self.state.v[1] = 0x05
        self._execute(0x8015)
        self.assertEqual(self.state.v[0], 0x04)
        self.assertEqual(self.state.vf, 1)

    def test_sub_equal_values_sets_vf_zero(self):
        self.state.v[3] = 0x40
        self.state.v[4] = 0x40
        self._execute(0x8345)
        self.assertEqual(self.state.v[3], 0x00)
        self.assertEqual(self.state.vf, 0)

    def test_subn(self):
        self.state.v[0] = 0x05
        self.state.v[1] = 0x09
        self._execute(0x8017)
        self.assertEqual(self.state.v[0], 0x04)
        self.assertEqual(self.state.vf, 1)

    def test_shr_ignores_vy(self):
        self.state.v[0] = 0x05
        self.state.v[1] = 0xF0
        self._execute(0x8016)
        self.assertEqual(self.state.v[0], 0x02)
        self.assertEqual(self.state.vf, 1)
        self.assertEqual(self.state.v[1], 0xF0)

    def test_shl_ignores_vy(self):
        self.state.v[0] = 0x81
        self.state.v[1] = 0x01
        self._execute(0x801E)
        self.assertEqual(self.state.v[0], 0x02)
        self.assertEqual(self.state.vf, 1)

    def test_shl_without_high_bit(self):
        self.state.v[0] = 0x41
        self._execute(0x800E)
        self.assertEqual(self.state.v[0], 0x82)
        self.assertEqual(self.state.vf, 0)

    def test_flag_result_when_x_is_vf(self):
        # VFを対象にした場合、差はフラグ設定後のVFから計算される
        self.state.vf = 0x03
        self.state.v[1] = 0x01
        self._execute(0x8F15)
        self.assertEqual(self.state.vf, 0x00)

    def test_rnd_is_masked(self):
        for _ in range(32):
            self._execute(0xC50F)
            self.assertEqual(self.state.v[5] & 0xF0, 0)
        self._execute(0xC500)
        self.assertEqual(self.state.v[5], 0)

    def test_rnd_is_reproducible_with_seed(self):
        self._execute(0xC0FF)
        first = self.state.v[0]
        other = Chip8Cpu.create(random.Random(7))
        other.bus.load(0x200, 0xC0)
        other.bus.load(0x201, 0xFF)
        other.step()
        self.assertEqual(other.get_state().v[0], first)

    def test_add_i(self):
        self.state.i = 0xFFF
        self.state.v[2] = 0x02
        self.state.vf = 0
        self._execute(0xF21E)
        self.assertEqual(self.state.i, 0x1001)
        self.assertEqual(self.state.vf, 0)

if __name__ == '__main__':
    unittest.main()
