# tests/driver/test_runner.py
"""
chopper.driver.runnerモジュールの単体テスト。
表示要求の処理順序、60Hzタイマ、未定義命令のポリシーを検証します。
"""
import pytest

from chopper.arch.chip8.cpu import Chip8Cpu
from chopper.common.errors import UnknownOpcode
from chopper.driver.runner import Runner, Display

class RecordingDisplay(Display):
    def __init__(self):
        self.calls = []

    def clear(self):
        self.calls.append(("clear",))

    def draw(self, framebuffer):
        self.calls.append(("draw", framebuffer.lit_pixels()))

class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

def make_runner(*opcodes, policy="halt"):
    cpu = Chip8Cpu.create()
    data = bytearray()
    for opcode in opcodes:
        data += bytes([opcode >> 8, opcode & 0xFF])
    cpu.load_program(bytes(data))
    display = RecordingDisplay()
    clock = FakeClock()
    return Runner(cpu, display, clock=clock, unknown_opcode=policy), cpu, display, clock

# @intent:test_suite ドライバの1サイクル処理の検証。
class TestRunner:
    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            Runner(Chip8Cpu.create(), RecordingDisplay(), unknown_opcode="ignore")

    # @intent:test_case_clear_request 画面クリア要求が表示層へ伝わり、フレームバッファも消去されることを検証します。
    def test_clear_request_is_serviced(self):
        runner, cpu, display, _ = make_runner(0x00E0)
        cpu.framebuffer.xor_pixel(0, 0, 1)
        runner.run_cycle()
        assert display.calls == [("clear",)]
        assert cpu.framebuffer.lit_pixels() == []
        assert not cpu.clear_requested

    def test_draw_request_is_serviced_once(self):
        # LD I,$000 / DRW V0,V0,1 / JP $204
        runner, cpu, display, _ = make_runner(0xA000, 0xD001, 0x1204)
        runner.run(4)
        draws = [call for call in display.calls if call[0] == "draw"]
        assert len(draws) == 1
        assert draws[0][1] == [(0, 0), (1, 0), (2, 0), (3, 0)]
        assert not cpu.draw_requested

    def test_timers_follow_60hz_clock(self):
        # LD V0,$03 / LD DT,V0 / JP $204
        runner, cpu, _, clock = make_runner(0x6003, 0xF015, 0x1204)
        runner.run(2)
        assert cpu.delay_timer == 3

        clock.now += 0.010
        assert runner.tick_timers() is False
        assert cpu.delay_timer == 3

        clock.now += 0.007
        runner.run_cycle()
        assert cpu.delay_timer == 2

        for _ in range(5):
            clock.now += 0.02
            runner.run_cycle()
        assert cpu.delay_timer == 0

    def test_timers_tick_while_waiting_for_key(self):
        runner, cpu, _, clock = make_runner(0x6002, 0xF018, 0xF10A)
        runner.run(3)
        for _ in range(3):
            clock.now += 0.02
            runner.run_cycle()
        assert cpu.sound_timer == 0
        assert cpu.get_state().waiting_for_key

        cpu.press_key(0x8)
        runner.run_cycle()
        assert cpu.get_state().v[1] == 0x8

    def test_unknown_opcode_halts(self):
        runner, cpu, display, _ = make_runner(0x5001)
        with pytest.raises(UnknownOpcode):
            runner.run_cycle()
        assert cpu.get_state().pc == 0x200
        assert display.calls == []

    def test_unknown_opcode_skip_policy(self, capsys):
        runner, cpu, _, _ = make_runner(0x5001, 0x6A01, policy="skip")
        assert runner.run_cycle() is None
        assert cpu.get_state().pc == 0x202
        assert "Unknown opcode: 5001" in capsys.readouterr().out
        runner.run_cycle()
        assert cpu.get_state().v[0xA] == 1
