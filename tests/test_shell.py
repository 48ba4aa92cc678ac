import pytest

from minamos.cpu import PIC_EOI, PIC_LEADER_COMMAND, InterruptController
from minamos.display import Color, VGAScreen, get_offset
from minamos.mem import DynamicMemory
from minamos.ports import PortBus
from minamos.shell import (
    HELP_TEXT,
    KEY_A,
    KEY_BACKSPACE,
    KEY_ENTER,
    KEY_H,
    KEY_I,
    KEY_LEFT_SHIFT,
    KEY_Q,
    KEY_SPACE,
    KEY_Z,
    SC_MAX,
    Keyboard,
    Shell,
    scancode_for,
)


@pytest.fixture
def shell():
    screen = VGAScreen(rng=lambda: 0)
    sh = Shell(screen, DynamicMemory())
    sh.start()
    return sh


def test_start_shows_prompt(shell):
    assert shell.screen.text() == ">>>"
    assert shell.screen.cursor == get_offset(3, 0)


def test_typing_defaults_to_upper_case(shell):
    shell.handle_input(KEY_H)
    shell.handle_input(KEY_I)
    assert shell.buffer == "HI"
    assert shell.screen.row_text(0).rstrip() == ">>>HI"


def test_shift_toggles_case(shell):
    shell.handle_input(KEY_LEFT_SHIFT)
    shell.handle_input(KEY_H)
    shell.handle_input(KEY_LEFT_SHIFT)
    shell.handle_input(KEY_I)
    assert shell.buffer == "hI"


def test_space_key(shell):
    shell.handle_input(KEY_A)
    shell.handle_input(KEY_SPACE)
    shell.handle_input(KEY_Z)
    assert shell.buffer == "A Z"


def test_scancode_above_limit_is_ignored(shell):
    shell.handle_input(SC_MAX + 1)
    shell.handle_input(0x9E)
    assert shell.buffer == ""
    assert shell.screen.text() == ">>>"


def test_backspace_removes_last_character(shell):
    shell.handle_input(KEY_A)
    shell.handle_input(KEY_Z)
    shell.handle_input(KEY_BACKSPACE)
    assert shell.buffer == "A"
    assert shell.screen.row_text(0).rstrip() == ">>>A"


def test_backspace_does_not_erase_prompt(shell):
    shell.handle_input(KEY_BACKSPACE)
    assert shell.buffer == ""
    assert shell.screen.row_text(0).rstrip() == ">>>"
    assert shell.screen.cursor == get_offset(3, 0)


def test_enter_runs_unknown_command_in_red(shell):
    shell.handle_input(KEY_H)
    shell.handle_input(KEY_I)
    shell.handle_input(KEY_ENTER)
    assert shell.buffer == ""
    assert shell.screen.row_text(1).rstrip() == "HI"
    assert shell.screen.char_at(0, 1) == ("H", Color.LIGHT_RED_ON_BLACK)
    assert shell.screen.row_text(2).rstrip() == ">>>"
    assert shell.screen.cursor == get_offset(3, 2)


def test_empty_command_does_nothing(shell):
    before = shell.screen.text()
    shell.execute_command("")
    assert shell.screen.text() == before


def test_help_command(shell):
    shell.execute_command("help")
    assert shell.screen.row_text(1).rstrip() == HELP_TEXT


def test_mem_command_describes_memory(shell):
    shell.memory.alloc(4)
    shell.execute_command("mem")
    assert shell.screen.row_text(1).rstrip() == shell.memory.describe().rstrip()


def test_clear_command(shell):
    shell.execute_command("clear")
    assert shell.screen.text() == ""
    assert shell.screen.cursor == 0


def test_exit_halts(shell):
    shell.execute_command("exit")
    assert "Bye" in shell.screen.text()
    assert shell.halted
    shell.handle_input(KEY_A)
    assert shell.buffer == ""


@pytest.mark.parametrize("char, code", [("q", KEY_Q), ("Q", KEY_Q), ("a", KEY_A), (" ", KEY_SPACE)])
def test_scancode_for(char, code):
    assert scancode_for(char) == code


@pytest.mark.parametrize("char", ["?", "!", "ab", ""])
def test_scancode_for_unknown(char):
    with pytest.raises(ValueError):
        scancode_for(char)


def test_scancode_round_trip_through_shell(shell):
    text = "QWERTY12345,./"
    for char in text:
        shell.handle_input(scancode_for(char))
    assert shell.buffer == text


def test_keyboard_delivers_scancodes_by_interrupt():
    ports = PortBus()
    screen = VGAScreen(ports, rng=lambda: 0)
    controller = InterruptController(ports, screen)
    controller.isr_install()
    sh = Shell(screen, DynamicMemory())
    keyboard = Keyboard(controller, ports, sh)
    keyboard.press(KEY_A)
    assert sh.buffer == "A"
    assert ports.writes[-1] == (PIC_LEADER_COMMAND, PIC_EOI)