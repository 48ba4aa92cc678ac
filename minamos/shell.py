"""Command shell driven by keyboard scancodes, and the keyboard that feeds it."""

from __future__ import annotations

from .cpu import IRQ1, InterruptController, Registers
from .display import PROMPT, Color, VGAScreen
from .mem import DynamicMemory
from .ports import PortBus

SC_MAX = 57
KEY_BUFFER_SIZE = 1024
KEYBOARD_DATA_PORT = 0x60

KEY_ESC = 0x01
KEY_BACKSPACE = 0x0E
KEY_TAB = 0x0F
KEY_ENTER = 0x1C
KEY_LEFT_SHIFT = 0x2A
KEY_SPACE = 0x39

KEY_Q = 0x10
KEY_A = 0x1E
KEY_Z = 0x2C
KEY_H = 0x23
KEY_I = 0x17
KEY_1 = 0x02
KEY_0 = 0x0B

_UNMAPPED = "?"

# Characters produced by scancodes 0..SC_MAX; "?" marks keys that print nothing.
SCANCODE_TO_CHAR_UPPER = "??1234567890-=??QWERTYUIOP[]??ASDFGHJKL;\\`?\\ZXCVBNM,./??? "
SCANCODE_TO_CHAR_LOWER = SCANCODE_TO_CHAR_UPPER.lower()

HELP_TEXT = "Available commands: clear, help, mem, exit"


def scancode_for(char: str) -> int:
    """The first scancode that produces ``char`` in either case."""
    if len(char) != 1 or char == _UNMAPPED:
        raise ValueError(f"no scancode produces {char!r}")
    for table in (SCANCODE_TO_CHAR_UPPER, SCANCODE_TO_CHAR_LOWER):
        index = table.find(char)
        if index >= 0:
            return index
    raise ValueError(f"no scancode produces {char!r}")


class Shell:
    """Line editor and command interpreter on top of the VGA screen."""

    def __init__(self, screen: VGAScreen, memory: DynamicMemory) -> None:
        self.screen = screen
        self.memory = memory
        self.shift = True
        self.halted = False
        self._buffer: list[str] = []

    @property
    def buffer(self) -> str:
        """The line typed so far."""
        return "".join(self._buffer)

    def start(self) -> None:
        """Show the first prompt."""
        self.screen.print_string(PROMPT)

    def execute_command(self, command: str) -> None:
        """Run one command line."""
        if command == "":
            return
        self.screen.print_nl()
        if command == "exit":
            self.screen.println_string("Bye")
            self.halted = True
        elif command == "clear":
            self.screen.clear_screen()
        elif command == "help":
            self.screen.print_string(HELP_TEXT)
        elif command == "mem":
            self.screen.print_string(self.memory.describe())
        else:
            self.screen.print_string_in_color(command, Color.LIGHT_RED_ON_BLACK)

    def handle_input(self, scancode: int) -> None:
        """React to one key-press scancode."""
        if self.halted or scancode > SC_MAX:
            return
        if scancode == KEY_BACKSPACE:
            if self._buffer:
                self._buffer.pop()
            self.screen.print_backspace()
            return
        if scancode == KEY_LEFT_SHIFT:
            self.shift = not self.shift
            return
        if scancode == KEY_ENTER:
            self.execute_command(self.buffer)
            self._buffer.clear()
            self.screen.print_enter()
            return
        table = SCANCODE_TO_CHAR_UPPER if self.shift else SCANCODE_TO_CHAR_LOWER
        letter = table[scancode]
        if letter == _UNMAPPED:
            return
        if len(self._buffer) < KEY_BUFFER_SIZE - 1:
            self._buffer.append(letter)
        self.screen.print_string(letter)


class Keyboard:
    """Keyboard controller: raises IRQ1 and hands the scancode on port 0x60 to the shell."""

    def __init__(self, controller: InterruptController, ports: PortBus, shell: Shell) -> None:
        self.controller = controller
        self.ports = ports
        self.shell = shell
        self._pending = 0
        ports.connect(KEYBOARD_DATA_PORT, reader=self._read_data)
        controller.register_interrupt_handler(IRQ1, self._callback)

    def _read_data(self, port: int) -> int:
        return self._pending

    def _callback(self, regs: Registers) -> None:
        self.shell.handle_input(self.ports.byte_in(KEYBOARD_DATA_PORT))

    def press(self, scancode: int) -> None:
        """Put a scancode on the data port and raise the keyboard interrupt."""
        self._pending = scancode & 0xFF
        self.controller.raise_interrupt(IRQ1)