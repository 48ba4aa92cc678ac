"""The kernel: wires the devices together, boots and runs the shell."""

from __future__ import annotations

import argparse
import sys

from .cpu import InterruptController, Timer
from .display import VGAScreen
from .mem import DynamicMemory
from .ports import PortBus
from .shell import KEY_BACKSPACE, KEY_ENTER, KEY_LEFT_SHIFT, Keyboard, Shell, scancode_for
from .sync import ResourceAllocator

TIMER_FREQUENCY = 50
GREETING = "Hello! Greet from MinamOS kernel."
VERSION_LINE = "MinamOS | Version 0.0.1"

LOGO = (
    " __       __  __                                     ______    ______  ",
    "|  \\     /  \\|  \\                                   /      \\  /      \\ ",
    "| $$\\   /  $$ \\$$ _______    ______   ______ ____  |  $$$$$$\\|  $$$$$$\\",
    "| $$$\\ /  $$$|  \\|       \\  |      \\ |      \\    \\ | $$  | $$| $$___\\$$",
    "| $$$$\\  $$$$| $$| $$$$$$$\\  \\$$$$$$\\| $$$$$$\\$$$$\\| $$  | $$ \\$$    \\ ",
    "| $$\\$$ $$ $$| $$| $$  | $$ /      $$| $$ | $$ | $$| $$  | $$ _\\$$$$$$\\",
    "| $$ \\$$$| $$| $$| $$  | $$|  $$$$$$$| $$ | $$ | $$| $$__/ $$|  \\__| $$",
    "| $$  \\$ | $$| $$| $$  | $$ \\$$    $$| $$ | $$ | $$ \\$$    $$ \\$$    $$",
    " \\$$      \\$$ \\$$ \\$$   \\$$  \\$$$$$$$ \\$$  \\$$  \\$$  \\$$$$$$   \\$$$$$$  ",
    "                                                                 ",
)


class Kernel:
    """The whole machine: ports, screen, interrupts, timer, memory, resources and shell."""

    def __init__(self) -> None:
        self.ports = PortBus()
        self.screen = VGAScreen(self.ports)
        self.interrupts = InterruptController(self.ports, self.screen)
        self.timer = Timer(self.interrupts, self.ports)
        self.memory = DynamicMemory()
        self.resources = ResourceAllocator()
        self.shell = Shell(self.screen, self.memory)
        self.keyboard: Keyboard | None = None
        self.interrupts_enabled = False

    @property
    def booted(self) -> bool:
        return self.keyboard is not None

    def boot(self) -> None:
        """Bring up the screen, interrupts, timer, keyboard, memory and shell."""
        self.screen.clear_screen()
        self.print_logo_in_random_color()
        self.show_version()
        self.interrupts.isr_install()
        self.timer.init(TIMER_FREQUENCY)
        self.interrupts_enabled = True
        self.keyboard = Keyboard(self.interrupts, self.ports, self.shell)
        self.memory = DynamicMemory()
        self.shell.memory = self.memory
        self.resources = ResourceAllocator()
        self.screen.print_nl()
        self.shell.start()

    def print_logo_in_random_color(self) -> None:
        """Draw the banner, each character in a random colour."""
        for line in LOGO:
            self.screen.println_string_in_random_color(line)

    def show_version(self) -> None:
        """Print the greeting and version lines."""
        self.screen.println_string(GREETING)
        self.screen.println_string(VERSION_LINE)

    def type_text(self, text: str) -> None:
        """Press the keys that type ``text``; newline is Enter and backspace is Backspace."""
        if self.keyboard is None:
            raise RuntimeError("kernel has not booted")
        for char in text:
            if char == "\n":
                self.keyboard.press(KEY_ENTER)
            elif char == "\b":
                self.keyboard.press(KEY_BACKSPACE)
            else:
                code = scancode_for(char)
                if char.isalpha() and char.isupper() != self.shell.shift:
                    self.keyboard.press(KEY_LEFT_SHIFT)
                self.keyboard.press(code)


def main(argv: list[str] | None = None) -> int:
    """Boot the kernel, type each given command and print the screen."""
    parser = argparse.ArgumentParser(prog="minamos", description="Boot the kernel and run shell commands.")
    parser.add_argument("commands", nargs="*", help="commands typed at the prompt, in order")
    args = parser.parse_args(argv)
    kernel = Kernel()
    kernel.boot()
    for command in args.commands:
        kernel.type_text(command + "\n")
    sys.stdout.write(kernel.screen.text() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())