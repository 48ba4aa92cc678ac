"""Text-mode VGA screen: an 80x25 grid of character/attribute cells."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum

from .ports import PortBus
from .util import rand

VIDEO_ADDRESS = 0xB8000
MAX_ROWS = 25
MAX_COLS = 80
SCREEN_BYTES = MAX_ROWS * MAX_COLS * 2
ROW_BYTES = MAX_COLS * 2

REG_SCREEN_CTRL = 0x3D4
REG_SCREEN_DATA = 0x3D5
_CURSOR_HIGH = 14
_CURSOR_LOW = 15

PROMPT = ">>>"


class Color(IntEnum):
    """Attribute bytes for light text on a black background."""

    BLUE_ON_BLACK = 0x01
    GREEN_ON_BLACK = 0x02
    CYAN_ON_BLACK = 0x03
    RED_ON_BLACK = 0x04
    MAGENTA_ON_BLACK = 0x05
    BROWN_ON_BLACK = 0x06
    LIGHT_GREY_ON_BLACK = 0x07
    DARK_GREY_ON_BLACK = 0x08
    LIGHT_BLUE_ON_BLACK = 0x09
    LIGHT_GREEN_ON_BLACK = 0x0A
    LIGHT_CYAN_ON_BLACK = 0x0B
    LIGHT_RED_ON_BLACK = 0x0C
    LIGHT_MAGENTA_ON_BLACK = 0x0D
    YELLOW_ON_BLACK = 0x0E
    WHITE_ON_BLACK = 0x0F


COLORS_ON_BLACK: tuple[Color, ...] = tuple(Color)


def get_offset(col: int, row: int) -> int:
    """Byte offset of a cell in video memory."""
    return 2 * (row * MAX_COLS + col)


def row_from_offset(offset: int) -> int:
    """Row that a byte offset falls in."""
    return offset // ROW_BYTES


def move_offset_to_new_line(offset: int) -> int:
    """Offset of the first cell of the row after the one holding ``offset``."""
    return get_offset(0, row_from_offset(offset) + 1)


class _CrtController:
    """Index/data register pair that holds the hardware cursor position."""

    def __init__(self) -> None:
        self.index = 0
        self.registers = bytearray(256)

    def select(self, port: int, value: int) -> None:
        self.index = value & 0xFF

    def current_index(self, port: int) -> int:
        return self.index

    def read(self, port: int) -> int:
        return self.registers[self.index]

    def write(self, port: int, value: int) -> None:
        self.registers[self.index] = value & 0xFF


class VGAScreen:
    """Video memory plus a cursor kept in the CRT controller behind the port bus."""

    def __init__(self, ports: PortBus | None = None,
                 rng: Callable[[], int] | None = None) -> None:
        self.ports = ports if ports is not None else PortBus()
        self._rng = rng if rng is not None else rand
        self._vram = bytearray(bytes((ord(" "), Color.WHITE_ON_BLACK)) * (MAX_ROWS * MAX_COLS))
        self._crtc = _CrtController()
        self.ports.connect(REG_SCREEN_CTRL, self._crtc.current_index, self._crtc.select)
        self.ports.connect(REG_SCREEN_DATA, self._crtc.read, self._crtc.write)

    @property
    def cursor(self) -> int:
        """Cursor position as a byte offset into video memory."""
        self.ports.byte_out(REG_SCREEN_CTRL, _CURSOR_HIGH)
        position = self.ports.byte_in(REG_SCREEN_DATA) << 8
        self.ports.byte_out(REG_SCREEN_CTRL, _CURSOR_LOW)
        position += self.ports.byte_in(REG_SCREEN_DATA)
        return position * 2

    @cursor.setter
    def cursor(self, offset: int) -> None:
        position = offset // 2
        self.ports.byte_out(REG_SCREEN_CTRL, _CURSOR_HIGH)
        self.ports.byte_out(REG_SCREEN_DATA, (position >> 8) & 0xFF)
        self.ports.byte_out(REG_SCREEN_CTRL, _CURSOR_LOW)
        self.ports.byte_out(REG_SCREEN_DATA, position & 0xFF)

    def _put(self, char: str, offset: int, color: int) -> None:
        self._vram[offset] = ord(char) & 0xFF
        self._vram[offset + 1] = color & 0xFF

    def _random_color(self) -> Color:
        return COLORS_ON_BLACK[self._rng() % len(COLORS_ON_BLACK)]

    def _write(self, text: str, color_of: Callable[[], int]) -> None:
        offset = self.cursor
        for char in text:
            if offset >= SCREEN_BYTES:
                offset = self.scroll_ln(offset)
            if char == "\n":
                offset = move_offset_to_new_line(offset)
            else:
                self._put(char, offset, color_of())
                offset += 2
        self.cursor = offset

    def print_string(self, text: str) -> None:
        """Print white-on-black text at the cursor."""
        self._write(text, lambda: Color.WHITE_ON_BLACK)

    def println_string(self, text: str) -> None:
        """Print text, then move to the next line."""
        self.print_string(text)
        self.print_nl()

    def print_string_in_color(self, text: str, color: int) -> None:
        """Print text with the given attribute byte."""
        self._write(text, lambda: color)

    def println_string_in_color(self, text: str, color: int) -> None:
        """Print coloured text, then move to the next line."""
        self.print_string_in_color(text, color)
        self.print_nl()

    def print_string_in_random_color(self, text: str) -> None:
        """Print text, each character in a colour drawn from the generator."""
        self._write(text, self._random_color)

    def println_string_in_random_color(self, text: str) -> None:
        """Print randomly coloured text, then move to the next line."""
        self.print_string_in_random_color(text)
        self.print_nl()

    def scroll_ln(self, offset: int) -> int:
        """Shift every row up by one, blank the last row and return ``offset`` one row up."""
        start = get_offset(0, 1)
        length = MAX_COLS * (MAX_ROWS - 1) * 2
        self._vram[0:length] = self._vram[start:start + length]
        for col in range(MAX_COLS):
            self._put(" ", get_offset(col, MAX_ROWS - 1), Color.WHITE_ON_BLACK)
        return offset - ROW_BYTES

    def print_nl(self) -> None:
        """Move the cursor to the start of the next line, scrolling if needed."""
        new_offset = move_offset_to_new_line(self.cursor)
        if new_offset >= SCREEN_BYTES:
            new_offset = self.scroll_ln(new_offset)
        self.cursor = new_offset

    def clear_screen(self) -> None:
        """Blank every cell and home the cursor."""
        for cell in range(MAX_COLS * MAX_ROWS):
            self._put(" ", cell * 2, Color.WHITE_ON_BLACK)
        self.cursor = get_offset(0, 0)

    def print_backspace(self) -> None:
        """Erase the character before the cursor, never reaching into the prompt."""
        current = self.cursor
        if current % ROW_BYTES > 2 * len(PROMPT):
            new_offset = current - 2
            self._put(" ", new_offset, Color.WHITE_ON_BLACK)
            self.cursor = new_offset

    def print_enter(self) -> None:
        """Start a new prompt line and put the cursor just after the prompt."""
        row = min(self.cursor // ROW_BYTES + 1, MAX_ROWS - 1)
        new_offset = row * ROW_BYTES + 2 * len(PROMPT)
        self.print_nl()
        self.print_string(PROMPT)
        self.cursor = new_offset

    @staticmethod
    def _check_cell(col: int, row: int) -> None:
        if not (0 <= col < MAX_COLS and 0 <= row < MAX_ROWS):
            raise IndexError(f"cell ({col}, {row}) is off screen")

    def char_at(self, col: int, row: int) -> tuple[str, int]:
        """The character and attribute byte stored in a cell."""
        self._check_cell(col, row)
        offset = get_offset(col, row)
        return chr(self._vram[offset]), self._vram[offset + 1]

    def row_text(self, row: int) -> str:
        """The characters of one row, all ``MAX_COLS`` of them."""
        self._check_cell(0, row)
        start = get_offset(0, row)
        return bytes(self._vram[start:start + ROW_BYTES:2]).decode("latin-1")

    def text(self) -> str:
        """Screen contents as lines with trailing blanks and empty trailing lines removed."""
        lines = (self.row_text(row).rstrip() for row in range(MAX_ROWS))
        return "\n".join(lines).rstrip("\n")