"""Simulated I/O port bus."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

Reader = Callable[[int], int]
Writer = Callable[[int, int], None]


@dataclass
class _Device:
    reader: Reader | None
    writer: Writer | None


class PortBus:
    """Routes port reads and writes to attached devices.

    A port with no device attached behaves as a latch: reading returns the
    last value written to it, or 0. Every write is recorded in ``writes``
    as ``(port, value)``.
    """

    def __init__(self) -> None:
        self._devices: dict[int, _Device] = {}
        self._latches: dict[int, int] = {}
        self.writes: list[tuple[int, int]] = []

    @staticmethod
    def _check_port(port: int) -> int:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port:#x}")
        return port

    def connect(self, port: int, reader: Reader | None = None,
                writer: Writer | None = None) -> None:
        """Attach a device to a port; ``reader(port)`` and ``writer(port, value)``."""
        self._devices[self._check_port(port)] = _Device(reader, writer)

    def _read(self, port: int) -> int:
        device = self._devices.get(self._check_port(port))
        if device is not None and device.reader is not None:
            return device.reader(port)
        return self._latches.get(port, 0)

    def _write(self, port: int, value: int) -> None:
        self._check_port(port)
        self.writes.append((port, value))
        device = self._devices.get(port)
        if device is not None and device.writer is not None:
            device.writer(port, value)
        else:
            self._latches[port] = value

    def byte_in(self, port: int) -> int:
        """Read one byte from a port."""
        return self._read(port) & 0xFF

    def byte_out(self, port: int, data: int) -> None:
        """Write one byte to a port."""
        self._write(port, data & 0xFF)

    def word_in(self, port: int) -> int:
        """Read a 16-bit word from a port."""
        return self._read(port) & 0xFFFF

    def word_out(self, port: int, data: int) -> None:
        """Write a 16-bit word to a port."""
        self._write(port, data & 0xFFFF)