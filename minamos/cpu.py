"""Interrupt descriptor table, interrupt dispatch and the programmable interval timer."""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass

from .display import VGAScreen
from .ports import PortBus
from .util import high_16, int_to_string, low_16

KERNEL_CS = 0x08
IDT_ENTRIES = 256
INTERRUPT_GATE_FLAGS = 0x8E
_PRESENT = 0x80
_GATE_FORMAT = "<HHBBH"

KERNEL_BASE = 0x1000
STUB_SIZE = 16

IRQ0 = 32
IRQ1 = 33
IRQ2 = 34
IRQ3 = 35
IRQ4 = 36
IRQ5 = 37
IRQ6 = 38
IRQ7 = 39
IRQ8 = 40
IRQ9 = 41
IRQ10 = 42
IRQ11 = 43
IRQ12 = 44
IRQ13 = 45
IRQ14 = 46
IRQ15 = 47

PIC_LEADER_COMMAND = 0x20
PIC_LEADER_DATA = 0x21
PIC_FOLLOWER_COMMAND = 0xA0
PIC_FOLLOWER_DATA = 0xA1
PIC_EOI = 0x20

PIT_FREQUENCY = 1193180
PIT_COMMAND = 0x43
PIT_CHANNEL0 = 0x40
PIT_MODE = 0x36

EXCEPTION_MESSAGES = (
    "Division By Zero",
    "Debug",
    "Non Maskable Interrupt",
    "Breakpoint",
    "Into Detected Overflow",
    "Out of Bounds",
    "Invalid Opcode",
    "No Coprocessor",
    "Double Fault",
    "Coprocessor Segment Overrun",
    "Bad TSS",
    "Segment Not Present",
    "Stack Fault",
    "General Protection Fault",
    "Page Fault",
    "Unknown Interrupt",
    "Coprocessor Fault",
    "Alignment Check",
    "Machine Check",
) + ("Reserved",) * 13

_PIC_REMAP = (
    (PIC_LEADER_COMMAND, 0x11),
    (PIC_FOLLOWER_COMMAND, 0x11),
    (PIC_LEADER_DATA, 0x20),
    (PIC_FOLLOWER_DATA, 0x28),
    (PIC_LEADER_DATA, 0x04),
    (PIC_FOLLOWER_DATA, 0x02),
    (PIC_LEADER_DATA, 0x01),
    (PIC_FOLLOWER_DATA, 0x01),
    (PIC_LEADER_DATA, 0x00),
    (PIC_FOLLOWER_DATA, 0x00),
)


def stub_address(n: int) -> int:
    """Address of the entry stub for interrupt vector ``n`` in the kernel image."""
    return KERNEL_BASE + n * STUB_SIZE


@dataclass(frozen=True)
class IdtGate:
    """One 8-byte interrupt gate descriptor."""

    low_offset: int = 0
    sel: int = 0
    always0: int = 0
    flags: int = 0
    high_offset: int = 0

    @property
    def handler(self) -> int:
        return (self.high_offset << 16) | self.low_offset

    @property
    def present(self) -> bool:
        return bool(self.flags & _PRESENT)

    def pack(self) -> bytes:
        """The descriptor as the processor reads it."""
        return struct.pack(_GATE_FORMAT, self.low_offset, self.sel,
                           self.always0, self.flags, self.high_offset)


GATE_SIZE = struct.calcsize(_GATE_FORMAT)


@dataclass
class Registers:
    """Register state saved on entry to an interrupt."""

    ds: int = 0
    edi: int = 0
    esi: int = 0
    ebp: int = 0
    esp: int = 0
    ebx: int = 0
    edx: int = 0
    ecx: int = 0
    eax: int = 0
    int_no: int = 0
    err_code: int = 0
    eip: int = 0
    cs: int = 0
    eflags: int = 0
    useresp: int = 0
    ss: int = 0


Handler = Callable[[Registers], None]


class InterruptController:
    """The IDT, the remapped PICs and dispatch of exceptions and IRQs."""

    def __init__(self, ports: PortBus, screen: VGAScreen) -> None:
        self.ports = ports
        self.screen = screen
        self.idt: list[IdtGate] = [IdtGate()] * IDT_ENTRIES
        self.active_idt: tuple[IdtGate, ...] | None = None
        self.idtr_limit = 0
        self._handlers: list[Handler | None] = [None] * IDT_ENTRIES

    @staticmethod
    def _check_vector(n: int) -> None:
        if not 0 <= n < IDT_ENTRIES:
            raise ValueError(f"interrupt vector out of range: {n}")

    def set_idt_gate(self, n: int, handler: int) -> None:
        """Point vector ``n`` at a 32-bit handler address as a kernel interrupt gate."""
        self._check_vector(n)
        self.idt[n] = IdtGate(
            low_offset=low_16(handler),
            sel=KERNEL_CS,
            always0=0,
            flags=INTERRUPT_GATE_FLAGS,
            high_offset=high_16(handler),
        )

    def load_idt(self) -> None:
        """Make the current table the one the processor uses."""
        self.idtr_limit = IDT_ENTRIES * GATE_SIZE - 1
        self.active_idt = tuple(self.idt)

    def isr_install(self) -> None:
        """Install the exception gates, remap the PICs, install the IRQ gates and load the IDT."""
        for n in range(32):
            self.set_idt_gate(n, stub_address(n))
        for port, value in _PIC_REMAP:
            self.ports.byte_out(port, value)
        for n in range(IRQ0, IRQ15 + 1):
            self.set_idt_gate(n, stub_address(n))
        self.load_idt()

    def register_interrupt_handler(self, n: int, handler: Handler | None) -> None:
        """Set the callback run when interrupt ``n`` arrives."""
        self._check_vector(n)
        self._handlers[n] = handler

    def isr_handler(self, regs: Registers) -> None:
        """Report a processor exception on screen."""
        if not 0 <= regs.int_no < len(EXCEPTION_MESSAGES):
            raise ValueError(f"not an exception vector: {regs.int_no}")
        self.screen.print_string("received interrupt: ")
        self.screen.print_string(int_to_string(regs.int_no))
        self.screen.print_nl()
        self.screen.print_string(EXCEPTION_MESSAGES[regs.int_no])
        self.screen.print_nl()

    def irq_handler(self, regs: Registers) -> None:
        """Run the registered callback, then acknowledge the interrupt to the PICs."""
        self._check_vector(regs.int_no)
        handler = self._handlers[regs.int_no]
        if handler is not None:
            handler(regs)
        if regs.int_no >= IRQ8:
            self.ports.byte_out(PIC_FOLLOWER_COMMAND, PIC_EOI)
        self.ports.byte_out(PIC_LEADER_COMMAND, PIC_EOI)

    def raise_interrupt(self, n: int, err_code: int = 0) -> Registers:
        """Deliver interrupt ``n`` through the loaded IDT and return the saved registers."""
        self._check_vector(n)
        if self.active_idt is None:
            raise RuntimeError("no interrupt descriptor table loaded")
        if not self.active_idt[n].present:
            raise RuntimeError(f"no gate present for interrupt {n}")
        regs = Registers(int_no=n, err_code=err_code, cs=KERNEL_CS)
        if n < IRQ0:
            self.isr_handler(regs)
        else:
            self.irq_handler(regs)
        return regs


class Timer:
    """Channel 0 of the programmable interval timer, counting ticks on IRQ0."""

    def __init__(self, controller: InterruptController, ports: PortBus) -> None:
        self.controller = controller
        self.ports = ports
        self.tick = 0
        self._running = False

    def _callback(self, regs: Registers) -> None:
        self.tick = (self.tick + 1) & 0xFFFFFFFF

    def init(self, freq: int) -> None:
        """Hook IRQ0 and program the timer to fire ``freq`` times a second."""
        if freq <= 0:
            raise ValueError("timer frequency must be positive")
        self.controller.register_interrupt_handler(IRQ0, self._callback)
        divisor = PIT_FREQUENCY // freq
        self.ports.byte_out(PIT_COMMAND, PIT_MODE)
        self.ports.byte_out(PIT_CHANNEL0, divisor & 0xFF)
        self.ports.byte_out(PIT_CHANNEL0, (divisor >> 8) & 0xFF)
        self._running = True

    def sleep(self, ms: int) -> None:
        """Halt until ``ms`` timer ticks have passed; each halt ends with the next tick."""
        if ms <= 0:
            return
        if not self._running:
            raise RuntimeError("timer not initialised")
        start = self.tick
        while ((self.tick - start) & 0xFFFFFFFF) < ms:
            self.controller.irq_handler(Registers(int_no=IRQ0, cs=KERNEL_CS))