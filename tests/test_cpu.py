import struct

import pytest

from minamos.cpu import (
    EXCEPTION_MESSAGES,
    IDT_ENTRIES,
    INTERRUPT_GATE_FLAGS,
    IRQ0,
    IRQ1,
    IRQ8,
    IRQ15,
    KERNEL_CS,
    PIT_FREQUENCY,
    IdtGate,
    InterruptController,
    Registers,
    Timer,
)
from minamos.display import VGAScreen
from minamos.ports import PortBus


@pytest.fixture
def ports():
    return PortBus()


@pytest.fixture
def controller(ports):
    return InterruptController(ports, VGAScreen())


def test_set_idt_gate_fields(controller):
    address = 0x00C0FFEE
    controller.set_idt_gate(3, address)
    gate = controller.idt[3]
    assert gate.sel == KERNEL_CS
    assert gate.flags == 0x8E
    assert gate.always0 == 0
    assert gate.low_offset | (gate.high_offset << 16) == address
    assert gate.handler == address


def test_gate_pack_layout(controller):
    controller.set_idt_gate(0, 0x12345678)
    gate = controller.idt[0]
    packed = gate.pack()
    assert struct.unpack("<HHBBH", packed) == (
        gate.low_offset, gate.sel, gate.always0, gate.flags, gate.high_offset
    )
    assert packed[2] == KERNEL_CS
    assert packed[5] == INTERRUPT_GATE_FLAGS


def test_set_idt_gate_rejects_bad_vector(controller):
    with pytest.raises(ValueError):
        controller.set_idt_gate(IDT_ENTRIES, 0)


def test_isr_install_gates_and_pic(controller, ports):
    controller.isr_install()
    assert all(gate.present for gate in controller.idt[: IRQ15 + 1])
    assert not any(gate.present for gate in controller.idt[IRQ15 + 1:])
    assert ports.writes == [
        (0x20, 0x11), (0xA0, 0x11), (0x21, 0x20), (0xA1, 0x28), (0x21, 0x04),
        (0xA1, 0x02), (0x21, 0x01), (0xA1, 0x01), (0x21, 0x0), (0xA1, 0x0),
    ]
    assert controller.active_idt == tuple(controller.idt)


def test_load_idt_limit(controller):
    controller.load_idt()
    assert controller.idtr_limit == IDT_ENTRIES * len(IdtGate().pack()) - 1


def test_load_idt_snapshots_table(controller):
    controller.load_idt()
    controller.set_idt_gate(5, 0x1000)
    assert not controller.active_idt[5].present
    assert controller.idt[5].present


def test_isr_handler_prints_message(controller):
    controller.isr_handler(Registers(int_no=0))
    lines = controller.screen.text().splitlines()
    assert lines[:2] == ["received interrupt: 0", "Division By Zero"]


def test_isr_handler_page_fault(controller):
    controller.isr_handler(Registers(int_no=14))
    assert controller.screen.text().splitlines()[1] == EXCEPTION_MESSAGES[14]
    assert EXCEPTION_MESSAGES[14] == "Page Fault"


def test_isr_handler_rejects_irq_vector(controller):
    with pytest.raises(ValueError):
        controller.isr_handler(Registers(int_no=IRQ0))


def test_irq_handler_runs_callback_and_eoi(controller, ports):
    seen = []
    controller.register_interrupt_handler(IRQ1, seen.append)
    regs = Registers(int_no=IRQ1)
    controller.irq_handler(regs)
    assert seen == [regs]
    assert ports.writes == [(0x20, 0x20)]


def test_irq_handler_follower_eoi(controller, ports):
    controller.irq_handler(Registers(int_no=IRQ8))
    assert ports.writes == [(0xA0, 0x20), (0x20, 0x20)]


def test_register_handler_rejects_bad_vector(controller):
    with pytest.raises(ValueError):
        controller.register_interrupt_handler(IDT_ENTRIES, lambda regs: None)


def test_raise_interrupt_dispatches_irq(controller):
    seen = []
    controller.isr_install()
    controller.register_interrupt_handler(IRQ1, lambda regs: seen.append(regs.int_no))
    regs = controller.raise_interrupt(IRQ1)
    assert seen == [IRQ1]
    assert regs.cs == KERNEL_CS


def test_raise_interrupt_dispatches_exception(controller):
    controller.isr_install()
    controller.raise_interrupt(13)
    assert "General Protection Fault" in controller.screen.text()


def test_raise_interrupt_needs_loaded_idt(controller):
    with pytest.raises(RuntimeError):
        controller.raise_interrupt(IRQ1)


def test_raise_interrupt_needs_present_gate(controller):
    controller.isr_install()
    with pytest.raises(RuntimeError):
        controller.raise_interrupt(IRQ15 + 1)


def test_timer_init_programs_pit(controller, ports):
    timer = Timer(controller, ports)
    timer.init(50)
    assert ports.writes[0] == (0x43, 0x36)
    (port_low, low), (port_high, high) = ports.writes[1:3]
    assert port_low == port_high == 0x40
    assert low | (high << 8) == PIT_FREQUENCY // 50


def test_timer_rejects_zero_frequency(controller, ports):
    with pytest.raises(ValueError):
        Timer(controller, ports).init(0)


def test_timer_ticks_on_irq0(controller, ports):
    timer = Timer(controller, ports)
    timer.init(100)
    controller.irq_handler(Registers(int_no=IRQ0))
    controller.irq_handler(Registers(int_no=IRQ0))
    assert timer.tick == 2


def test_timer_sleep_advances_ticks(controller, ports):
    timer = Timer(controller, ports)
    timer.init(100)
    ports.writes.clear()
    before = timer.tick
    timer.sleep(5)
    assert timer.tick - before == 5
    assert ports.writes.count((0x20, 0x20)) == 5


def test_timer_sleep_zero_returns_at_once(controller, ports):
    timer = Timer(controller, ports)
    timer.init(100)
    timer.sleep(0)
    assert timer.tick == 0


def test_timer_sleep_requires_init(controller, ports):
    with pytest.raises(RuntimeError):
        Timer(controller, ports).sleep(3)