"""A simulated hobby kernel: VGA text screen, port bus, interrupts, timer, heap, resource lock and shell."""

__version__ = "0.0.1"