# minamos

A tiny hobby kernel, simulated in Python. It models an 80×25 VGA text
screen, a bus of I/O ports, an interrupt descriptor table with remapped
PICs, a programmable interval timer, a best-fit heap allocator, a single
lockable resource and a small command shell that is driven by keyboard
scancodes.

## Installing

```
pip install .
```

## Running

```
minamos help mem
```

The `minamos` command boots the kernel. Booting clears the screen, prints
the logo in random colours and the version lines, installs the interrupt
gates, starts the timer at 50 Hz, attaches the keyboard, sets up the heap
and shows the `>>>` prompt. Each argument is then typed at the prompt as
one command line, followed by Enter. When all arguments have been typed,
the command prints the screen contents to standard output. With no
arguments it prints the screen as it is just after boot.

The shell understands these commands:

- `help`: print `Available commands: clear, help, mem, exit`
- `clear`: clear the screen
- `mem`: show the heap's blocks as `{size = N; used = 0|1};` entries
- `exit`: print `Bye` and halt. After that the shell ignores every key.

Any other input is echoed back in light red. Left Shift toggles between
upper and lower case. Letters start out in upper case. A command can only
hold characters that have a scancode: letters, digits, space and
``-=[];\`,./``. Any other character raises `ValueError`.

## Using it as a library

```python
from minamos.kernel import Kernel

kernel = Kernel()
kernel.boot()
kernel.type_text("help\n")
print(kernel.screen.text())
```

In `Kernel.type_text`, `"\n"` presses Enter and `"\b"` presses Backspace.
Shift is pressed as needed so that letters come out in the case given.

The pieces also work on their own:

- `minamos.mem.DynamicMemory` is a best-fit allocator over a 16 KiB arena
  by default. Every block carries a 16-byte header. `alloc(size)` splits
  the smallest free block that fits and returns the payload address. It
  raises `MemoryError` when nothing fits. `free(address)` releases a block
  and merges it with free neighbours. It raises `ValueError` for an
  address it did not hand out. `nodes()` and `describe()` show the block
  list.
- `minamos.sync.ResourceAllocator` hands one named resource to one owner
  at a time. `alloc` and `free` raise `InvalidOwner` for a negative owner
  id, `ResourceNotFound` for another name and `ResourceOccupied` when the
  resource is taken or held by someone else. All three derive from
  `ResourceError`.
- `minamos.display.VGAScreen` is the text screen. The cursor is kept in
  CRT controller registers behind a `minamos.ports.PortBus`. `char_at`,
  `row_text` and `text` read back what was printed.
- `minamos.ports.PortBus` routes byte and word reads and writes to
  attached devices. A port with no device acts as a latch. Every write is
  recorded in `writes`.
- `minamos.cpu.InterruptController` holds the IDT, remaps the PICs and
  dispatches exceptions and IRQs. `raise_interrupt` delivers a vector
  through the loaded table. `minamos.cpu.Timer` counts IRQ0 ticks.
  `Timer.sleep(ms)` raises timer interrupts until that many ticks have
  passed.
- `minamos.shell.Keyboard.press(scancode)` puts a scancode on port 0x60
  and raises IRQ1 for the shell.

## What it does not do

Nothing here touches real hardware, and there is no interactive session.
The `minamos` command does not read keys from your terminal. It types only
the commands given on its command line and then prints the final screen.
Colours are kept in the screen's attribute bytes but are not shown in the
printed output.

## Tests

```
pip install .[test]
pytest
```