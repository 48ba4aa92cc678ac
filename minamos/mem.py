"""Best-fit dynamic memory allocator over a fixed-size arena."""

from __future__ import annotations

from dataclasses import dataclass, replace

DYNAMIC_MEM_TOTAL_SIZE = 16 * 1024
NODE_SIZE = 16


@dataclass
class MemoryNode:
    """Header of one block: where it starts, its payload size and whether it is in use."""

    address: int
    size: int
    used: bool = False

    @property
    def data_address(self) -> int:
        return self.address + NODE_SIZE


class DynamicMemory:
    """An arena split into blocks, each preceded by a ``NODE_SIZE`` header."""

    def __init__(self, total_size: int = DYNAMIC_MEM_TOTAL_SIZE) -> None:
        if total_size < NODE_SIZE:
            raise ValueError("arena too small to hold a block header")
        self.total_size = total_size
        self._nodes: list[MemoryNode] = [MemoryNode(0, total_size - NODE_SIZE)]

    def _find_best_block(self, size: int) -> int | None:
        best_index = None
        best_size = self.total_size + 1
        for index, node in enumerate(self._nodes):
            if not node.used and node.size >= size + NODE_SIZE and node.size <= best_size:
                best_index = index
                best_size = node.size
        return best_index

    def alloc(self, size: int) -> int:
        """Allocate ``size`` bytes and return the address of the payload.

        The smallest free block that fits is split; its tail becomes the new
        block. Raises MemoryError if no block is large enough.
        """
        if size < 0:
            raise ValueError("size must not be negative")
        index = self._find_best_block(size)
        if index is None:
            raise MemoryError(f"no free block for {size} bytes")
        best = self._nodes[index]
        best.size -= size + NODE_SIZE
        new_node = MemoryNode(best.address + NODE_SIZE + best.size, size, used=True)
        self._nodes.insert(index + 1, new_node)
        return new_node.data_address

    def free(self, address: int | None) -> None:
        """Release a block and merge it with free neighbours."""
        if address is None:
            return
        header = address - NODE_SIZE
        for index, node in enumerate(self._nodes):
            if node.address == header:
                break
        else:
            raise ValueError(f"address {address} was not allocated here")
        node.used = False
        if index + 1 < len(self._nodes) and not self._nodes[index + 1].used:
            node.size += self._nodes.pop(index + 1).size + NODE_SIZE
        if index > 0 and not self._nodes[index - 1].used:
            self._nodes[index - 1].size += node.size + NODE_SIZE
            del self._nodes[index]

    def nodes(self) -> list[MemoryNode]:
        """Snapshot of the blocks in address order."""
        return [replace(node) for node in self._nodes]

    def describe(self) -> str:
        """The block list in the kernel's ``mem`` command format."""
        parts = "".join(
            f"{{size = {node.size}; used = {int(node.used)}}}; " for node in self._nodes
        )
        return f"[{parts}]"