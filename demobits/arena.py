"""Block-based arena allocator handing out views into large byte blocks."""

from dataclasses import dataclass

from demobits.floats import alignment_loss

_UINT32_MAX = 0xFFFFFFFF


@dataclass
class _Block:
    data: bytearray
    used: int = 0

    @property
    def total(self):
        return len(self.data)

    def bytes_left(self, alignment):
        return self.total - (self.used + alignment_loss(self.used, alignment))


class Arena:
    """Allocates memory with a shared lifetime; everything is released at once.

    Blocks are created lazily. Allocations are writable ``memoryview`` slices
    of those blocks, aligned relative to the start of their block.
    """

    def __init__(self, first_block_size=0):
        self.first_block_size = first_block_size
        self._blocks = []
        self._current = 0
        self._last = None

    def __repr__(self):
        return f"Arena(blocks={len(self._blocks)}, current_block={self._current})"

    def block_count(self):
        """Number of blocks the arena currently owns."""
        return len(self._blocks)

    def clear(self):
        """Mark every block as empty without releasing it."""
        for block in self._blocks:
            block.used = 0
        self._current = 0
        self._last = None

    def _new_block(self, requested_size):
        if self._blocks:
            size = self._blocks[-1].total
        else:
            size = self.first_block_size
        size = max(1, size)
        while size < requested_size:
            size *= 2
        size = min(size, _UINT32_MAX)
        self._blocks.append(_Block(bytearray(size)))

    def _block_with_memory(self, size, alignment):
        if not self._blocks:
            self._new_block(size)
        while self._blocks[self._current].bytes_left(alignment) < size:
            self._current += 1
            if self._current >= len(self._blocks):
                self._new_block(size)
                break
        return self._blocks[self._current]

    def allocate(self, size, alignment=1):
        """Return a writable view of ``size`` bytes, or ``None`` for size 0."""
        if size == 0:
            return None
        block = self._block_with_memory(size, alignment)
        start = block.used + alignment_loss(block.used, alignment)
        block.used = start + size
        view = memoryview(block.data)[start:start + size]
        self._last = (view, self._current, start)
        return view

    def reallocate(self, view, prev_size, size, alignment=1):
        """Resize an allocation, in place when it is the latest one in its block."""
        if view is None or not self._blocks:
            return self.allocate(size, alignment)

        block = self._blocks[self._current]
        is_latest = (
            self._last is not None
            and self._last[0] is view
            and self._last[1] == self._current
            and self._last[2] + prev_size == block.used
        )
        if is_latest and block.total - block.used + prev_size >= size:
            block.used -= prev_size
            return self.allocate(size, alignment)

        new_view = self.allocate(size, alignment)
        if new_view is not None:
            count = min(prev_size, len(view), size)
            new_view[:count] = view[:count]
        return new_view

    def attach(self, data):
        """Take over ``data`` as a fully used block owned by the arena."""
        buffer = data if isinstance(data, bytearray) else bytearray(data)
        self._blocks.append(_Block(buffer, used=len(buffer)))