"""Fixed-capacity string lookup tables used while flattening datatables."""


def _slot_count(max_items):
    slots = 1
    while slots - 1 < max_items:
        slots <<= 1
    return slots


class HashTable:
    """Maps strings to values; it cannot grow past its initial capacity.

    The capacity is one less than the smallest power of two above
    ``max_items``. Every insert that passes the capacity check uses up a
    slot, including rejected duplicates.
    """

    def __init__(self, max_items):
        self.capacity = _slot_count(max_items) - 1
        self._items = {}
        self._count = 0

    def __repr__(self):
        return f"HashTable(items={len(self._items)}, capacity={self.capacity})"

    def __len__(self):
        return len(self._items)

    def __contains__(self, key):
        return key in self._items

    def get(self, key):
        """Return the value stored for ``key``, or ``None`` if absent."""
        return self._items.get(key)

    def insert(self, key, value):
        """Store ``value`` under ``key``; returns False if full or already present."""
        if self._count == self.capacity:
            return False
        self._count += 1
        if key in self._items:
            return False
        self._items[key] = value
        return True

    def clear(self):
        self._items.clear()
        self._count = 0


class PropExcludeSet:
    """Set of excluded props, each identified by its table name and prop name."""

    def __init__(self, max_items):
        self.capacity = _slot_count(max_items) - 1
        self._entries = set()
        self._count = 0

    def __repr__(self):
        return f"PropExcludeSet(items={len(self._entries)}, capacity={self.capacity})"

    def __len__(self):
        return len(self._entries)

    def has(self, table_name, prop_name):
        """Whether ``prop_name`` of table ``table_name`` is excluded."""
        if self._count == 0:
            return False
        return (table_name, prop_name) in self._entries

    def insert(self, table_name, prop_name):
        """Add an exclusion; returns False if full or already present."""
        if self._count == self.capacity:
            return False
        self._count += 1
        key = (table_name, prop_name)
        if key in self._entries:
            return False
        self._entries.add(key)
        return True

    def clear(self):
        """Drop all entries; used slots still count towards the capacity."""
        self._entries.clear()