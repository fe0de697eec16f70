# release_crawler/registry.py


class IdRegistry:
    """Maps natural keys (author ids, dist names) to dense surrogate integers.

    Ids are handed out monotonically starting from ``next_id``.
    """

    def __init__(self, next_id=1):
        self._ids = {}
        self._order = []    # (id, key) in assignment order
        self.next_id = next_id

    @classmethod
    def from_keys(cls, keys):
        """Assign 1..N to the distinct keys in first-seen order."""
        registry = cls()
        for key in keys:
            registry.get_or_create(key)
        return registry

    @classmethod
    def from_rows(cls, rows):
        """Rebuild from (id, key) rows already on disk."""
        registry = cls()
        for ident, key in rows:
            ident = int(ident)
            registry._ids[key] = ident
            registry._order.append((ident, key))
        registry.next_id = max((ident for ident, _ in registry._order), default=0) + 1
        return registry

    def get_or_create(self, key):
        """Return (id, is_new) for ``key``, assigning the next id if unseen."""
        if key in self._ids:
            return self._ids[key], False
        ident = self.next_id
        self.next_id += 1
        self._ids[key] = ident
        self._order.append((ident, key))
        return ident, True

    def rows(self):
        return sorted(self._order, key=lambda row: row[0])

    def __contains__(self, key):
        return key in self._ids

    def __getitem__(self, key):
        return self._ids[key]

    def __len__(self):
        return len(self._ids)
