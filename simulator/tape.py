class Tape:
    """Sparse two-way infinite tape.

    Only non-blank cells are stored. Writing the blank symbol deletes the
    cell, so two tapes showing the same symbols always compare equal.
    """

    def __init__(self, blank="_", cells=None):
        self.blank = blank
        self._cells = {}
        if cells:
            for position, symbol in cells.items():
                self.write(position, symbol)

    @classmethod
    def from_input(cls, text, blank="_"):
        tape = cls(blank)
        for position, symbol in enumerate(text):
            tape.write(position, symbol)
        return tape

    def read(self, position):
        return self._cells.get(position, self.blank)

    def write(self, position, symbol):
        if symbol == self.blank:
            self._cells.pop(position, None)
        else:
            self._cells[position] = symbol

    def snapshot(self):
        """Return an independent copy; later writes never show up in it."""
        copy = Tape(self.blank)
        copy._cells = dict(self._cells)
        return copy

    def window(self, start, stop):
        """Symbols for positions start..stop-1."""
        return [self._cells.get(pos, self.blank) for pos in range(start, stop)]

    def bounds(self):
        if not self._cells:
            return None
        return min(self._cells), max(self._cells)

    def content(self):
        """Visible content from the leftmost to the rightmost non-blank cell."""
        span = self.bounds()
        if span is None:
            return ""
        return "".join(self.window(span[0], span[1] + 1))

    def count_nonblank(self):
        return len(self._cells)

    def cells(self):
        return dict(self._cells)

    def __len__(self):
        return len(self._cells)

    def __iter__(self):
        return iter(sorted(self._cells.items()))

    def __eq__(self, other):
        if not isinstance(other, Tape):
            return NotImplemented
        return self.blank == other.blank and self._cells == other._cells

    __hash__ = None

    def __repr__(self):
        return f"Tape(blank={self.blank!r}, cells={dict(sorted(self._cells.items()))!r})"

    def __str__(self):
        return self.content()
