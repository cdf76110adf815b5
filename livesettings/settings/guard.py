"""
Write guard suppressing the store's echo of a local write.

The guard is counted rather than boolean: a listener that performs another
set while an outer set is still dispatching raises it a second time, and the
guard only drops once the outermost write has finished.
"""


class WriteGuard:
    """Reference-counted suppression flag, usable as a context manager."""

    def __init__(self):
        self._depth = 0

    @property
    def raised(self) -> bool:
        return self._depth > 0

    @property
    def depth(self) -> int:
        return self._depth

    def raise_(self) -> None:
        self._depth += 1

    def lower(self) -> None:
        if self._depth > 0:
            self._depth -= 1

    def __enter__(self) -> 'WriteGuard':
        self.raise_()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lower()

    def __repr__(self) -> str:
        return f"WriteGuard(depth={self._depth})"
