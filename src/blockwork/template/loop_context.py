"""Per-iteration ``loop`` values for ``{% for %}`` blocks.

Each iteration binds a fresh, frozen LoopContext next to the item, so a
value captured by an include or a nested loop never changes under it:

    {% for row in rows %}{{ loop.index }}/{{ loop.length }} {{ row }}{% endfor %}

The binding lives in the loop's own scope and hides any host value named
``loop`` for the duration of the block; outside the loop the host value
is visible again.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LoopContext:
    """Position of one iteration within its sequence.

    ``index0``, ``length`` and the neighbour items are stored; the other
    counters derive from them.
    """

    index0: int
    length: int
    previtem: Any = None
    nextitem: Any = None

    @property
    def index(self) -> int:
        return self.index0 + 1

    @property
    def revindex(self) -> int:
        return self.length - self.index0

    @property
    def revindex0(self) -> int:
        return self.length - self.index0 - 1

    @property
    def first(self) -> bool:
        return self.index0 == 0

    @property
    def last(self) -> bool:
        return self.index0 == self.length - 1


def iterate(items: Sequence[Any]) -> Iterator[tuple[Any, LoopContext]]:
    """Yield ``(item, loop)`` pairs over a list-like sequence."""
    length = len(items)
    for i, item in enumerate(items):
        yield item, LoopContext(
            index0=i,
            length=length,
            previtem=items[i - 1] if i > 0 else None,
            nextitem=items[i + 1] if i + 1 < length else None,
        )
