"""Lazily populated milestone title to number cache."""

from typing import Callable, Dict, Iterable, Optional, Tuple

from loguru import logger

MilestoneFetcher = Callable[[], Iterable[Tuple[int, str]]]


class MilestoneIndex:
    """Maps destination milestone titles to their numbers.

    The mapping is either empty or a complete snapshot of the destination's
    milestones as of the last fetch. It is never filled incrementally:
    creating a milestone invalidates it and the next lookup refetches the
    full set.

    Not thread safe. Callers adding concurrency must hold one lock across
    ``resolve`` and ``invalidate``.
    """

    def __init__(self, fetch: MilestoneFetcher):
        """Initialize milestone index.

        Args:
            fetch: Returns every ``(number, title)`` pair on the destination,
                all states included
        """
        self._fetch = fetch
        self._numbers: Dict[str, int] = {}
        self._populated = False
        self.logger = logger.bind(component='MilestoneIndex')

    @property
    def populated(self) -> bool:
        return self._populated

    def resolve(self, title: str) -> Optional[int]:
        """Return the destination number for ``title``, or None if unknown."""
        if not self._populated:
            self._refresh()
        return self._numbers.get(title)

    def invalidate(self) -> None:
        self._numbers = {}
        self._populated = False

    def _refresh(self) -> None:
        numbers: Dict[str, int] = {}
        for number, title in self._fetch():
            # First match wins on duplicate titles
            numbers.setdefault(title, number)

        self._numbers = numbers
        self._populated = True
        self.logger.debug(f'Loaded {len(numbers)} destination milestones')
