"""
Card Piles

A pile is a session-owned, shuffled copy of one half of the source deck.
Cards are drawn from the end of the pile.
"""

import random
from typing import List, Optional, Sequence


def shuffle(source: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Return every card of source in uniformly random order. source is not modified."""
    cards = list(source)
    (rng or random).shuffle(cards)
    return cards


class CardPile:
    """Shuffled pile that can be refilled from its full source deck."""

    def __init__(self, source: Sequence[str], rng: Optional[random.Random] = None):
        self.source = tuple(source)
        self._rng = rng
        self.cards: List[str] = shuffle(self.source, rng)

    def __len__(self) -> int:
        return len(self.cards)

    def draw(self, n: int) -> List[str]:
        """Remove up to n cards from the end of the pile."""
        drawn = []
        while len(drawn) < n and self.cards:
            drawn.append(self.cards.pop())
        return drawn

    def reshuffle(self) -> None:
        """Refill the pile with a fresh shuffle of the whole source deck."""
        self.cards = shuffle(self.source, self._rng)

    def draw_one(self) -> Optional[str]:
        """
        Draw a single card, reshuffling once if the pile is empty.

        Returns None only when the source deck itself has no cards.
        """
        drawn = self.draw(1)
        if not drawn:
            self.reshuffle()
            drawn = self.draw(1)
        return drawn[0] if drawn else None
