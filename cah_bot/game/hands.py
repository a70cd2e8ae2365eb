"""
Hand Management

Hands are plain lists of answer-card texts. They grow only through
replenish() and shrink only when cards are played with take_cards().
"""

from typing import List, Sequence

from .card_pile import CardPile
from .errors import PreconditionFailed

HAND_SIZE = 10


def replenish(hand: List[str], pile: CardPile, target_size: int = HAND_SIZE) -> List[str]:
    """
    Top a hand up to target_size, one card at a time.

    The pile is reshuffled from its source whenever it runs dry. Stops early,
    without error, only when the source deck is empty.

    Args:
        hand: Hand to fill (modified in place)
        pile: The session's answer pile
        target_size: Number of cards the hand should hold

    Returns:
        List[str]: The same hand object
    """
    while len(hand) < target_size:
        card = pile.draw_one()
        if card is None:
            break
        hand.append(card)
    return hand


def check_picks(hand_size: int, indices: Sequence[int]) -> None:
    """
    Validate 0-based card indices against a hand of hand_size cards.

    Raises:
        PreconditionFailed: If an index repeats or is out of range
    """
    if len(set(indices)) != len(indices):
        raise PreconditionFailed("Each card can only be picked once.")
    for idx in indices:
        if not 0 <= idx < hand_size:
            raise PreconditionFailed(f"Card {idx + 1} is not in your hand.")


def take_cards(hand: List[str], indices: Sequence[int]) -> List[str]:
    """
    Remove the cards at the given 0-based indices from a hand.

    The remaining cards keep their order. The played cards are returned in
    the order they were chosen.

    Raises:
        PreconditionFailed: If an index repeats or is out of range
    """
    check_picks(len(hand), indices)

    chosen = [hand[idx] for idx in indices]
    for idx in sorted(indices, reverse=True):
        del hand[idx]
    return chosen
