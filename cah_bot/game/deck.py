"""
Card Deck

The source deck is supplied once at process start as two lists of card
texts: prompt ("black") cards and answer ("white") cards. Sessions shuffle
their own piles from it and never modify it.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple, Union

from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# Placeholder inside a prompt card where an answer card is substituted
BLANK_MARKER = "{blank}"

# Used when the source deck has no prompt cards at all
DEFAULT_PROMPT = "The King demanded {blank} immediately."


class DeckError(ValueError):
    """Raised when a deck file is missing or malformed."""


@dataclass(frozen=True)
class Deck:
    """Immutable source deck shared by every session in the process."""
    black: Tuple[str, ...] = ()
    white: Tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, black: Iterable[str], white: Iterable[str]) -> "Deck":
        return cls(black=tuple(black), white=tuple(white))


def _card_list(data: dict, key: str, path: Path) -> Tuple[str, ...]:
    cards = data.get(key, [])
    if not isinstance(cards, list) or not all(isinstance(c, str) for c in cards):
        raise DeckError(f"'{key}' in {path} must be a list of strings")
    return tuple(cards)


def load_deck(path: Union[str, Path]) -> Deck:
    """
    Load a deck from a JSON file of the form {"black": [...], "white": [...]}.

    Args:
        path: Location of the deck file

    Returns:
        Deck: The loaded deck

    Raises:
        DeckError: If the file is missing, not JSON, or has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise DeckError(f"Deck file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DeckError(f"Deck file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DeckError(f"Deck file {path} must contain a JSON object")

    deck = Deck(black=_card_list(data, "black", path), white=_card_list(data, "white", path))
    logger.info(f"Deck loaded - path: {path}, black: {len(deck.black)}, white: {len(deck.white)}")
    return deck
