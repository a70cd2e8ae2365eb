import random

import pytest

from cah_bot.game.deck import Deck

WHITE_CARDS = [f"white card {i}" for i in range(1, 31)]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def deck():
    """Single-prompt deck so every round draws the same one-blank prompt."""
    return Deck.from_lists(["I can't believe {blank}."], WHITE_CARDS)


@pytest.fixture
def two_blank_deck():
    return Deck.from_lists(["{blank} and {blank}, together at last."], WHITE_CARDS)
