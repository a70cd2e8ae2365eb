import random
from collections import Counter

from cah_bot.game.card_pile import CardPile, shuffle
from cah_bot.game.hands import HAND_SIZE, replenish, take_cards
from cah_bot.game.errors import PreconditionFailed

import pytest


def test_shuffle_keeps_every_card_and_leaves_source_alone():
    source = ["a", "b", "c", "d", "e"]
    shuffled = shuffle(source, random.Random(3))

    assert sorted(shuffled) == source
    assert source == ["a", "b", "c", "d", "e"]


def test_shuffle_reaches_every_permutation():
    rng = random.Random(42)
    seen = Counter(tuple(shuffle(["a", "b", "c"], rng)) for _ in range(600))

    # 3! permutations, each should show up a fair number of times
    assert len(seen) == 6
    assert min(seen.values()) > 50


def test_draw_takes_from_the_end():
    pile = CardPile(["a", "b", "c"], random.Random(1))
    expected = list(reversed(pile.cards))

    assert pile.draw(2) == expected[:2]
    assert len(pile) == 1


def test_draw_past_the_end_returns_what_is_left():
    pile = CardPile(["a", "b"], random.Random(1))

    assert len(pile.draw(5)) == 2
    assert pile.draw(1) == []


def test_draw_one_reshuffles_when_empty():
    pile = CardPile(["a", "b"], random.Random(1))
    pile.draw(2)

    card = pile.draw_one()
    assert card in ("a", "b")
    assert len(pile) == 1


def test_draw_one_from_empty_source_is_none():
    pile = CardPile([], random.Random(1))

    assert pile.draw_one() is None
    assert pile.draw(3) == []


@pytest.mark.parametrize("deck_size", [1, 3, 9, 10, 25])
def test_replenish_always_fills_hand_when_source_has_cards(deck_size):
    pile = CardPile([f"c{i}" for i in range(deck_size)], random.Random(5))
    hand = []

    replenish(hand, pile)
    assert len(hand) == HAND_SIZE


def test_replenish_with_empty_source_keeps_what_it_has():
    pile = CardPile([], random.Random(5))
    hand = ["kept"]

    assert replenish(hand, pile) == ["kept"]


def test_replenish_does_not_overfill():
    pile = CardPile([f"c{i}" for i in range(30)], random.Random(5))
    hand = [f"h{i}" for i in range(12)]

    replenish(hand, pile)
    assert len(hand) == 12
    assert len(pile) == 30


def test_take_cards_keeps_remaining_order_and_choice_order():
    hand = ["a", "b", "c", "d"]

    chosen = take_cards(hand, [2, 0])

    assert chosen == ["c", "a"]
    assert hand == ["b", "d"]


def test_take_cards_rejects_duplicates_and_out_of_range():
    hand = ["a", "b", "c"]

    with pytest.raises(PreconditionFailed):
        take_cards(hand, [1, 1])
    with pytest.raises(PreconditionFailed):
        take_cards(hand, [3])
    with pytest.raises(PreconditionFailed):
        take_cards(hand, [-1])
    assert hand == ["a", "b", "c"]
