"""
Game Session

One GameSession exists per channel. It is the single owner of the piles,
hands, players, scores and round state for that channel.
"""

import random
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set

from .card_pile import CardPile
from .deck import Deck
from .hands import HAND_SIZE, replenish
from .players import PlayerId, SimulatedPlayer, is_simulated


class GamePhase(Enum):
    """Phases of a session."""
    LOBBY = "lobby"
    COLLECTING = "collecting"
    JUDGING = "judging"


class GameSession:
    """
    Mutable state of the game played in one channel.

    Invariants kept by the round engine:
    - judge is a member of players whenever it is set
    - submissions only holds players, at most one entry each per round
    - required_picks does not change while a round is open
    """

    def __init__(
        self,
        channel_id: str,
        deck: Deck,
        rng: Optional[random.Random] = None,
        game_id: Optional[str] = None,
    ):
        self.channel_id = channel_id
        # Short id carried in button payloads, distinct for every game in a channel
        self.game_id = game_id or uuid.uuid4().hex[:8]
        self.deck = deck
        self.players: Set[PlayerId] = set()
        self.scores: Dict[PlayerId, int] = {}
        self.judge: Optional[PlayerId] = None
        self.round_number = 0
        self.phase = GamePhase.LOBBY
        self.black_pile = CardPile(deck.black, rng)
        self.white_pile = CardPile(deck.white, rng)
        self.hands: Dict[PlayerId, List[str]] = {}
        self.submissions: Dict[PlayerId, List[str]] = {}
        self.current_prompt: Optional[str] = None
        self.required_picks = 1
        self.solo_mode = False
        self.created_at = datetime.now(timezone.utc)

    def has_player(self, player: PlayerId) -> bool:
        return player in self.players

    def is_judge(self, player: PlayerId) -> bool:
        return self.judge is not None and self.judge == player

    def add_player(self, player: PlayerId) -> List[str]:
        """Register a player (keeping any existing score) and fill their hand."""
        self.players.add(player)
        self.scores.setdefault(player, 0)
        return self.top_up_hand(player)

    def remove_player(self, player: PlayerId) -> None:
        """Drop a player's membership, hand and submission. The score entry stays."""
        self.players.discard(player)
        self.hands.pop(player, None)
        self.submissions.pop(player, None)
        if self.judge == player:
            self.judge = None

    def top_up_hand(self, player: PlayerId) -> List[str]:
        hand = self.hands.setdefault(player, [])
        return replenish(hand, self.white_pile, HAND_SIZE)

    def projected_hand_size(self, player: PlayerId) -> int:
        """Number of cards player will hold after a top-up, without drawing any."""
        held = len(self.hands.get(player, []))
        if not self.white_pile.source:
            return held
        return max(held, HAND_SIZE)

    def draw_prompt(self) -> Optional[str]:
        """Next prompt card, reshuffling when the pile is exhausted."""
        return self.black_pile.draw_one()

    def simulated_players(self) -> List[SimulatedPlayer]:
        return sorted(
            (p for p in self.players if isinstance(p, SimulatedPlayer)),
            key=lambda p: p.seq,
        )

    def human_players(self) -> List[PlayerId]:
        return [p for p in self.players if not is_simulated(p)]
