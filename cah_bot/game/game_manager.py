"""
Game Manager

This module owns every game session in the process and is the only entry
point the bot handlers use. Sessions are keyed by channel and created
lazily; each channel has its own asyncio.Lock and every operation runs as
one critical section under it.
"""

import asyncio
import random
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from .deck import Deck
from .errors import NotFound, PreconditionFailed
from .players import PlayerId
from .results import (
    HandView, JudgingBoard, RoundResolution, RoundStarted,
    ScoreLine, SessionSummary, SubmissionReceipt,
)
from .round_engine import RoundEngine
from .scoring import resolve_round, score_table
from .session import GameSession
from ..utils.logging_config import get_logger, log_game_event

# Logger setup
logger = get_logger(__name__)

RoundCompleteListener = Callable[[JudgingBoard], Awaitable[None]]


class GameManager:
    """
    Central manager that orchestrates all game sessions.

    This class handles:
    - Creating and resetting sessions per channel
    - Serializing actions against the same session
    - Routing player actions to the round engine
    - Notifying listeners when a round is ready for judging
    """

    def __init__(self, deck: Deck, rng: Optional[random.Random] = None):
        """Initialize the game manager with the process-wide source deck."""
        self.deck = deck
        self.rng = rng
        self.sessions: Dict[str, GameSession] = {}  # channel_id -> session
        self._locks: Dict[str, asyncio.Lock] = {}
        self._round_complete_listeners: List[RoundCompleteListener] = []

    def add_round_complete_listener(self, listener: RoundCompleteListener) -> None:
        """Register a coroutine called with the judging board whenever a round fills up."""
        self._round_complete_listeners.append(listener)

    def _lock(self, channel_id: str) -> asyncio.Lock:
        return self._locks.setdefault(channel_id, asyncio.Lock())

    def _ensure_session(self, channel_id: str) -> GameSession:
        session = self.sessions.get(channel_id)
        if session is None:
            session = GameSession(channel_id, self.deck, self.rng)
            self.sessions[channel_id] = session
        return session

    def _existing_session(self, channel_id: str) -> GameSession:
        session = self.sessions.get(channel_id)
        if session is None:
            raise NotFound("No game in this chat. Start one first.")
        return session

    @staticmethod
    def _summary(session: GameSession) -> SessionSummary:
        return SessionSummary(
            channel_id=session.channel_id,
            game_id=session.game_id,
            phase=session.phase.value,
            round_number=session.round_number,
            judge=session.judge,
            players=tuple(session.players),
            solo_mode=session.solo_mode,
            current_prompt=session.current_prompt,
            required_picks=session.required_picks,
            submitted=len(session.submissions),
        )

    @staticmethod
    def _hand_view(session: GameSession, player: PlayerId) -> HandView:
        return HandView(
            player=player,
            game_id=session.game_id,
            cards=tuple(session.hands.get(player, [])),
            current_prompt=session.current_prompt,
            required_picks=session.required_picks,
            round_number=session.round_number,
        )

    async def _notify_round_complete(self, board: JudgingBoard) -> None:
        for listener in self._round_complete_listeners:
            try:
                await listener(board)
            except Exception as e:
                logger.error(f"Round complete listener failed - channel: {board.channel_id}, error: {str(e)}")

    async def reset(self, channel_id: str, caller: PlayerId) -> SessionSummary:
        """
        Start a brand new game in the channel with caller as judge.

        Any previous session in the channel, scores included, is discarded.
        """
        async with self._lock(channel_id):
            session = GameSession(channel_id, self.deck, self.rng)
            RoundEngine(session).open_lobby(caller)
            self.sessions[channel_id] = session
            logger.info(f"Game created - channel: {channel_id}, judge: {caller}")
            return self._summary(session)

    async def set_solo_mode(self, channel_id: str, caller: PlayerId, enabled: bool) -> SessionSummary:
        async with self._lock(channel_id):
            session = self._ensure_session(channel_id)
            engine = RoundEngine(session)
            completed = engine.set_solo_mode(caller, enabled)
            board = engine.judging_board() if completed else None
            summary = self._summary(session)
        if board:
            await self._notify_round_complete(board)
        return summary

    async def join(self, channel_id: str, player: PlayerId) -> HandView:
        async with self._lock(channel_id):
            session = self._ensure_session(channel_id)
            session.add_player(player)
            log_game_event(channel_id, "player_joined", player=player, player_count=len(session.players))
            return self._hand_view(session, player)

    async def leave(self, channel_id: str, player: PlayerId) -> SessionSummary:
        async with self._lock(channel_id):
            session = self._ensure_session(channel_id)
            engine = RoundEngine(session)
            completed = engine.leave(player)
            board = engine.judging_board() if completed else None
            summary = self._summary(session)
        if board:
            await self._notify_round_complete(board)
        return summary

    async def get_hand(self, channel_id: str, player: PlayerId) -> HandView:
        async with self._lock(channel_id):
            session = self._ensure_session(channel_id)
            if not session.has_player(player):
                raise PreconditionFailed("Join the game first.")
            session.top_up_hand(player)
            return self._hand_view(session, player)

    async def start_round(self, channel_id: str, caller: PlayerId) -> RoundStarted:
        async with self._lock(channel_id):
            session = self._ensure_session(channel_id)
            started = RoundEngine(session).start_round(caller)
            logger.info(
                f"Round started - channel: {channel_id}, round: {started.round_number}, "
                f"picks: {started.required_picks}, players: {started.player_count}"
            )
            return started

    async def submit(
        self,
        channel_id: str,
        player: PlayerId,
        indices: Sequence[int],
        round_number: Optional[int] = None,
        game_id: Optional[str] = None,
    ) -> SubmissionReceipt:
        """
        Submit cards for the current round.

        When this submission completes the round, the judging board is
        pushed to the round complete listeners after the lock is released.
        """
        async with self._lock(channel_id):
            session = self._existing_session(channel_id)
            engine = RoundEngine(session)
            receipt = engine.submit(player, indices, round_number, game_id)
            board = engine.judging_board() if receipt.round_complete else None
        if board:
            await self._notify_round_complete(board)
        return receipt

    async def judge_pick(
        self,
        channel_id: str,
        caller: PlayerId,
        winner: PlayerId,
        round_number: Optional[int] = None,
        game_id: Optional[str] = None,
    ) -> RoundResolution:
        async with self._lock(channel_id):
            session = self._existing_session(channel_id)
            return resolve_round(session, caller, winner, round_number, game_id)

    async def get_scores(self, channel_id: str) -> List[ScoreLine]:
        async with self._lock(channel_id):
            session = self.sessions.get(channel_id)
            if session is None:
                return []
            return list(score_table(session.scores))

    async def get_summary(self, channel_id: str) -> Optional[SessionSummary]:
        async with self._lock(channel_id):
            session = self.sessions.get(channel_id)
            return self._summary(session) if session else None
