"""
Round Engine

This module drives a session through its phases:

    lobby -> collecting -> judging -> lobby

A round opens when the judge draws a prompt, collects one submission from
every required player, and waits for the judge's pick once the last
required submission is in. All methods are synchronous and either raise a
GameError before touching state or apply the whole change.
"""

from string import ascii_uppercase
from typing import List, Optional, Sequence

from .deck import DEFAULT_PROMPT
from .errors import AlreadyActed, InvalidPhase, NotAuthorized, NotFound, PreconditionFailed
from .hands import check_picks, take_cards
from .npc import SOLO_NPC_COUNT, auto_submit, ensure_simulated_players, remove_simulated_players
from .players import PlayerId, is_simulated
from .prompts import fill_prompt, required_picks_for
from .results import JudgingBoard, RevealedSubmission, RoundStarted, SubmissionReceipt
from .session import GamePhase, GameSession
from ..utils.logging_config import get_logger, log_game_event

logger = get_logger(__name__)

MIN_PLAYERS = 2


def submission_label(index: int) -> str:
    """Label for the index-th submission: A..Z, then AA, AB... like spreadsheet columns."""
    label = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, len(ascii_uppercase))
        label = ascii_uppercase[rem] + label
    return label


class RoundEngine:
    """Phase state machine operating on a single GameSession."""

    def __init__(self, session: GameSession):
        self.session = session

    def open_lobby(self, caller: PlayerId) -> None:
        """Seat caller as the only player and judge of a fresh session."""
        if is_simulated(caller):
            raise NotAuthorized("Simulated players cannot run a game.")
        session = self.session
        session.phase = GamePhase.LOBBY
        session.add_player(caller)
        session.judge = caller
        log_game_event(session.channel_id, "game_started", judge=caller)

    def start_round(self, caller: PlayerId) -> RoundStarted:
        """
        Draw a prompt and open the round for submissions.

        Raises:
            NotAuthorized: caller is not the judge
            InvalidPhase: a round is already running
            PreconditionFailed: fewer than two players outside solo mode
        """
        session = self.session
        if not session.is_judge(caller):
            raise NotAuthorized("Only the judge can start a round.")
        if session.phase != GamePhase.LOBBY:
            raise InvalidPhase("A round is already in progress.")
        if not session.solo_mode and len(session.players) < MIN_PLAYERS:
            raise PreconditionFailed(
                f"Need at least {MIN_PLAYERS} players (or enable solo mode)."
            )

        if session.solo_mode:
            session.add_player(caller)
            ensure_simulated_players(session, SOLO_NPC_COUNT)

        prompt = session.draw_prompt() or DEFAULT_PROMPT
        session.round_number += 1
        session.current_prompt = prompt
        session.required_picks = required_picks_for(prompt)
        session.submissions.clear()
        for player in list(session.players):
            session.top_up_hand(player)
        session.phase = GamePhase.COLLECTING

        if session.solo_mode:
            auto_submit(session)

        log_game_event(session.channel_id, "round_started",
                       round=session.round_number, picks=session.required_picks)
        return RoundStarted(
            game_id=session.game_id,
            round_number=session.round_number,
            prompt=prompt,
            required_picks=session.required_picks,
            player_count=len(session.players),
            solo_mode=session.solo_mode,
        )

    def submit(
        self,
        player: PlayerId,
        indices: Sequence[int],
        round_number: Optional[int] = None,
        game_id: Optional[str] = None,
    ) -> SubmissionReceipt:
        """
        Play cards from player's hand for the current round.

        Every check runs before the session is touched; in solo mode a
        player who hasn't joined is seated only once the pick is accepted.

        Raises:
            InvalidPhase: no round is collecting submissions
            NotFound: round_number or game_id refers to an earlier round or game
            PreconditionFailed: not joined, too few cards, or a malformed pick
            AlreadyActed: player already submitted this round
            NotAuthorized: the judge tried to submit outside solo mode
        """
        session = self.session
        if session.phase != GamePhase.COLLECTING or not session.current_prompt:
            raise InvalidPhase("No active round. The judge should start one.")
        if not self.is_current(round_number, game_id):
            raise NotFound("That card picker belongs to a round that is already over.")
        if not session.has_player(player) and not session.solo_mode:
            raise PreconditionFailed("Join the game first.")
        if player in session.submissions:
            raise AlreadyActed("You already submitted this round.")
        if not session.solo_mode and session.is_judge(player):
            raise NotAuthorized("The judge doesn't submit this round.")

        picks = session.required_picks
        if len(indices) != picks:
            raise PreconditionFailed(f"Pick exactly {picks} card{'s' if picks > 1 else ''}.")
        hand_size = session.projected_hand_size(player)
        if hand_size < picks:
            raise PreconditionFailed("Not enough cards in your hand.")
        check_picks(hand_size, indices)

        if not session.has_player(player):
            # Solo mode lets a human jump straight into the round
            session.add_player(player)
        hand = session.top_up_hand(player)

        chosen = take_cards(hand, list(indices))
        session.submissions[player] = chosen
        session.top_up_hand(player)
        log_game_event(session.channel_id, "card_submitted",
                       round=session.round_number, player=player)

        completed = self.check_completion()
        return SubmissionReceipt(
            player=player,
            prompt=session.current_prompt,
            cards=tuple(chosen),
            filled_text=fill_prompt(session.current_prompt, chosen),
            round_complete=completed,
            hand_size=len(session.hands[player]),
        )

    def is_current(self, round_number: Optional[int] = None, game_id: Optional[str] = None) -> bool:
        """True unless a given round number or game id points at an earlier round or game."""
        session = self.session
        if round_number is not None and round_number != session.round_number:
            return False
        return game_id is None or game_id == session.game_id

    def required_submitters(self) -> List[PlayerId]:
        session = self.session
        if session.solo_mode:
            return session.human_players()
        return [p for p in session.players if not session.is_judge(p)]

    def check_completion(self) -> bool:
        """
        Move to judging if every required submitter has submitted.

        Returns True only on the call that performs the transition.
        """
        session = self.session
        if session.phase != GamePhase.COLLECTING:
            return False
        required = self.required_submitters()
        if not required or not all(p in session.submissions for p in required):
            return False

        session.phase = GamePhase.JUDGING
        log_game_event(session.channel_id, "round_collected",
                       round=session.round_number, submissions=len(session.submissions))
        logger.info(f"Round collected - channel: {session.channel_id}, round: {session.round_number}")
        return True

    def judging_board(self) -> JudgingBoard:
        """Submissions in arrival order, labelled A, B, C..."""
        session = self.session
        prompt = session.current_prompt or ""
        entries = tuple(
            RevealedSubmission(
                label=submission_label(i),
                player=player,
                cards=tuple(cards),
                filled_text=fill_prompt(prompt, cards),
            )
            for i, (player, cards) in enumerate(session.submissions.items())
        )
        return JudgingBoard(
            channel_id=session.channel_id,
            game_id=session.game_id,
            round_number=session.round_number,
            judge=session.judge,
            prompt=prompt,
            entries=entries,
        )

    def set_solo_mode(self, caller: PlayerId, enabled: bool) -> bool:
        """
        Turn solo mode on or off.

        Returns True if the change completed the open round.

        Raises:
            NotAuthorized: caller is not the judge
        """
        session = self.session
        if not session.is_judge(caller):
            raise NotAuthorized("Only the judge can toggle solo mode.")

        session.solo_mode = enabled
        if enabled:
            ensure_simulated_players(session, SOLO_NPC_COUNT)
            if session.phase == GamePhase.COLLECTING:
                auto_submit(session)
        else:
            remove_simulated_players(session)
        log_game_event(session.channel_id, "solo_mode", enabled=enabled)
        return self.check_completion()

    def leave(self, player: PlayerId) -> bool:
        """
        Remove player from the session.

        Returns True if their departure completed the open round.
        """
        self.session.remove_player(player)
        log_game_event(self.session.channel_id, "player_left", player=player)
        return self.check_completion()
