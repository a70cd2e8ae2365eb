"""
Scoring & Resolution

A point goes to the submission the judge picks. Ties are never broken:
tables are ordered by descending score and otherwise keep the order in
which players first got a score entry.
"""

from typing import Dict, Optional, Tuple

from .errors import InvalidPhase, NotAuthorized, NotFound
from .players import PlayerId
from .prompts import fill_prompt
from .results import RoundResolution, ScoreLine
from .session import GamePhase, GameSession
from ..utils.logging_config import get_logger, log_game_event

logger = get_logger(__name__)


def score_table(scores: Dict[PlayerId, int]) -> Tuple[ScoreLine, ...]:
    ordered = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return tuple(ScoreLine(player, score) for player, score in ordered)


def resolve_round(
    session: GameSession,
    caller: PlayerId,
    winner: PlayerId,
    round_number: Optional[int] = None,
    game_id: Optional[str] = None,
) -> RoundResolution:
    """
    Award the round to winner and return the session to the lobby.

    Raises:
        InvalidPhase: The session is not waiting for a judge pick
        NotAuthorized: caller is not the judge
        NotFound: Stale round or game, or winner has no submission this round
    """
    if session.phase != GamePhase.JUDGING:
        raise InvalidPhase("Not in judging phase.")
    if not session.is_judge(caller):
        raise NotAuthorized("Only the judge can pick.")
    stale_round = round_number is not None and round_number != session.round_number
    if stale_round or (game_id is not None and game_id != session.game_id):
        raise NotFound("That pick belongs to a round that is already over.")
    if winner not in session.submissions:
        raise NotFound("That player has no submission this round.")

    cards = tuple(session.submissions[winner])
    filled = fill_prompt(session.current_prompt or "", cards)
    session.scores[winner] = session.scores.get(winner, 0) + 1

    resolution = RoundResolution(
        round_number=session.round_number,
        winner=winner,
        prompt=session.current_prompt or "",
        cards=cards,
        filled_text=filled,
        scores=score_table(session.scores),
    )

    session.phase = GamePhase.LOBBY
    session.current_prompt = None
    session.required_picks = 1
    session.submissions.clear()

    log_game_event(session.channel_id, "round_resolved",
                   round=resolution.round_number, winner=winner)
    logger.info(f"Round resolved - channel: {session.channel_id}, round: {resolution.round_number}")
    return resolution
