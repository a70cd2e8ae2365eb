"""
Simulated Players

In solo mode a lone human plays against simulated players. They join with
a score entry and a hand like anyone else and submit the moment a round
opens, so completion only ever waits on humans.
"""

from typing import List

from .hands import take_cards
from .players import SimulatedPlayer
from .prompts import clamp_picks
from .session import GameSession
from ..utils.logging_config import log_game_event

SOLO_NPC_COUNT = 2


def ensure_simulated_players(session: GameSession, count: int = SOLO_NPC_COUNT) -> List[SimulatedPlayer]:
    """Make sure NPCs 1..count are in the session with a score entry and a full hand."""
    npcs = [SimulatedPlayer(session.channel_id, seq) for seq in range(1, count + 1)]
    for npc in npcs:
        session.add_player(npc)
    return npcs


def remove_simulated_players(session: GameSession) -> int:
    """Remove every NPC together with its hand, submission and score."""
    npcs = session.simulated_players()
    for npc in npcs:
        session.remove_player(npc)
        session.scores.pop(npc, None)
    return len(npcs)


def auto_submit(session: GameSession) -> None:
    """Each NPC plays the first cards of its hand for the current round."""
    picks = clamp_picks(session.required_picks)
    for npc in session.simulated_players():
        if npc in session.submissions:
            continue
        hand = session.top_up_hand(npc)
        if len(hand) < picks:
            continue
        session.submissions[npc] = take_cards(hand, list(range(picks)))
        session.top_up_hand(npc)
        log_game_event(session.channel_id, "npc_submitted", npc=npc.seq, round=session.round_number)
