"""
Player Identity

Players are either real chat users or simulated players that only exist
in solo mode. Simulated players are numbered per channel so they can never
be confused with a real user or with another channel's simulated players.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RealPlayer:
    """A chat user, identified by the gateway's stable user id."""
    user_id: str


@dataclass(frozen=True)
class SimulatedPlayer:
    """An NPC that auto-submits in solo mode."""
    channel: str
    seq: int


PlayerId = Union[RealPlayer, SimulatedPlayer]


def real(user_id) -> RealPlayer:
    return RealPlayer(str(user_id))


def is_simulated(player: PlayerId) -> bool:
    return isinstance(player, SimulatedPlayer)


def display_name(player: PlayerId) -> str:
    """Default label for a player when the gateway knows no better name."""
    if isinstance(player, SimulatedPlayer):
        return f"NPC {player.seq}"
    return f"Player {player.user_id}"


def player_token(player: PlayerId) -> str:
    """Encode a player for button payloads."""
    if isinstance(player, SimulatedPlayer):
        return f"npc:{player.channel}:{player.seq}"
    return f"u:{player.user_id}"


def parse_player_token(token: str) -> PlayerId:
    """
    Decode a token produced by player_token().

    Raises:
        ValueError: If the token is not a recognised player encoding
    """
    kind, _, rest = token.partition(":")
    if kind == "u" and rest:
        return RealPlayer(rest)
    if kind == "npc":
        channel, sep, seq = rest.rpartition(":")
        if sep and seq.isdigit():
            return SimulatedPlayer(channel, int(seq))
    raise ValueError(f"Invalid player token: {token!r}")
