"""
Result objects returned by the game manager for the gateway to render.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .players import PlayerId


@dataclass(frozen=True)
class ScoreLine:
    player: PlayerId
    score: int


@dataclass(frozen=True)
class SessionSummary:
    channel_id: str
    game_id: str
    phase: str
    round_number: int
    judge: Optional[PlayerId]
    players: Tuple[PlayerId, ...]
    solo_mode: bool
    current_prompt: Optional[str] = None
    required_picks: int = 1
    submitted: int = 0


@dataclass(frozen=True)
class HandView:
    player: PlayerId
    game_id: str
    cards: Tuple[str, ...]
    current_prompt: Optional[str] = None
    required_picks: int = 1
    round_number: int = 0


@dataclass(frozen=True)
class RoundStarted:
    game_id: str
    round_number: int
    prompt: str
    required_picks: int
    player_count: int
    solo_mode: bool


@dataclass(frozen=True)
class RevealedSubmission:
    label: str
    player: PlayerId
    cards: Tuple[str, ...]
    filled_text: str


@dataclass(frozen=True)
class JudgingBoard:
    """Everything the judge needs to pick a winner."""
    channel_id: str
    game_id: str
    round_number: int
    judge: Optional[PlayerId]
    prompt: str
    entries: Tuple[RevealedSubmission, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SubmissionReceipt:
    player: PlayerId
    prompt: str
    cards: Tuple[str, ...]
    filled_text: str
    round_complete: bool
    hand_size: int


@dataclass(frozen=True)
class RoundResolution:
    round_number: int
    winner: PlayerId
    prompt: str
    cards: Tuple[str, ...]
    filled_text: str
    scores: Tuple[ScoreLine, ...]
