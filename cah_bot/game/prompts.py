"""
Prompt Helpers

Counting blanks in a prompt card and filling them with answer cards.
"""

from typing import Callable, Optional, Sequence

from .deck import BLANK_MARKER

MAX_PICKS = 3


def count_blanks(prompt: str) -> int:
    """Number of blank markers in a prompt, never less than 1."""
    return max(1, str(prompt).count(BLANK_MARKER))


def clamp_picks(picks: int, low: int = 1, high: int = MAX_PICKS) -> int:
    return min(high, max(low, picks))


def required_picks_for(prompt: str) -> int:
    """Cards each player must submit for this prompt (1 to MAX_PICKS)."""
    return clamp_picks(count_blanks(prompt))


def fill_prompt(
    prompt: str,
    answers: Sequence[str],
    highlight: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Substitute answers into the prompt's blank markers, in order.

    Answers beyond the number of markers are appended, space-joined, right
    after the last filled marker (or at the end of a prompt that has none).
    Markers beyond the number of answers are left in place.

    Args:
        prompt: Prompt card text
        answers: Chosen answer cards in play order
        highlight: Optional decorator applied to each inserted answer

    Returns:
        str: The filled prompt
    """
    mark = highlight or (lambda text: text)
    parts = str(prompt).split(BLANK_MARKER)
    blanks = len(parts) - 1

    if not answers:
        return str(prompt)

    if blanks == 0:
        return f"{prompt} " + " ".join(mark(a) for a in answers)

    filled = [mark(a) for a in answers[:blanks]]
    extra = [mark(a) for a in answers[blanks:]]
    if extra:
        filled[-1] = " ".join([filled[-1]] + extra)

    out = parts[0]
    for i, rest in enumerate(parts[1:]):
        out += (filled[i] if i < len(filled) else BLANK_MARKER) + rest
    return out
