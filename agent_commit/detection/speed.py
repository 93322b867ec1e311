"""Words-per-minute verdicts over a typing session snapshot."""

from agent_commit.models import SessionSnapshot, Verdict

CHARACTERS_PER_WORD = 5


def calculate_wpm(characters: int, elapsed: float) -> float:
    """Words per minute for ``characters`` typed over ``elapsed`` seconds.

    Raises:
        ValueError: If ``elapsed`` is not positive.
    """
    if elapsed <= 0:
        raise ValueError("elapsed must be positive to compute WPM")
    words = characters / CHARACTERS_PER_WORD
    minutes = elapsed / 60.0
    return words / minutes


def evaluate(snapshot: SessionSnapshot, min_characters: int, wpm_threshold: float) -> Verdict:
    """Judge a session snapshot.

    Returns ``Verdict.INSUFFICIENT`` while the session holds fewer than
    ``min_characters`` or has no measurable duration yet, otherwise
    ``AGENT_LIKELY`` when the cumulative WPM is strictly above the threshold.
    """
    if snapshot.accumulated_characters < min_characters:
        return Verdict.INSUFFICIENT
    if snapshot.elapsed <= 0:
        return Verdict.INSUFFICIENT

    wpm = calculate_wpm(snapshot.accumulated_characters, snapshot.elapsed)
    return Verdict.AGENT_LIKELY if wpm > wpm_threshold else Verdict.HUMAN
