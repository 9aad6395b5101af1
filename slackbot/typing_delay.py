"""
Typing simulation timing.

Approximates how long a person would take to type a reply: one minute per
3000 characters, capped so a bot never looks stuck.
"""

from typing import Any

MAX_TYPING_DELAY = 2.0  # seconds
CHARS_PER_MINUTE = 3000


def payload_length(payload: Any) -> int:
    """
    Get the length of a text or attachment payload.

    Attachment lists are measured by the length of their repr, a rough
    stand-in for the size of the message. Unsupported types return 0.
    """
    if isinstance(payload, str):
        return len(payload)
    if isinstance(payload, (list, tuple)):
        return len(repr(list(payload)))
    return 0


def estimate_delay(payload: Any) -> float:
    """Return the simulated typing delay for ``payload`` in seconds."""
    delay = 60.0 * payload_length(payload) / CHARS_PER_MINUTE
    return min(delay, MAX_TYPING_DELAY)
