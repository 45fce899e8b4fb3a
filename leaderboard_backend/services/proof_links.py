"""
HMAC proof chain over a run's checkpoint times.

Each link is ``HMAC-SHA256(token, "{leg}:{index}:{time}:{previous_link}")``
hex-encoded, with an empty previous link for checkpoint 0. A link therefore
commits to its own checkpoint and every link before it, so a checkpoint
cannot be altered, reordered or dropped without breaking the rest of the
chain, and no link can be produced without the session token.

Only the standard library is imported here so the game-side client can sign
links without loading the server stack.
"""

import hashlib
import hmac
from typing import Sequence


def format_checkpoint_time(time: float) -> str:
    """
    Render a checkpoint time the way the game client prints a JSON number.
    Integral values carry no fractional part (``5000`` not ``5000.0``).
    """
    if isinstance(time, float) and time.is_integer():
        return str(int(time))
    if isinstance(time, float):
        return repr(time)
    return str(time)


def compute_proof(
    session_token: str,
    leg_id: str,
    index: int,
    time: float,
    previous_proof: str = "",
) -> str:
    """Compute one link of the chain."""
    message = f"{leg_id}:{index}:{format_checkpoint_time(time)}:{previous_proof}"
    return hmac.new(
        session_token.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def build_proof_chain(
    session_token: str,
    leg_id: str,
    checkpoint_times: Sequence[float],
) -> list[str]:
    """Derive the full chain for a sequence of checkpoint times."""
    chain: list[str] = []
    previous = ""
    for index, time in enumerate(checkpoint_times):
        previous = compute_proof(session_token, leg_id, index, time, previous)
        chain.append(previous)
    return chain
