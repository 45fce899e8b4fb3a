"""
Server-side verification of submitted proof chains.
"""

import hmac
import logging
import math
import string
from numbers import Real
from typing import Any

from leaderboard_backend.errors import InvalidArgument, PermissionDenied
from leaderboard_backend.services.proof_links import (
    build_proof_chain,
    compute_proof,
    format_checkpoint_time,
)

logger = logging.getLogger(__name__)

CHECKPOINT_COUNT = 10

_HEX_DIGITS = frozenset(string.hexdigits)


def is_checkpoint_time(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_hex_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value) and all(c in _HEX_DIGITS for c in value)


class ProofChainVerifier:
    """Recomputes a submitted chain against the session's secret token."""

    def __init__(self, checkpoint_count: int = CHECKPOINT_COUNT) -> None:
        self._checkpoint_count = checkpoint_count

    def verify(
        self,
        leg_id: str,
        checkpoint_times: Any,
        proof_chain: Any,
        session_token: str,
    ) -> bool:
        """
        Verify every link in order.

        Raises:
            InvalidArgument: wrong count or non-finite times, wrong count or
                non-hex proofs.
            PermissionDenied: first link that does not match, by index.
        """
        count = self._checkpoint_count
        if (
            not isinstance(checkpoint_times, (list, tuple))
            or len(checkpoint_times) != count
            or not all(is_checkpoint_time(t) for t in checkpoint_times)
        ):
            raise InvalidArgument(f"Must have exactly {count} checkpoint times")
        if (
            not isinstance(proof_chain, (list, tuple))
            or len(proof_chain) != count
            or not all(_is_hex_string(p) for p in proof_chain)
        ):
            raise InvalidArgument(f"Must have exactly {count} proofs")

        previous = ""
        for index in range(count):
            expected = compute_proof(
                session_token, leg_id, index, checkpoint_times[index], previous
            )
            provided = proof_chain[index]
            if not hmac.compare_digest(expected, provided):
                logger.warning(f"Proof chain mismatch on leg {leg_id} at checkpoint {index}")
                raise PermissionDenied(f"Invalid proof chain at checkpoint {index}")
            previous = provided

        return True


__all__ = [
    "CHECKPOINT_COUNT",
    "ProofChainVerifier",
    "build_proof_chain",
    "compute_proof",
    "format_checkpoint_time",
    "is_checkpoint_time",
]
