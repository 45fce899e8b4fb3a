"""
Client side of the leaderboard protocol.

Holds the session issued by the server, signs each checkpoint as the car
reaches it and submits the finished run. Failures come back as result dicts
so the game loop never has to handle network exceptions.
"""

import hashlib
import logging
from typing import Any, Iterable, Optional

import requests

from leaderboard_backend.services.proof_links import compute_proof

from .config import API_URL, CHECKPOINT_COUNT, PLAYER_NAME_LENGTH, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def generate_device_fingerprint(components: Iterable[Any]) -> str:
    """SHA-256 hex of the host characteristics joined with ``|``."""
    data = "|".join(str(c) for c in components)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def format_time(milliseconds: float) -> str:
    """Format a run time as ``m:ss.mmm``."""
    total_ms = int(milliseconds)
    total_seconds = total_ms // 1000
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    ms = total_ms % 1000
    return f"{minutes}:{seconds:02d}.{ms:03d}"


def _error_message(resp: requests.Response) -> tuple[str | None, str]:
    try:
        body = resp.json()
    except ValueError:
        return None, f"HTTP {resp.status_code}"
    return body.get("code"), body.get("detail", f"HTTP {resp.status_code}")


class RunRecorder:
    """
    Records one run at a time against the leaderboard API.
    """

    def __init__(
        self,
        device_fingerprint: str,
        api_url: str = API_URL,
        http: Optional[requests.Session] = None,
    ):
        self.device_fingerprint = device_fingerprint
        self.api_url = api_url.rstrip("/")
        self.http = http or requests.Session()

        self.session_id: Optional[str] = None
        self.session_token: Optional[str] = None
        self.current_leg_id: Optional[str] = None
        self.checkpoint_times: list[float] = []
        self.proof_chain: list[str] = []

    def start_run(self, leg_id: str) -> dict:
        """Request a session for ``leg_id`` and reset any recorded checkpoints."""
        try:
            resp = self.http.post(
                f"{self.api_url}/runs/start",
                json={"legId": leg_id, "deviceFingerprint": self.device_fingerprint},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to start leaderboard run: {e}")
            return {"success": False, "error": "failed", "message": str(e)}

        if resp.status_code != 201:
            code, message = _error_message(resp)
            logger.error(f"Failed to start leaderboard run: {message}")
            if code == "resource-exhausted":
                return {"success": False, "error": "rate-limited", "message": message}
            return {"success": False, "error": "failed", "message": message}

        data = resp.json()
        self._reset()
        self.session_id = data["sessionId"]
        self.session_token = data["sessionToken"]
        self.current_leg_id = leg_id

        logger.info(f"Leaderboard session started: {self.session_id}")
        return {"success": True}

    def record_checkpoint(self, checkpoint_index: int, time: float) -> Optional[str]:
        """Sign a checkpoint and extend the proof chain. Returns the new proof."""
        if not self.is_active():
            logger.warning("No active leaderboard session")
            return None

        previous = self.proof_chain[-1] if self.proof_chain else ""
        proof = compute_proof(
            self.session_token, self.current_leg_id, checkpoint_index, time, previous
        )

        self.checkpoint_times.append(time)
        self.proof_chain.append(proof)

        logger.debug(f"Checkpoint {checkpoint_index} recorded: {time}ms, proof: {proof[:8]}...")
        return proof

    def submit_run(self, player_name: str) -> dict:
        """Submit the recorded run. Clears the session on success."""
        if not self.is_active():
            return {"success": False, "error": "No active session"}

        if len(self.checkpoint_times) != CHECKPOINT_COUNT or len(self.proof_chain) != CHECKPOINT_COUNT:
            logger.error(f"Incomplete run: {len(self.checkpoint_times)} checkpoints")
            return {"success": False, "error": "Incomplete run"}

        if not player_name or len(player_name.upper()) != PLAYER_NAME_LENGTH:
            return {
                "success": False,
                "error": f"Player name must be exactly {PLAYER_NAME_LENGTH} characters",
            }

        try:
            resp = self.http.post(
                f"{self.api_url}/runs/submit",
                json={
                    "sessionId": self.session_id,
                    "playerName": player_name.upper(),
                    "checkpointTimes": self.checkpoint_times,
                    "proofChain": self.proof_chain,
                },
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to submit run: {e}")
            return {"success": False, "error": str(e)}

        if resp.status_code != 200:
            _, message = _error_message(resp)
            logger.error(f"Failed to submit run: {message}")
            return {"success": False, "error": message}

        data = resp.json()
        logger.info(f"Run submitted successfully! Rank: {data['rank']}, Flagged: {data['flagged']}")
        self._reset()

        return {
            "success": True,
            "rank": data["rank"],
            "flagged": data["flagged"],
            "entryId": data["entryId"],
        }

    def fetch_leaderboard(self, leg_id: str, limit: int = 10) -> dict:
        """Fetch the top entries for a leg."""
        try:
            resp = self.http.get(
                f"{self.api_url}/leaderboard/{leg_id}",
                params={"limit": limit},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to fetch leaderboard: {e}")
            return {"success": False, "error": str(e)}

        if resp.status_code != 200:
            _, message = _error_message(resp)
            return {"success": False, "error": message}

        return {"success": True, "entries": resp.json()["entries"]}

    def is_active(self) -> bool:
        """Whether a session is currently held."""
        return self.session_id is not None and self.session_token is not None

    def cancel_session(self) -> None:
        """Drop the current session without submitting."""
        self._reset()
        logger.info("Leaderboard session cancelled")

    def _reset(self) -> None:
        self.session_id = None
        self.session_token = None
        self.current_leg_id = None
        self.checkpoint_times = []
        self.proof_chain = []
