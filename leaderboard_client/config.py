"""Configuration constants for the leaderboard client."""

# Server configuration
SERVER_HOST = "localhost"
SERVER_PORT = 8000
API_URL = f"http://{SERVER_HOST}:{SERVER_PORT}/api"

# Network
REQUEST_TIMEOUT_SECONDS = 10.0

# Runs
CHECKPOINT_COUNT = 10
PLAYER_NAME_LENGTH = 4
