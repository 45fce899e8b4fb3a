"""
Leaderboard Backend: verified run submission and per-leg leaderboards.
"""
