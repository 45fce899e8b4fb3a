"""
Run validation and leaderboard services.
"""
