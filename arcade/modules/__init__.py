"""
Domain modules.

- scores: score recording and best-score reads
- leaderboard: per-game rank engine and daily boards
- profile: public profile aggregation
- shop: avatar purchases and listings
- avatar: avatar inventory and equipping
- challenges: daily challenges, progress from runs and reward claims
"""
