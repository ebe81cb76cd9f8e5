"""HTTP blueprints: document service and team leaderboard."""
