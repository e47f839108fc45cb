from .entities import (
    LINEUP_SIZE,
    RATING_FIELDS,
    ROSTER_SIZE,
    CoachProfile,
    DepthChartEntry,
    Player,
    RotationConfig,
    Team,
)
from .games import Game, Season
from .bootstrap import build_demo_league, build_demo_season, build_demo_team

__all__ = [
    "CoachProfile",
    "DepthChartEntry",
    "Game",
    "LINEUP_SIZE",
    "Player",
    "RATING_FIELDS",
    "ROSTER_SIZE",
    "RotationConfig",
    "Season",
    "Team",
    "build_demo_league",
    "build_demo_season",
    "build_demo_team",
]
