from __future__ import annotations

from datetime import date, timedelta

from hwm.basketball.roles import best_fit
from hwm.contracts import CoachingSpecialization, Position
from hwm.core import seeded_random
from hwm.league.entities import RATING_FIELDS, CoachProfile, DepthChartEntry, Player, RotationConfig, Team
from hwm.league.games import Game, Season

# Rating emphasis per position; every other rating draws from the neutral band.
_POSITION_PROFILE: dict[Position, dict[str, int]] = {
    Position.PG: {"passing": 18, "ball_handling": 18, "speed": 12, "three_point": 6, "rebounding": -10, "blocks": -15},
    Position.SG: {"shooting": 14, "three_point": 16, "speed": 8, "blocks": -12},
    Position.SF: {"shooting": 6, "defense": 8, "speed": 6, "steals": 6},
    Position.PF: {"rebounding": 14, "post_shooting": 10, "defense": 6, "three_point": -8, "ball_handling": -8},
    Position.C: {"rebounding": 18, "blocks": 18, "post_shooting": 12, "three_point": -20, "ball_handling": -15, "speed": -10},
}
_HEIGHTS: dict[Position, tuple[int, int]] = {
    Position.PG: (72, 76),
    Position.SG: (75, 78),
    Position.SF: (77, 80),
    Position.PF: (79, 82),
    Position.C: (82, 86),
}
_DEPTH_MINUTES = (34, 14, 0)
_DEMO_TEAMS = [
    ("BOS", "Boston", "Harbormen"),
    ("CHI", "Chicago", "Gales"),
    ("DEN", "Denver", "Summits"),
    ("MIA", "Miami", "Tides"),
    ("POR", "Portland", "Pines"),
    ("SEA", "Seattle", "Sound"),
]


def _demo_player(team_id: str, position: Position, depth: int, seed: int) -> Player:
    rand = seeded_random(seed).spawn(f"player:{team_id}:{position.value}:{depth}")
    base = 72 - depth * 6
    profile = _POSITION_PROFILE[position]
    ratings = {name: base + profile.get(name, 0) + rand.randint(-6, 6) for name in RATING_FIELDS}
    low, high = _HEIGHTS[position]
    player = Player(
        player_id=f"{team_id}_{position.value}{depth}",
        name=f"{team_id} {position.value} #{depth}",
        height_inches=rand.randint(low, high),
        position=position,
        **ratings,
    )
    archetype = best_fit(player)
    return player.with_role(archetype.archetype_id.value if archetype and depth == 1 else None)


def build_demo_team(
    team_id: str,
    city: str,
    name: str,
    *,
    seed: int = 7,
    with_rotation: bool = True,
    coach: CoachProfile | None = None,
) -> Team:
    """Fifteen players, three per position, depth-ordered by strength."""
    players: list[Player] = []
    depth_chart: list[DepthChartEntry] = []
    minutes: dict[str, int] = {}
    for position in Position:
        for depth in (1, 2, 3):
            player = _demo_player(team_id, position, depth, seed)
            players.append(player)
            depth_chart.append(DepthChartEntry(player.player_id, position, depth))
            minutes[player.player_id] = _DEPTH_MINUTES[depth - 1]
    starters = tuple(e.player_id for e in depth_chart if e.depth == 1)
    rotation = None
    if with_rotation:
        rotation = RotationConfig(
            rotation_size=sum(1 for m in minutes.values() if m > 0),
            player_minutes=minutes,
            depth_chart=tuple(depth_chart),
        )
    return Team(
        team_id=team_id,
        city=city,
        name=name,
        players=tuple(players),
        starting_lineup_ids=starters,
        rotation_config=rotation,
        coach=coach,
    )


def build_demo_league(team_count: int = 4, seed: int = 7) -> list[Team]:
    if not 2 <= team_count <= len(_DEMO_TEAMS):
        raise ValueError(f"team_count must be between 2 and {len(_DEMO_TEAMS)}")
    teams = []
    for idx, (team_id, city, name) in enumerate(_DEMO_TEAMS[:team_count]):
        specialization = list(CoachingSpecialization)[idx % len(CoachingSpecialization)]
        coach = CoachProfile(
            coach_id=f"{team_id}_HC",
            name=f"{city} Head Coach",
            primary_specialization=specialization,
            attributes={"offensive": 60 + idx * 3, "defensive": 58 + idx * 2, "development": 55, "chemistry": 62},
            experience_level=1 + idx % 3,
        )
        teams.append(build_demo_team(team_id, city, name, seed=seed + idx, coach=coach))
    return teams


def build_demo_season(
    teams: list[Team],
    *,
    year: int = 2026,
    rounds: int = 1,
    user_team_id: str | None = None,
    start: date | None = None,
) -> Season:
    """Home-and-away round robin, one fixture day per pairing."""
    day = start or date(year, 10, 20)
    games: list[Game] = []
    number = 0
    for round_index in range(rounds):
        for i, home in enumerate(teams):
            for j, away in enumerate(teams):
                if i == j:
                    continue
                number += 1
                games.append(
                    Game(
                        game_id=f"{year}_R{round_index + 1}_G{number:03d}",
                        home_team_id=home.team_id,
                        away_team_id=away.team_id,
                        scheduled_date=day,
                    )
                )
                day += timedelta(days=1)
    return Season(
        season_id=f"season_{year}",
        year=year,
        games=tuple(games),
        user_team_id=user_team_id or teams[0].team_id,
    )
