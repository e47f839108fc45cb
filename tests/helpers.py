from __future__ import annotations

from hwm.contracts import Position
from hwm.league import DepthChartEntry, Player, RotationConfig, Team

HEIGHTS = {Position.PG: 74, Position.SG: 77, Position.SF: 79, Position.PF: 81, Position.C: 84}
DEPTH_MINUTES = (34, 14, 0)


def make_player(player_id: str, position: Position = Position.SF, rating: int = 60, **ratings: int) -> Player:
    base = {
        "shooting": rating,
        "defense": rating,
        "speed": rating,
        "stamina": rating,
        "passing": rating,
        "rebounding": rating,
        "ball_handling": rating,
        "three_point": rating,
        "blocks": rating,
        "steals": rating,
        "post_shooting": rating,
    }
    role = ratings.pop("role_archetype_id", None)
    base.update(ratings)
    return Player(
        player_id=player_id,
        name=f"Player {player_id}",
        height_inches=HEIGHTS[Position(position)],
        position=position,
        role_archetype_id=role,
        **base,
    )


def make_team(team_id: str, rating: int = 60, *, with_rotation: bool = True) -> Team:
    """Fifteen identical-rated players, three per position; starters are the depth-1 rows."""
    players: list[Player] = []
    depth_chart: list[DepthChartEntry] = []
    minutes: dict[str, int] = {}
    for position in Position:
        for depth in (1, 2, 3):
            pid = f"{team_id}_{position.value}{depth}"
            players.append(make_player(pid, position, rating))
            depth_chart.append(DepthChartEntry(pid, position, depth))
            minutes[pid] = DEPTH_MINUTES[depth - 1]
    rotation = RotationConfig(rotation_size=10, player_minutes=minutes, depth_chart=tuple(depth_chart)) if with_rotation else None
    return Team(
        team_id=team_id,
        city=f"{team_id} City",
        name=f"{team_id}s",
        players=tuple(players),
        starting_lineup_ids=tuple(e.player_id for e in depth_chart if e.depth == 1),
        rotation_config=rotation,
    )


def with_starter(team: Team, position: Position, **ratings) -> tuple[Team, str]:
    """Replace the depth-1 player at ``position``; returns the new team and that player's id."""
    pid = f"{team.team_id}_{Position(position).value}1"
    role = ratings.pop("role_archetype_id", None)
    player = team.player(pid).with_ratings(**ratings).with_role(role)
    return team.with_player(player), pid


def lineup(team: Team) -> list[Player]:
    return [p for p in team.players if p.player_id.endswith("1")]


def team_points(game, team: Team) -> int:
    ids = team.player_ids()
    return sum(line.points for pid, line in game.box_score.items() if pid in ids)
