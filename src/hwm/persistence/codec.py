"""Plain-structure encoding for saves.

Every encoder returns only dict/list/str/int/float/bool/None so the result can
go straight to ``json.dumps``. Keys follow the established camelCase save
layout; decoders accept older documents that lack newer keys.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from hwm.basketball.affinity import all_affinities
from hwm.basketball.models import BoxScore, PlayerGameStats
from hwm.basketball.stats import PlayerSeasonStats, StatsMap
from hwm.contracts import Position
from hwm.league.entities import CoachProfile, DepthChartEntry, Player, RotationConfig, Team
from hwm.league.games import Game, Season

Document = dict[str, Any]

_PLAYER_RATING_KEYS: dict[str, str] = {
    "shooting": "shooting",
    "defense": "defense",
    "speed": "speed",
    "stamina": "stamina",
    "passing": "passing",
    "rebounding": "rebounding",
    "ball_handling": "ballHandling",
    "three_point": "threePoint",
    "blocks": "blocks",
    "steals": "steals",
    "post_shooting": "postShooting",
}

_GAME_STAT_KEYS: dict[str, str] = {
    "points": "points",
    "rebounds": "rebounds",
    "assists": "assists",
    "field_goals_made": "fieldGoalsMade",
    "field_goals_attempted": "fieldGoalsAttempted",
    "three_pointers_made": "threePointersMade",
    "three_pointers_attempted": "threePointersAttempted",
    "turnovers": "turnovers",
    "steals": "steals",
    "blocks": "blocks",
    "fouls": "fouls",
    "free_throws_made": "freeThrowsMade",
    "free_throws_attempted": "freeThrowsAttempted",
}

_SEASON_STAT_KEYS: dict[str, str] = {
    "total_points": "totalPoints",
    "total_rebounds": "totalRebounds",
    "total_assists": "totalAssists",
    "total_field_goals_made": "totalFieldGoalsMade",
    "total_field_goals_attempted": "totalFieldGoalsAttempted",
    "total_three_pointers_made": "totalThreePointersMade",
    "total_three_pointers_attempted": "totalThreePointersAttempted",
    "total_turnovers": "totalTurnovers",
    "total_steals": "totalSteals",
    "total_blocks": "totalBlocks",
    "total_fouls": "totalFouls",
    "total_free_throws_made": "totalFreeThrowsMade",
    "total_free_throws_attempted": "totalFreeThrowsAttempted",
}


def player_to_dict(player: Player) -> Document:
    doc: Document = {"id": player.player_id, "name": player.name, "heightInches": player.height_inches}
    for attr, key in _PLAYER_RATING_KEYS.items():
        doc[key] = getattr(player, attr)
    doc["position"] = player.position.value
    doc["roleArchetypeId"] = player.role_archetype_id
    return doc


def player_from_dict(doc: Mapping[str, Any]) -> Player:
    ratings = {attr: int(doc.get(key, 50)) for attr, key in _PLAYER_RATING_KEYS.items()}
    position = doc.get("position")
    player = Player(
        player_id=str(doc["id"]),
        name=str(doc["name"]),
        height_inches=int(doc["heightInches"]),
        position=Position(position) if position else Position.SF,
        role_archetype_id=doc.get("roleArchetypeId") or None,
        **ratings,
    )
    if not position:
        # Saves from before positions existed: seat the player where they fit best.
        scores = all_affinities(player)
        player = player.with_position(max(scores, key=lambda p: scores[p]))
    return player


def depth_entry_to_dict(entry: DepthChartEntry) -> Document:
    return {"playerId": entry.player_id, "position": entry.position.value, "depth": entry.depth}


def depth_entry_from_dict(doc: Mapping[str, Any]) -> DepthChartEntry:
    return DepthChartEntry(player_id=str(doc["playerId"]), position=Position(doc["position"]), depth=int(doc["depth"]))


def rotation_to_dict(config: RotationConfig) -> Document:
    return {
        "rotationSize": config.rotation_size,
        "playerMinutes": dict(config.player_minutes),
        "depthChart": [depth_entry_to_dict(e) for e in config.depth_chart],
    }


def rotation_from_dict(doc: Mapping[str, Any]) -> RotationConfig:
    return RotationConfig(
        rotation_size=int(doc["rotationSize"]),
        player_minutes={str(k): int(v) for k, v in dict(doc.get("playerMinutes") or {}).items()},
        depth_chart=tuple(depth_entry_from_dict(e) for e in doc.get("depthChart") or []),
    )


def coach_to_dict(coach: CoachProfile) -> Document:
    return {
        "id": coach.coach_id,
        "name": coach.name,
        "primarySpecialization": coach.primary_specialization.value,
        "secondarySpecialization": coach.secondary_specialization.value if coach.secondary_specialization else None,
        "attributes": dict(coach.attributes),
        "experienceLevel": coach.experience_level,
    }


def coach_from_dict(doc: Mapping[str, Any]) -> CoachProfile:
    return CoachProfile(
        coach_id=str(doc["id"]),
        name=str(doc["name"]),
        primary_specialization=doc["primarySpecialization"],
        secondary_specialization=doc.get("secondarySpecialization") or None,
        attributes={str(k): int(v) for k, v in dict(doc.get("attributes") or {}).items()},
        experience_level=int(doc.get("experienceLevel", 1)),
    )


def team_to_dict(team: Team) -> Document:
    doc: Document = {
        "id": team.team_id,
        "name": team.name,
        "city": team.city,
        "players": [player_to_dict(p) for p in team.players],
        "startingLineupIds": list(team.starting_lineup_ids),
    }
    if team.rotation_config is not None:
        doc["rotationConfig"] = rotation_to_dict(team.rotation_config)
    if team.coach is not None:
        doc["coach"] = coach_to_dict(team.coach)
    return doc


def team_from_dict(doc: Mapping[str, Any]) -> Team:
    rotation = doc.get("rotationConfig")
    coach = doc.get("coach")
    return Team(
        team_id=str(doc["id"]),
        city=str(doc.get("city", "")),
        name=str(doc["name"]),
        players=tuple(player_from_dict(p) for p in doc.get("players") or []),
        starting_lineup_ids=tuple(str(pid) for pid in doc.get("startingLineupIds") or []),
        rotation_config=rotation_from_dict(rotation) if rotation else None,
        coach=coach_from_dict(coach) if coach else None,
    )


def game_stats_to_dict(line: PlayerGameStats) -> Document:
    doc: Document = {"playerId": line.player_id}
    for attr, key in _GAME_STAT_KEYS.items():
        doc[key] = getattr(line, attr)
    doc["minutesPlayed"] = line.minutes_played
    return doc


def game_stats_from_dict(doc: Mapping[str, Any]) -> PlayerGameStats:
    counts = {attr: int(doc.get(key) or 0) for attr, key in _GAME_STAT_KEYS.items()}
    return PlayerGameStats(
        player_id=str(doc["playerId"]),
        minutes_played=float(doc.get("minutesPlayed") or 0.0),
        **counts,
    )


def box_score_to_dict(box_score: BoxScore) -> Document:
    return {pid: game_stats_to_dict(line) for pid, line in box_score.items()}


def box_score_from_dict(doc: Mapping[str, Any]) -> BoxScore:
    return {str(pid): game_stats_from_dict(line) for pid, line in doc.items()}


def _parse_date(value: str) -> date:
    # Older saves stored full ISO timestamps.
    return date.fromisoformat(str(value)[:10])


def game_to_dict(game: Game) -> Document:
    return {
        "id": game.game_id,
        "homeTeamId": game.home_team_id,
        "awayTeamId": game.away_team_id,
        "homeScore": game.home_score,
        "awayScore": game.away_score,
        "isPlayed": game.is_played,
        "scheduledDate": game.scheduled_date.isoformat(),
        "boxScore": box_score_to_dict(game.box_score) if game.box_score is not None else None,
        "isPlayoffGame": game.is_playoff_game,
        "seriesId": game.series_id,
    }


def game_from_dict(doc: Mapping[str, Any]) -> Game:
    box = doc.get("boxScore")
    home_score = doc.get("homeScore")
    away_score = doc.get("awayScore")
    return Game(
        game_id=str(doc["id"]),
        home_team_id=str(doc["homeTeamId"]),
        away_team_id=str(doc["awayTeamId"]),
        scheduled_date=_parse_date(doc["scheduledDate"]),
        home_score=int(home_score) if home_score is not None else None,
        away_score=int(away_score) if away_score is not None else None,
        is_played=bool(doc.get("isPlayed", False)),
        box_score=box_score_from_dict(box) if box is not None else None,
        is_playoff_game=bool(doc.get("isPlayoffGame", False)),
        series_id=doc.get("seriesId"),
    )


def player_season_stats_to_dict(stats: PlayerSeasonStats) -> Document:
    doc: Document = {"playerId": stats.player_id, "gamesPlayed": stats.games_played}
    for attr, key in _SEASON_STAT_KEYS.items():
        doc[key] = getattr(stats, attr)
    doc["totalMinutes"] = stats.total_minutes
    return doc


def player_season_stats_from_dict(doc: Mapping[str, Any]) -> PlayerSeasonStats:
    totals = {attr: int(doc.get(key) or 0) for attr, key in _SEASON_STAT_KEYS.items()}
    return PlayerSeasonStats(
        player_id=str(doc["playerId"]),
        games_played=int(doc.get("gamesPlayed") or 0),
        total_minutes=float(doc.get("totalMinutes") or 0.0),
        **totals,
    )


def season_stats_to_dict(stats: StatsMap | None) -> Document | None:
    if stats is None:
        return None
    return {pid: player_season_stats_to_dict(s) for pid, s in stats.items()}


def season_stats_from_dict(doc: Mapping[str, Any] | None) -> StatsMap | None:
    if doc is None:
        return None
    return {str(pid): player_season_stats_from_dict(s) for pid, s in doc.items()}


# Playoff totals share the season layout; kept as named pairs for call sites.
playoff_stats_to_dict = season_stats_to_dict
playoff_stats_from_dict = season_stats_from_dict


def season_to_dict(season: Season) -> Document:
    return {
        "id": season.season_id,
        "year": season.year,
        "games": [game_to_dict(g) for g in season.games],
        "userTeamId": season.user_team_id,
        "seasonStats": season_stats_to_dict(season.season_stats),
        "playoffStats": playoff_stats_to_dict(season.playoff_stats),
    }


def season_from_dict(doc: Mapping[str, Any]) -> Season:
    return Season(
        season_id=str(doc["id"]),
        year=int(doc["year"]),
        games=tuple(game_from_dict(g) for g in doc.get("games") or []),
        user_team_id=str(doc["userTeamId"]),
        season_stats=season_stats_from_dict(doc.get("seasonStats")),
        playoff_stats=playoff_stats_from_dict(doc.get("playoffStats")),
    )
