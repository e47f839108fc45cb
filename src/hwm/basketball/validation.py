from __future__ import annotations

from hwm.contracts import ValidationError, ValidationIssue, ValidationResult
from hwm.league.entities import LINEUP_SIZE, ROSTER_SIZE, Team


def _blocking(code: str, field_path: str, entity_id: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        code=code,
        severity="blocking",
        field_path=field_path,
        entity_id=entity_id,
        message=message,
    )


class LineupValidator:
    """Pre-simulation gate for team snapshots handed to the orchestrator."""

    def __init__(self, roster_size: int = ROSTER_SIZE, lineup_size: int = LINEUP_SIZE) -> None:
        self._roster_size = roster_size
        self._lineup_size = lineup_size

    def validate_team(self, team: Team) -> ValidationResult:
        return self._finalize(self._team_issues(team))

    def validate_matchup(self, home: Team, away: Team) -> ValidationResult:
        issues = self._team_issues(home) + self._team_issues(away)
        if home.team_id == away.team_id:
            issues.append(
                _blocking("SAME_TEAM_MATCHUP", "team_id", home.team_id, "a team cannot play itself")
            )
        shared = home.player_ids() & away.player_ids()
        for player_id in sorted(shared):
            issues.append(
                _blocking(
                    "PLAYER_ON_BOTH_TEAMS",
                    "players",
                    player_id,
                    f"player appears on both {home.team_id} and {away.team_id}",
                )
            )
        return self._finalize(issues)

    def _finalize(self, issues: list[ValidationIssue]) -> ValidationResult:
        ordered = sorted(issues, key=lambda x: (x.severity, x.code, x.entity_id, x.field_path))
        blocking = [i for i in ordered if i.severity == "blocking"]
        if blocking:
            raise ValidationError(blocking)
        return ValidationResult(ok=True, issues=ordered)

    def _team_issues(self, team: Team) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        roster_ids = [p.player_id for p in team.players]
        if len(roster_ids) != self._roster_size:
            issues.append(
                _blocking(
                    "ROSTER_SIZE",
                    "players",
                    team.team_id,
                    f"roster has {len(roster_ids)} players, expected {self._roster_size}",
                )
            )
        if len(set(roster_ids)) != len(roster_ids):
            issues.append(_blocking("DUPLICATE_ROSTER_PLAYER", "players", team.team_id, "roster repeats a player id"))

        lineup = list(team.starting_lineup_ids)
        if len(lineup) != self._lineup_size:
            issues.append(
                _blocking(
                    "LINEUP_SIZE",
                    "starting_lineup_ids",
                    team.team_id,
                    f"starting lineup has {len(lineup)} players, expected {self._lineup_size}",
                )
            )
        if len(set(lineup)) != len(lineup):
            issues.append(
                _blocking("DUPLICATE_LINEUP_PLAYER", "starting_lineup_ids", team.team_id, "lineup repeats a player id")
            )
        for player_id in lineup:
            if player_id not in roster_ids:
                issues.append(
                    _blocking(
                        "LINEUP_UNKNOWN_PLAYER",
                        "starting_lineup_ids",
                        team.team_id,
                        f"lineup references unknown player {player_id}",
                    )
                )

        config = team.rotation_config
        if config is not None:
            for message in config.validation_errors():
                issues.append(_blocking("INVALID_ROTATION", "rotation_config", team.team_id, message))
            referenced = set(config.player_minutes) | {e.player_id for e in config.depth_chart}
            for player_id in sorted(referenced - set(roster_ids)):
                issues.append(
                    _blocking(
                        "ROTATION_UNKNOWN_PLAYER",
                        "rotation_config",
                        team.team_id,
                        f"rotation references unknown player {player_id}",
                    )
                )
        return issues
