from __future__ import annotations

from dataclasses import dataclass, field, replace

from hwm.contracts import CoachingSpecialization, Position

RATING_FIELDS: tuple[str, ...] = (
    "shooting",
    "defense",
    "speed",
    "stamina",
    "passing",
    "rebounding",
    "ball_handling",
    "three_point",
    "blocks",
    "steals",
    "post_shooting",
)
RATING_MIN = 0
RATING_MAX = 100
ROSTER_SIZE = 15
LINEUP_SIZE = 5
MINUTES_PER_POSITION = 48
ROTATION_MIN_SIZE = 6
ROTATION_MAX_SIZE = 10


def clamp_rating(value: float) -> int:
    return int(max(RATING_MIN, min(RATING_MAX, round(value))))


@dataclass(frozen=True, slots=True)
class Player:
    player_id: str
    name: str
    height_inches: int
    position: Position
    shooting: int = 50
    defense: int = 50
    speed: int = 50
    stamina: int = 50
    passing: int = 50
    rebounding: int = 50
    ball_handling: int = 50
    three_point: int = 50
    blocks: int = 50
    steals: int = 50
    post_shooting: int = 50
    role_archetype_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", Position(self.position))
        for name in RATING_FIELDS:
            object.__setattr__(self, name, clamp_rating(getattr(self, name)))

    def rating(self, name: str) -> int:
        if name not in RATING_FIELDS:
            raise KeyError(f"unknown rating '{name}'")
        return getattr(self, name)

    @property
    def ratings(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RATING_FIELDS}

    @property
    def overall_rating(self) -> int:
        return round(sum(self.ratings.values()) / len(RATING_FIELDS))

    @property
    def height_formatted(self) -> str:
        return f"{self.height_inches // 12}'{self.height_inches % 12}\""

    def with_role(self, role_archetype_id: str | None) -> Player:
        from hwm.basketball.roles import resolve_role

        archetype = resolve_role(role_archetype_id).archetype
        if archetype is not None and archetype.position != self.position:
            raise ValueError(
                f"role '{role_archetype_id}' belongs to {archetype.position.value}, "
                f"player {self.player_id} plays {self.position.value}"
            )
        return replace(self, role_archetype_id=role_archetype_id)

    def with_position(self, position: Position) -> Player:
        from hwm.basketball.roles import resolve_role

        position = Position(position)
        role_id = self.role_archetype_id
        resolution = resolve_role(role_id)
        if resolution.archetype is not None and resolution.archetype.position != position:
            role_id = None
        return replace(self, position=position, role_archetype_id=role_id)

    def with_ratings(self, **ratings: int) -> Player:
        unknown = set(ratings) - set(RATING_FIELDS)
        if unknown:
            raise KeyError(f"unknown ratings {sorted(unknown)}")
        return replace(self, **ratings)


@dataclass(frozen=True, slots=True)
class DepthChartEntry:
    player_id: str
    position: Position
    depth: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", Position(self.position))
        if self.depth < 1:
            raise ValueError(f"depth must be at least 1, got {self.depth}")


@dataclass(frozen=True, slots=True)
class RotationConfig:
    rotation_size: int
    player_minutes: dict[str, int]
    depth_chart: tuple[DepthChartEntry, ...]

    def players_for_position(self, position: Position) -> list[str]:
        ordered = sorted((e for e in self.depth_chart if e.position == position), key=lambda e: e.depth)
        return [e.player_id for e in ordered]

    def minutes_for_position(self, position: Position) -> int:
        return sum(self.player_minutes.get(pid, 0) for pid in self.players_for_position(position))

    def active_player_ids(self) -> list[str]:
        return [pid for pid, minutes in self.player_minutes.items() if minutes > 0]

    def starter_ids(self) -> list[str]:
        return [e.player_id for e in self.depth_chart if e.depth == 1]

    @property
    def total_minutes(self) -> int:
        return sum(self.player_minutes.values())

    def validation_errors(self) -> list[str]:
        errors: list[str] = []
        if not ROTATION_MIN_SIZE <= self.rotation_size <= ROTATION_MAX_SIZE:
            errors.append(
                f"rotation size must be between {ROTATION_MIN_SIZE} and {ROTATION_MAX_SIZE}, got {self.rotation_size}"
            )
        for position in Position:
            if not self.players_for_position(position):
                errors.append(f"position {position.value} must have at least one player assigned")
                continue
            total = self.minutes_for_position(position)
            if total != MINUTES_PER_POSITION:
                errors.append(
                    f"position {position.value} has {total} minutes allocated, must equal {MINUTES_PER_POSITION}"
                )
            starters = [e for e in self.depth_chart if e.position == position and e.depth == 1]
            if len(starters) != 1:
                errors.append(f"position {position.value} must have exactly one depth-1 starter, got {len(starters)}")
        seen: dict[str, Position] = {}
        for entry in self.depth_chart:
            if seen.get(entry.player_id) == entry.position:
                errors.append(f"player {entry.player_id} appears more than once in the {entry.position.value} depth chart")
            elif entry.player_id in seen:
                errors.append(
                    f"player {entry.player_id} is assigned to multiple positions: "
                    f"{seen[entry.player_id].value}, {entry.position.value}"
                )
            seen.setdefault(entry.player_id, entry.position)
        active = len(self.active_player_ids())
        if active != self.rotation_size:
            errors.append(f"rotation size is {self.rotation_size} but {active} players have non-zero minutes")
        for player_id, minutes in self.player_minutes.items():
            if minutes < 0 or minutes > MINUTES_PER_POSITION:
                errors.append(f"player {player_id} has invalid minutes: {minutes} (must be 0-{MINUTES_PER_POSITION})")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()


@dataclass(frozen=True, slots=True)
class CoachProfile:
    coach_id: str
    name: str
    primary_specialization: CoachingSpecialization
    secondary_specialization: CoachingSpecialization | None = None
    attributes: dict[str, int] = field(default_factory=dict)
    experience_level: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary_specialization", CoachingSpecialization(self.primary_specialization))
        if self.secondary_specialization is not None:
            object.__setattr__(
                self, "secondary_specialization", CoachingSpecialization(self.secondary_specialization)
            )
        if self.experience_level < 1:
            raise ValueError("experience_level must be at least 1")

    def attribute(self, name: str) -> int:
        return int(self.attributes.get(name, 50))


@dataclass(frozen=True, slots=True)
class Team:
    team_id: str
    city: str
    name: str
    players: tuple[Player, ...]
    starting_lineup_ids: tuple[str, ...]
    rotation_config: RotationConfig | None = None
    coach: CoachProfile | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "players", tuple(self.players))
        object.__setattr__(self, "starting_lineup_ids", tuple(self.starting_lineup_ids))

    @property
    def display_name(self) -> str:
        return f"{self.city} {self.name}"

    def player(self, player_id: str) -> Player:
        for p in self.players:
            if p.player_id == player_id:
                return p
        raise KeyError(f"team {self.team_id} has no player '{player_id}'")

    def player_ids(self) -> set[str]:
        return {p.player_id for p in self.players}

    @property
    def starting_lineup(self) -> list[Player]:
        if self.rotation_config is not None:
            starter_ids = set(self.rotation_config.starter_ids())
        else:
            starter_ids = set(self.starting_lineup_ids)
        return [p for p in self.players if p.player_id in starter_ids]

    @property
    def bench(self) -> list[Player]:
        starters = {p.player_id for p in self.starting_lineup}
        return [p for p in self.players if p.player_id not in starters]

    @property
    def team_rating(self) -> int:
        lineup = self.starting_lineup
        if not lineup:
            return 0
        return round(sum(p.overall_rating for p in lineup) / len(lineup))

    def with_player(self, player: Player) -> Team:
        if player.player_id not in self.player_ids():
            raise KeyError(f"team {self.team_id} has no player '{player.player_id}'")
        players = tuple(player if p.player_id == player.player_id else p for p in self.players)
        return replace(self, players=players)

    def with_rotation(self, rotation_config: RotationConfig | None) -> Team:
        return replace(self, rotation_config=rotation_config)

    def with_starting_lineup(self, player_ids: list[str]) -> Team:
        return replace(self, starting_lineup_ids=tuple(player_ids))

    def with_coach(self, coach: CoachProfile | None) -> Team:
        return replace(self, coach=coach)
