from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from hwm.basketball.coaching import CoachingBonuses
from hwm.basketball.lineup import (
    QUARTER_MINUTES,
    QUARTERS,
    MinutesPlan,
    lineup_is_complete,
    minutes_plan,
    resolve_on_court,
)
from hwm.basketball.models import BoxScoreBuilder
from hwm.basketball.modifiers import ModifierContext, ModifierPipeline, clamp_band, clamp_probability
from hwm.basketball.resolver import PossessionContext, PossessionResolver
from hwm.basketball.validation import LineupValidator
from hwm.contracts import (
    NarrativeEvent,
    RandomSource,
    SimFidelity,
    StatCategory,
    ValidationError,
    ValidationIssue,
)
from hwm.core import (
    EngineIntegrityError,
    EventBus,
    contract_violation,
    gameplay_random,
    make_id,
    now_utc,
    weighted_choice,
)
from hwm.league.entities import MINUTES_PER_POSITION, Player, Team
from hwm.league.games import Game

logger = logging.getLogger(__name__)

_S = StatCategory


@dataclass(slots=True)
class _Side:
    team: Team
    plan: MinutesPlan
    players: dict[str, Player]
    starters: list[Player]
    modifiers: ModifierContext

    def lineup(self, elapsed_in_quarter: float) -> list[Player]:
        return [self.players[pid] for pid in self.plan.on_court_ids(elapsed_in_quarter)]

    def minute_shares(self) -> dict[str, float]:
        return {pid: minutes / MINUTES_PER_POSITION for pid, minutes in self.plan.regulation_minutes().items()}


@dataclass(slots=True)
class _GameTally:
    overtimes: int = 0
    tiebreak_team_id: str | None = None
    possessions: int = 0


class GameOrchestrator:
    """Simulates complete games and returns played ``Game`` records.

    Detailed fidelity resolves every possession with substitutions from the
    minutes plan. Fast fidelity samples team-level counts and apportions them
    to players by minutes and tendency, skipping possession narratives.
    """

    REGULATION_POSSESSIONS = (190, 210)
    OVERTIME_MINUTES = 5
    OVERTIME_POSSESSIONS = 10
    MAX_OVERTIMES = 3
    FAST_STEAL_SHARE_CAP = 0.9

    def __init__(
        self,
        random_source: RandomSource | None = None,
        *,
        pipeline: ModifierPipeline | None = None,
        validator: LineupValidator | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._random_source = random_source or gameplay_random()
        self._pipeline = pipeline or ModifierPipeline()
        self._validator = validator or LineupValidator()
        self._event_bus = event_bus

    def simulate(
        self,
        home: Team,
        away: Team,
        fidelity: SimFidelity = SimFidelity.DETAILED,
        *,
        game_id: str | None = None,
        scheduled_date: date | None = None,
        is_playoff_game: bool = False,
        series_id: str | None = None,
    ) -> Game:
        game = Game(
            game_id=game_id or make_id("game"),
            home_team_id=home.team_id,
            away_team_id=away.team_id,
            scheduled_date=scheduled_date or now_utc().date(),
            is_playoff_game=is_playoff_game,
            series_id=series_id,
        )
        # Caller-supplied ids get their own stream so a game replays the same regardless of order.
        rand = self._random_source.spawn(f"game:{game_id}") if game_id is not None else self._random_source
        return self._play(game, home, away, SimFidelity(fidelity), rand)

    def simulate_game_record(
        self,
        game: Game,
        home: Team,
        away: Team,
        fidelity: SimFidelity = SimFidelity.DETAILED,
    ) -> Game:
        if game.is_played:
            raise self._contract_fault(
                game.game_id,
                [
                    ValidationIssue(
                        code="GAME_ALREADY_PLAYED",
                        severity="blocking",
                        field_path="is_played",
                        entity_id=game.game_id,
                        message="game stub is already played",
                    )
                ],
                "game_record",
            )
        if game.home_team_id != home.team_id or game.away_team_id != away.team_id:
            raise self._contract_fault(
                game.game_id,
                [
                    ValidationIssue(
                        code="GAME_TEAM_MISMATCH",
                        severity="blocking",
                        field_path="home_team_id/away_team_id",
                        entity_id=game.game_id,
                        message=f"stub expects {game.home_team_id} vs {game.away_team_id}",
                    )
                ],
                "game_record",
            )
        rand = self._random_source.spawn(f"game:{game.game_id}")
        return self._play(game, home, away, SimFidelity(fidelity), rand)

    def _play(self, game: Game, home: Team, away: Team, fidelity: SimFidelity, rand: RandomSource) -> Game:
        try:
            self._validator.validate_matchup(home, away)
        except ValidationError as exc:
            raise self._contract_fault(game.game_id, exc.issues, "matchup_validation") from exc
        home_side = self._side(game.game_id, home)
        away_side = self._side(game.game_id, away)

        builder = BoxScoreBuilder()
        for side in (home_side, away_side):
            for pid, minutes in side.plan.regulation_minutes().items():
                builder.register(pid, side.team.team_id)
                builder.add_minutes(pid, minutes)
            for player in side.starters:
                builder.register(player.player_id, side.team.team_id)

        tally = _GameTally()
        low, high = self.REGULATION_POSSESSIONS
        possessions = rand.randint(low, high)
        tally.possessions = possessions
        if fidelity == SimFidelity.DETAILED:
            self._run_detailed(rand, home_side, away_side, builder, possessions)
        else:
            self._run_fast(rand, home_side, away_side, builder, possessions, overtime=False)

        while (
            builder.team_points(home.team_id) == builder.team_points(away.team_id)
            and tally.overtimes < self.MAX_OVERTIMES
        ):
            tally.overtimes += 1
            tally.possessions += self.OVERTIME_POSSESSIONS
            for side in (home_side, away_side):
                for player in side.starters:
                    builder.add_minutes(player.player_id, self.OVERTIME_MINUTES)
            if fidelity == SimFidelity.DETAILED:
                self._run_overtime_detailed(rand, home_side, away_side, builder)
            else:
                self._run_fast(rand, home_side, away_side, builder, self.OVERTIME_POSSESSIONS, overtime=True)

        if builder.team_points(home.team_id) == builder.team_points(away.team_id):
            tally.tiebreak_team_id = self._decisive_free_throw(rand, home_side, away_side, builder)

        box_score = builder.build()
        home_score = builder.team_points(home.team_id)
        away_score = builder.team_points(away.team_id)
        if home_score == away_score:
            raise self._integrity_fault(game.game_id, "NO_TIE_VIOLATED", "game finished tied")
        played = game.with_result(home_score, away_score, box_score)
        if tally.overtimes:
            logger.debug("game %s needed %d overtime period(s)", game.game_id, tally.overtimes)
        logger.info(
            "game %s final %s %d - %s %d (%s)",
            game.game_id,
            away.team_id,
            away_score,
            home.team_id,
            home_score,
            fidelity.value,
        )
        self._publish(played, fidelity, tally)
        return played

    def _side(self, game_id: str, team: Team) -> _Side:
        starters = resolve_on_court(team)
        if not lineup_is_complete(starters):
            raise self._contract_fault(
                game_id,
                [
                    ValidationIssue(
                        code="INCOMPLETE_LINEUP",
                        severity="blocking",
                        field_path="starting_lineup",
                        entity_id=team.team_id,
                        message=f"resolved {len(starters)} distinct starters, expected 5",
                    )
                ],
                "lineup_resolution",
            )
        plan = minutes_plan(team)
        players = {p.player_id: p for p in team.players}
        return _Side(
            team=team,
            plan=plan,
            players=players,
            starters=starters,
            modifiers=ModifierContext(coaching=CoachingBonuses.from_coach(team.coach)),
        )

    def _context(self, offense: _Side, defense: _Side) -> PossessionContext:
        return PossessionContext(
            offense_team_id=offense.team.team_id,
            defense_team_id=defense.team.team_id,
            offense_modifiers=offense.modifiers,
            defense_modifiers=defense.modifiers,
        )

    def _run_detailed(
        self,
        rand: RandomSource,
        home: _Side,
        away: _Side,
        builder: BoxScoreBuilder,
        possessions: int,
    ) -> None:
        resolver = PossessionResolver(rand, self._pipeline)
        contexts = {True: self._context(home, away), False: self._context(away, home)}
        for index in range(possessions):
            home_ball = index % 2 == 0
            offense, defense = (home, away) if home_ball else (away, home)
            progress = index / possessions * QUARTERS
            elapsed = (progress - int(progress)) * QUARTER_MINUTES
            outcome = resolver.resolve(offense.lineup(elapsed), defense.lineup(elapsed), contexts[home_ball])
            builder.apply(outcome)

    def _run_overtime_detailed(self, rand: RandomSource, home: _Side, away: _Side, builder: BoxScoreBuilder) -> None:
        resolver = PossessionResolver(rand, self._pipeline)
        for index in range(self.OVERTIME_POSSESSIONS):
            offense, defense = (home, away) if index % 2 == 0 else (away, home)
            builder.apply(resolver.resolve(offense.starters, defense.starters, self._context(offense, defense)))

    def _run_fast(
        self,
        rand: RandomSource,
        home: _Side,
        away: _Side,
        builder: BoxScoreBuilder,
        possessions: int,
        *,
        overtime: bool,
    ) -> None:
        home_share = (possessions + 1) // 2
        self._sample_offense(rand, home, away, builder, home_share, overtime)
        self._sample_offense(rand, away, home, builder, possessions - home_share, overtime)

    def _sample_offense(
        self,
        rand: RandomSource,
        offense: _Side,
        defense: _Side,
        builder: BoxScoreBuilder,
        possessions: int,
        overtime: bool,
    ) -> None:
        """Team-level counts first, then per-player apportionment."""
        if possessions <= 0:
            return
        resolver = PossessionResolver(rand, self._pipeline)
        pipeline = self._pipeline
        off_ctx, def_ctx = offense.modifiers, defense.modifiers
        off_shares = self._shares(offense, overtime)
        def_shares = self._shares(defense, overtime)
        off_players = [offense.players[pid] for pid in off_shares]
        def_players = [defense.players[pid] for pid in def_shares]
        off_w = list(off_shares.values())
        def_w = list(def_shares.values())

        handler_w = [
            s * ((p.ball_handling + p.passing) / 2 + 10) * pipeline.factor(p, _S.USAGE, off_ctx)
            for p, s in zip(off_players, off_w)
        ]
        handler_total = sum(handler_w) or 1.0
        turnover_rate = sum(
            w * resolver.turnover_probability(p, off_ctx) for p, w in zip(off_players, handler_w)
        ) / handler_total
        avg_handling = sum(w * p.ball_handling for p, w in zip(off_players, handler_w)) / handler_total
        steal_w = [s * (p.steals + 1) * pipeline.factor(p, _S.STEAL, def_ctx) for p, s in zip(def_players, def_w)]
        def_total = sum(def_w) or 1.0
        avg_steals = sum(s * p.steals for p, s in zip(def_players, def_w)) / def_total
        steal_factor = sum(s * pipeline.factor(p, _S.STEAL, def_ctx) for p, s in zip(def_players, def_w)) / def_total
        steal_rate = clamp_probability(
            clamp_band(
                resolver.STEAL_BASE
                + avg_steals / 100 * resolver.STEAL_DEFENSE_WEIGHT
                - avg_handling / 100 * resolver.STEAL_HANDLING_WEIGHT,
                *resolver.STEAL_BAND,
            )
            * steal_factor
        )
        loss_rate = clamp_probability(turnover_rate + steal_rate)

        turnovers = _binomial(rand, possessions, loss_rate)
        steals = _binomial(rand, turnovers, min(self.FAST_STEAL_SHARE_CAP, steal_rate / loss_rate if loss_rate else 0.0))
        for index in range(turnovers):
            handler = weighted_choice(rand, off_players, handler_w)
            builder.add(handler.player_id, "turnovers")
            if index < steals:
                builder.add(weighted_choice(rand, def_players, steal_w).player_id, "steals")

        shot_w = [s * resolver.shot_weight(p, off_ctx) for p, s in zip(off_players, off_w)]
        foul_w = [s * (p.defense + 1) for p, s in zip(def_players, def_w)]
        block_w = [s * (p.blocks + 1) * pipeline.factor(p, _S.BLOCK, def_ctx) for p, s in zip(def_players, def_w)]
        rebound_off_w = [s * (p.rebounding + 1) * pipeline.factor(p, _S.REBOUND, off_ctx) for p, s in zip(off_players, off_w)]
        rebound_def_w = [s * (p.rebounding + 1) * pipeline.factor(p, _S.REBOUND, def_ctx) for p, s in zip(def_players, def_w)]
        avg_def_defense = sum(s * p.defense for p, s in zip(def_players, def_w)) / def_total
        avg_def_blocks = sum(s * p.blocks for p, s in zip(def_players, def_w)) / def_total
        foul_rate = clamp_band(
            resolver.FOUL_BASE + avg_def_defense / 100 * resolver.FOUL_DEFENSE_WEIGHT, *resolver.FOUL_BAND
        )
        block_factor = sum(w * pipeline.factor(p, _S.BLOCK, def_ctx) for p, w in zip(def_players, def_w)) / def_total
        block_rate = clamp_band(
            resolver.BLOCK_BASE + avg_def_blocks / 100 * resolver.BLOCK_RATING_WEIGHT, *resolver.BLOCK_BAND
        )
        defense_five = defense.starters
        oreb_rate = resolver.offensive_rebound_probability(offense.starters, defense_five)
        context = self._context(offense, defense)

        attempts = possessions - turnovers
        fouls = _binomial(rand, attempts, foul_rate)
        for index in range(attempts):
            shooter = weighted_choice(rand, off_players, shot_w)
            is_three = rand.rand() < resolver.three_point_attempt_probability(shooter, off_ctx)
            if index < fouls:
                builder.add(weighted_choice(rand, def_players, foul_w).player_id, "fouls")
                shots = 3 if is_three else 2
                ft_p = resolver.free_throw_probability(shooter)
                made = sum(1 for _ in range(shots) if rand.rand() < ft_p)
                builder.add(shooter.player_id, "free_throws_attempted", shots)
                builder.add(shooter.player_id, "free_throws_made", made)
                builder.add(shooter.player_id, "points", made)
                continue
            builder.add(shooter.player_id, "field_goals_attempted")
            if is_three:
                builder.add(shooter.player_id, "three_pointers_attempted")
            block_p = clamp_probability(
                block_rate * block_factor * (resolver.THREE_POINT_BLOCK_DISCOUNT if is_three else 1.0)
            )
            if rand.rand() < block_p:
                builder.add(weighted_choice(rand, def_players, block_w).player_id, "blocks")
                made_shot = False
            else:
                made_shot = rand.rand() < resolver.make_probability(shooter, is_three, defense_five, context)
            if made_shot:
                points = 3 if is_three else 2
                builder.add(shooter.player_id, "field_goals_made")
                builder.add(shooter.player_id, "points", points)
                if is_three:
                    builder.add(shooter.player_id, "three_pointers_made")
                self._fast_assist(rand, resolver, off_players, off_w, shooter, off_ctx, builder)
            else:
                if rand.rand() < oreb_rate:
                    rebounder = weighted_choice(rand, off_players, rebound_off_w)
                else:
                    rebounder = weighted_choice(rand, def_players, rebound_def_w)
                builder.add(rebounder.player_id, "rebounds")

    def _fast_assist(
        self,
        rand: RandomSource,
        resolver: PossessionResolver,
        players: list[Player],
        shares: list[float],
        shooter: Player,
        modifiers: ModifierContext,
        builder: BoxScoreBuilder,
    ) -> None:
        candidates = [(p, s) for p, s in zip(players, shares) if p.player_id != shooter.player_id]
        if not candidates:
            return
        weights = [s * (p.passing + 1) * self._pipeline.factor(p, _S.ASSIST, modifiers) for p, s in candidates]
        passer = weighted_choice(rand, [p for p, _ in candidates], weights)
        # Mirrors the detailed split between passes and self-created shots.
        pass_p = resolver.assist_base(passer)
        assist_p = self._pipeline.apply(resolver.assist_base(passer), passer, _S.ASSIST, modifiers)
        if rand.rand() < pass_p * assist_p:
            builder.add(passer.player_id, "assists")

    def _shares(self, side: _Side, overtime: bool) -> dict[str, float]:
        if overtime:
            return {p.player_id: 1.0 for p in side.starters}
        return side.minute_shares()

    def _decisive_free_throw(self, rand: RandomSource, home: _Side, away: _Side, builder: BoxScoreBuilder) -> str:
        """Bounded tiebreak after the last overtime: one made free throw for a random side."""
        side = rand.choice([home, away])
        shooter = max(side.starters, key=lambda p: (p.shooting, p.player_id))
        builder.add(shooter.player_id, "free_throws_attempted")
        builder.add(shooter.player_id, "free_throws_made")
        builder.add(shooter.player_id, "points")
        logger.info("tiebreak free throw awarded to %s (%s)", side.team.team_id, shooter.player_id)
        return side.team.team_id

    def _publish(self, game: Game, fidelity: SimFidelity, tally: _GameTally) -> None:
        if self._event_bus is None:
            return
        claims = [
            f"final:{game.away_team_id}={game.away_score},{game.home_team_id}={game.home_score}",
            f"winner:{game.winner_team_id}",
            f"fidelity:{fidelity.value}",
            f"possessions:{tally.possessions}",
        ]
        if tally.overtimes:
            claims.append(f"overtimes:{tally.overtimes}")
        if tally.tiebreak_team_id is not None:
            claims.append(f"tiebreak:{tally.tiebreak_team_id}")
        self._event_bus.publish_narrative(
            NarrativeEvent(
                event_id=make_id("evt"),
                time=now_utc(),
                scope="game",
                event_type="playoff_game_final" if game.is_playoff_game else "game_final",
                actors=[game.home_team_id, game.away_team_id],
                claims=claims,
                evidence_handles=[f"game:{game.game_id}"],
                severity="info",
            )
        )

    def _contract_fault(self, game_id: str, issues: list[ValidationIssue], phase: str) -> EngineIntegrityError:
        return contract_violation(
            engine_scope="basketball_session",
            error_code="PRE_SIM_VALIDATION_FAILED",
            message=f"{phase} failed: " + "; ".join(f"{i.code}:{i.entity_id}" for i in issues),
            issues=issues,
            identifiers={"game_id": game_id},
            phase=phase,
        )

    def _integrity_fault(self, game_id: str, code: str, message: str) -> EngineIntegrityError:
        return contract_violation(
            engine_scope="basketball_session",
            error_code=code,
            message=message,
            issues=[],
            identifiers={"game_id": game_id},
            phase="post_game",
        )


def _binomial(rand: RandomSource, trials: int, probability: float) -> int:
    p = clamp_probability(probability)
    return sum(1 for _ in range(max(0, trials)) if rand.rand() < p)
