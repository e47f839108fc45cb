from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from hwm.basketball.modifiers import (
    NEUTRAL_CONTEXT,
    ModifierContext,
    ModifierPipeline,
    clamp_band,
    clamp_probability,
)
from hwm.basketball.models import PossessionOutcome
from hwm.contracts import PossessionAction, PossessionResult, RandomSource, StatCategory
from hwm.core import gameplay_random, weighted_choice
from hwm.league.entities import LINEUP_SIZE, Player

_S = StatCategory


@dataclass(frozen=True, slots=True)
class PossessionContext:
    offense_team_id: str
    defense_team_id: str
    offense_modifiers: ModifierContext = NEUTRAL_CONTEXT
    defense_modifiers: ModifierContext = NEUTRAL_CONTEXT


def _average(players: Sequence[Player], rating: str) -> float:
    return sum(p.rating(rating) for p in players) / len(players)


class PossessionResolver:
    """Resolves one possession to exactly one terminal outcome.

    Every draw comes from the injected random source; given the same draws the
    flow is deterministic and never retries.
    """

    FLOW = ["select_ball_handler", "select_action", "resolve_outcome", "attribute_stats"]

    TURNOVER_BASE = 0.15
    TURNOVER_HANDLING_WEIGHT = 0.10
    TURNOVER_BAND = (0.03, 0.20)
    STEAL_BASE = 0.08
    STEAL_DEFENSE_WEIGHT = 0.05
    STEAL_HANDLING_WEIGHT = 0.04
    STEAL_BAND = (0.02, 0.15)
    FOUL_BASE = 0.12
    FOUL_DEFENSE_WEIGHT = 0.03
    FOUL_BAND = (0.08, 0.20)
    BLOCK_BASE = 0.06
    BLOCK_RATING_WEIGHT = 0.08
    BLOCK_BAND = (0.03, 0.18)
    THREE_POINT_BLOCK_DISCOUNT = 0.15
    THREE_POINT_ATTEMPT_BASE = 0.05
    THREE_POINT_ATTEMPT_WEIGHT = 0.35
    POST_ATTEMPT_BASE = 0.35
    THREE_MAKE_BASE = 0.35
    THREE_MAKE_RATING_WEIGHT = 0.10
    THREE_MAKE_DEFENSE_WEIGHT = 0.05
    THREE_MAKE_BAND = (0.15, 0.50)
    TWO_MAKE_BASE = 0.45
    TWO_MAKE_RATING_WEIGHT = 0.15
    TWO_MAKE_DEFENSE_WEIGHT = 0.07
    TWO_MAKE_BAND = (0.20, 0.70)
    OFFENSIVE_REBOUND_BASE = 0.25
    OFFENSIVE_REBOUND_OFFENSE_WEIGHT = 0.15
    OFFENSIVE_REBOUND_DEFENSE_WEIGHT = 0.10
    OFFENSIVE_REBOUND_BAND = (0.15, 0.40)
    FREE_THROW_BASE = 0.70
    FREE_THROW_SHOOTING_WEIGHT = 0.15
    FREE_THROW_BAND = (0.60, 0.90)
    ASSIST_BASE = 0.50
    ASSIST_PASSING_WEIGHT = 0.20

    def __init__(self, random_source: RandomSource | None = None, pipeline: ModifierPipeline | None = None) -> None:
        self._rand = random_source or gameplay_random()
        self._pipeline = pipeline or ModifierPipeline()

    @property
    def pipeline(self) -> ModifierPipeline:
        return self._pipeline

    def resolve(
        self,
        offense: Sequence[Player],
        defense: Sequence[Player],
        context: PossessionContext,
    ) -> PossessionOutcome:
        if len(offense) != LINEUP_SIZE or len(defense) != LINEUP_SIZE:
            raise ValueError(
                f"possession needs {LINEUP_SIZE} players per side, got {len(offense)} and {len(defense)}"
            )
        handler = self._select_ball_handler(offense, context)
        outcome = self._select_action(handler, offense, defense, context)
        if outcome.action != PossessionAction.TURNOVER:
            self._resolve_shot(outcome, offense, defense, context)
        return outcome

    # select_ball_handler
    def _select_ball_handler(self, offense: Sequence[Player], context: PossessionContext) -> Player:
        weights = [
            ((p.ball_handling + p.passing) / 2 + 10)
            * self._pipeline.factor(p, _S.USAGE, context.offense_modifiers)
            for p in offense
        ]
        return weighted_choice(self._rand, list(offense), weights)

    # select_action
    def _select_action(
        self,
        handler: Player,
        offense: Sequence[Player],
        defense: Sequence[Player],
        context: PossessionContext,
    ) -> PossessionOutcome:
        off_ctx, def_ctx = context.offense_modifiers, context.defense_modifiers

        stealer = self._pick_defender(defense, def_ctx)
        steal_p = clamp_band(
            self.STEAL_BASE
            + stealer.steals / 100 * self.STEAL_DEFENSE_WEIGHT
            - handler.ball_handling / 100 * self.STEAL_HANDLING_WEIGHT,
            *self.STEAL_BAND,
        )
        if self._rand.rand() < self._pipeline.apply(steal_p, stealer, _S.STEAL, def_ctx):
            outcome = self._new_outcome(handler, context, PossessionAction.TURNOVER, PossessionResult.STEAL)
            outcome.defender_id = stealer.player_id
            outcome.credit(handler.player_id, "turnovers")
            outcome.credit(stealer.player_id, "steals")
            return outcome

        if self._rand.rand() < self.turnover_probability(handler, off_ctx):
            outcome = self._new_outcome(handler, context, PossessionAction.TURNOVER, PossessionResult.TURNOVER)
            outcome.credit(handler.player_id, "turnovers")
            return outcome

        teammates = [p for p in offense if p.player_id != handler.player_id]
        pass_weight = self.assist_base(handler) * self._pipeline.factor(handler, _S.ASSIST, off_ctx)
        self_weight = (
            (1.0 - self.assist_base(handler))
            * self._pipeline.factor(handler, _S.SHOT_CREATION, off_ctx)
            * self._pipeline.factor(handler, _S.SHOT_ATTEMPT, off_ctx)
        )
        passes = self._rand.rand() * (pass_weight + self_weight) < pass_weight if pass_weight > 0 else False

        shooter = handler
        passer: Player | None = None
        if passes and teammates:
            weights = [
                self.shot_weight(p, off_ctx) * self._pipeline.factor(p, _S.CATCH_AND_SHOOT, off_ctx)
                for p in teammates
            ]
            shooter = weighted_choice(self._rand, teammates, weights)
            passer = handler

        is_three = self._rand.rand() < self.three_point_attempt_probability(shooter, off_ctx)
        if passer is None:
            action = PossessionAction.THREE_POINT if is_three else PossessionAction.TWO_POINT
        else:
            action = PossessionAction.PASS_THREE_POINT if is_three else PossessionAction.PASS_TWO_POINT
        outcome = self._new_outcome(handler, context, action, PossessionResult.MISSED_SHOT)
        outcome.shooter_id = shooter.player_id
        outcome.passer_id = passer.player_id if passer is not None else None
        return outcome

    # resolve_outcome + attribute_stats
    def _resolve_shot(
        self,
        outcome: PossessionOutcome,
        offense: Sequence[Player],
        defense: Sequence[Player],
        context: PossessionContext,
    ) -> None:
        off_ctx, def_ctx = context.offense_modifiers, context.defense_modifiers
        shooter = next(p for p in offense if p.player_id == outcome.shooter_id)
        is_three = outcome.action in (PossessionAction.THREE_POINT, PossessionAction.PASS_THREE_POINT)
        shooter_id = shooter.player_id

        fouler = self._pick_defender(defense, def_ctx)
        foul_p = clamp_band(self.FOUL_BASE + fouler.defense / 100 * self.FOUL_DEFENSE_WEIGHT, *self.FOUL_BAND)
        if self._rand.rand() < foul_p:
            outcome.result = PossessionResult.SHOOTING_FOUL
            outcome.defender_id = fouler.player_id
            outcome.credit(fouler.player_id, "fouls")
            attempts = 3 if is_three else 2
            ft_p = self.free_throw_probability(shooter)
            made = sum(1 for _ in range(attempts) if self._rand.rand() < ft_p)
            outcome.credit(shooter_id, "free_throws_attempted", attempts)
            if made:
                outcome.credit(shooter_id, "free_throws_made", made)
                outcome.credit(shooter_id, "points", made)
            outcome.points = made
            return

        outcome.credit(shooter_id, "field_goals_attempted")
        if is_three:
            outcome.credit(shooter_id, "three_pointers_attempted")

        blocker = weighted_choice(
            self._rand,
            list(defense),
            [(p.blocks + 1) * self._pipeline.factor(p, _S.BLOCK, def_ctx) for p in defense],
        )
        block_p = clamp_band(self.BLOCK_BASE + blocker.blocks / 100 * self.BLOCK_RATING_WEIGHT, *self.BLOCK_BAND)
        if is_three:
            block_p *= self.THREE_POINT_BLOCK_DISCOUNT
        if self._rand.rand() < self._pipeline.apply(block_p, blocker, _S.BLOCK, def_ctx):
            outcome.result = PossessionResult.BLOCKED_SHOT
            outcome.defender_id = blocker.player_id
            outcome.credit(blocker.player_id, "blocks")
            self._rebound(outcome, offense, defense, context)
            return

        make_p = self.make_probability(shooter, is_three, defense, context)
        if self._rand.rand() >= make_p:
            outcome.result = PossessionResult.MISSED_SHOT
            self._rebound(outcome, offense, defense, context)
            return

        points = 3 if is_three else 2
        outcome.result = PossessionResult.MADE_SHOT
        outcome.points = points
        outcome.credit(shooter_id, "field_goals_made")
        outcome.credit(shooter_id, "points", points)
        if is_three:
            outcome.credit(shooter_id, "three_pointers_made")
        if outcome.passer_id is not None:
            passer = next(p for p in offense if p.player_id == outcome.passer_id)
            assist_p = self._pipeline.apply(self.assist_base(passer), passer, _S.ASSIST, off_ctx)
            if self._rand.rand() < assist_p:
                outcome.assister_id = passer.player_id
                outcome.credit(passer.player_id, "assists")

    def make_probability(
        self,
        shooter: Player,
        is_three: bool,
        defense: Sequence[Player],
        context: PossessionContext,
    ) -> float:
        off_ctx, def_ctx = context.offense_modifiers, context.defense_modifiers
        avg_defense = _average(defense, "defense")
        impact = sum(self._pipeline.factor(p, _S.DEFENSIVE_IMPACT, def_ctx) for p in defense) / len(defense)
        if is_three:
            base = clamp_band(
                self.THREE_MAKE_BASE
                + shooter.three_point / 100 * self.THREE_MAKE_RATING_WEIGHT
                - avg_defense / 100 * self.THREE_MAKE_DEFENSE_WEIGHT * impact,
                *self.THREE_MAKE_BAND,
            )
        else:
            post_p = clamp_probability(self.POST_ATTEMPT_BASE * self._pipeline.factor(shooter, _S.POST_ATTEMPT, off_ctx))
            if self._rand.rand() < post_p:
                rating = shooter.post_shooting * 0.7 + shooter.shooting * 0.3
            else:
                rating = shooter.post_shooting * 0.3 + shooter.shooting * 0.7
            base = clamp_band(
                self.TWO_MAKE_BASE
                + rating / 100 * self.TWO_MAKE_RATING_WEIGHT
                - avg_defense / 100 * self.TWO_MAKE_DEFENSE_WEIGHT * impact,
                *self.TWO_MAKE_BAND,
            )
        return self._pipeline.apply(base, shooter, _S.SHOT_MAKE, off_ctx)

    def _rebound(
        self,
        outcome: PossessionOutcome,
        offense: Sequence[Player],
        defense: Sequence[Player],
        context: PossessionContext,
    ) -> None:
        offensive = self._rand.rand() < self.offensive_rebound_probability(offense, defense)
        group = offense if offensive else defense
        modifiers = context.offense_modifiers if offensive else context.defense_modifiers
        weights = [(p.rebounding + 1) * self._pipeline.factor(p, _S.REBOUND, modifiers) for p in group]
        rebounder = weighted_choice(self._rand, list(group), weights)
        outcome.rebounder_id = rebounder.player_id
        outcome.offensive_rebound = offensive
        outcome.credit(rebounder.player_id, "rebounds")

    def turnover_probability(self, handler: Player, modifiers: ModifierContext) -> float:
        base = clamp_band(
            self.TURNOVER_BASE - handler.ball_handling / 100 * self.TURNOVER_HANDLING_WEIGHT,
            *self.TURNOVER_BAND,
        )
        return self._pipeline.apply(base, handler, _S.TURNOVER, modifiers)

    def three_point_attempt_probability(self, shooter: Player, modifiers: ModifierContext) -> float:
        base = self.THREE_POINT_ATTEMPT_BASE + shooter.three_point / 100 * self.THREE_POINT_ATTEMPT_WEIGHT
        return self._pipeline.apply(base, shooter, _S.THREE_POINT_ATTEMPT, modifiers)

    def free_throw_probability(self, shooter: Player) -> float:
        return clamp_band(
            self.FREE_THROW_BASE + shooter.shooting / 100 * self.FREE_THROW_SHOOTING_WEIGHT,
            *self.FREE_THROW_BAND,
        )

    def offensive_rebound_probability(self, offense: Sequence[Player], defense: Sequence[Player]) -> float:
        return clamp_band(
            self.OFFENSIVE_REBOUND_BASE
            + _average(offense, "rebounding") / 100 * self.OFFENSIVE_REBOUND_OFFENSE_WEIGHT
            - _average(defense, "rebounding") / 100 * self.OFFENSIVE_REBOUND_DEFENSE_WEIGHT,
            *self.OFFENSIVE_REBOUND_BAND,
        )

    def _pick_defender(self, defense: Sequence[Player], modifiers: ModifierContext) -> Player:
        weights = [
            (p.defense + 1) * self._pipeline.factor(p, _S.DEFENSIVE_IMPACT, modifiers) for p in defense
        ]
        return weighted_choice(self._rand, list(defense), weights)

    def shot_weight(self, player: Player, modifiers: ModifierContext) -> float:
        raw = 0.4 * player.shooting + 0.3 * player.three_point + 0.3 * player.post_shooting + 1
        return raw * self._pipeline.factor(player, _S.SHOT_ATTEMPT, modifiers)

    def assist_base(self, player: Player) -> float:
        return clamp_probability(self.ASSIST_BASE + player.passing / 100 * self.ASSIST_PASSING_WEIGHT)

    @staticmethod
    def _new_outcome(
        handler: Player,
        context: PossessionContext,
        action: PossessionAction,
        result: PossessionResult,
    ) -> PossessionOutcome:
        return PossessionOutcome(
            offense_team_id=context.offense_team_id,
            defense_team_id=context.defense_team_id,
            ball_handler_id=handler.player_id,
            action=action,
            result=result,
        )
