from .affinity import all_affinities, suggest_starting_lineup
from .coaching import CoachingBonuses, development_rate_modifier
from .lineup import MinutesPlan, minutes_plan, resolve_on_court
from .models import BoxScore, BoxScoreBuilder, PlayerGameStats, PossessionOutcome
from .modifiers import ModifierContext, ModifierPipeline, clamp_probability, scaled_probability
from .resolver import PossessionContext, PossessionResolver
from .roles import RoleArchetype, RoleArchetypeId, RoleResolution, RoleStatus, best_fit, resolve_role
from .session import GameOrchestrator
from .stats import PlayerSeasonStats, StatBook, add_game, league_leaders
from .validation import LineupValidator

__all__ = [
    "BoxScore",
    "BoxScoreBuilder",
    "CoachingBonuses",
    "GameOrchestrator",
    "LineupValidator",
    "MinutesPlan",
    "ModifierContext",
    "ModifierPipeline",
    "PlayerGameStats",
    "PlayerSeasonStats",
    "PossessionContext",
    "PossessionOutcome",
    "PossessionResolver",
    "RoleArchetype",
    "RoleArchetypeId",
    "RoleResolution",
    "RoleStatus",
    "StatBook",
    "add_game",
    "all_affinities",
    "best_fit",
    "clamp_probability",
    "development_rate_modifier",
    "league_leaders",
    "minutes_plan",
    "resolve_on_court",
    "resolve_role",
    "scaled_probability",
    "suggest_starting_lineup",
]
