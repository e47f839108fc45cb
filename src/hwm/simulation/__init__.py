from .season import SeasonRuntime, StandingRow

__all__ = ["SeasonRuntime", "StandingRow"]
