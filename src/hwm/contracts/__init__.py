from .types import (
    CoachingSpecialization,
    ForensicArtifact,
    NarrativeEvent,
    Position,
    PossessionAction,
    PossessionResult,
    RandomSource,
    SimFidelity,
    StatCategory,
    StatStream,
    ValidationError,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "CoachingSpecialization",
    "ForensicArtifact",
    "NarrativeEvent",
    "Position",
    "PossessionAction",
    "PossessionResult",
    "RandomSource",
    "SimFidelity",
    "StatCategory",
    "StatStream",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
]
