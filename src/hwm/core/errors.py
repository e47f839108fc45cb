from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Mapping, Sequence
from uuid import uuid4

from hwm.contracts import ForensicArtifact, ValidationIssue
from hwm.core.ids import now_utc


class EngineIntegrityError(RuntimeError):
    """Fatal engine fault; the attached artifact describes what the engine saw."""

    def __init__(self, artifact: ForensicArtifact) -> None:
        super().__init__(f"[{artifact.error_code}] {artifact.message}")
        self.artifact = artifact

    @property
    def error_code(self) -> str:
        return self.artifact.error_code


def build_forensic_artifact(
    engine_scope: str,
    error_code: str,
    message: str,
    *,
    state_snapshot: Mapping[str, object] | None = None,
    context: Mapping[str, object] | None = None,
    identifiers: Mapping[str, str] | None = None,
    causal_fragment: Sequence[str] = (),
) -> ForensicArtifact:
    return ForensicArtifact(
        artifact_id=uuid4().hex,
        timestamp=now_utc(),
        engine_scope=engine_scope,
        error_code=error_code,
        message=message,
        state_snapshot=dict(state_snapshot or {}),
        context=dict(context or {}),
        identifiers=dict(identifiers or {}),
        causal_fragment=list(causal_fragment),
    )


def contract_violation(
    engine_scope: str,
    error_code: str,
    message: str,
    issues: list[ValidationIssue],
    identifiers: dict[str, str],
    phase: str,
) -> EngineIntegrityError:
    """Wrap caller-contract issues (bad roster, bad stub) as a fatal engine fault."""
    artifact = build_forensic_artifact(
        engine_scope,
        error_code,
        message,
        state_snapshot={"issue_count": len(issues), **identifiers},
        context={"issues": [asdict(i) for i in issues], "phase": phase},
        identifiers=identifiers,
        causal_fragment=["pre_sim_gate", phase],
    )
    return EngineIntegrityError(artifact)


def persist_forensic_artifact(artifact: ForensicArtifact, output_dir: Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    game_id = artifact.identifiers.get("game_id", "engine")
    path = output_dir / f"forensic_{game_id}_{artifact.error_code.lower()}_{artifact.artifact_id[:8]}.json"
    path.write_text(json.dumps(asdict(artifact), default=str, indent=2, sort_keys=True), encoding="utf-8")
    return path
