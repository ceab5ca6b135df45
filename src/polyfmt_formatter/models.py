from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional


@dataclass(frozen=True)
class FormatResult:
    """Text returned by a capability, flagged when it is an unparsed passthrough."""

    source: str
    passthrough: bool = False


class OutcomeKind(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(frozen=True)
class FormatOutcome:
    path: Path
    kind: OutcomeKind
    message: Optional[str] = None
    passthrough: bool = False

    @classmethod
    def changed(cls, path: Path) -> "FormatOutcome":
        return cls(path, OutcomeKind.CHANGED)

    @classmethod
    def unchanged(cls, path: Path, passthrough: bool = False) -> "FormatOutcome":
        return cls(path, OutcomeKind.UNCHANGED, passthrough=passthrough)

    @classmethod
    def failed(cls, path: Path, message: str) -> "FormatOutcome":
        return cls(path, OutcomeKind.FAILED, message=message)


@dataclass
class FormatStats:
    """Aggregate of outcomes. ``merge`` is associative and commutative on the counts."""

    formatted: int = 0
    unchanged: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.formatted + self.unchanged + len(self.errors)

    def record(self, outcome: FormatOutcome) -> None:
        if outcome.kind is OutcomeKind.CHANGED:
            self.formatted += 1
        elif outcome.kind is OutcomeKind.UNCHANGED:
            self.unchanged += 1
            if outcome.passthrough:
                self.warnings.append(
                    f"{outcome.path} syntax not fully supported, file may not be properly formatted"
                )
        else:
            self.errors.append(outcome.message or f"{outcome.path}: unknown error")

    def merge(self, other: "FormatStats") -> "FormatStats":
        return FormatStats(
            formatted=self.formatted + other.formatted,
            unchanged=self.unchanged + other.unchanged,
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *other.warnings],
        )

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[FormatOutcome]) -> "FormatStats":
        stats = cls()
        for outcome in outcomes:
            stats.record(outcome)
        return stats
