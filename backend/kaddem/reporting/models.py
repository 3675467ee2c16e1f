from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

"""
Reporting Models (Pydantic).

Rôle (fonctionnel) :
- Représentation normalisée du résultat d’un scanner, quel que soit son format natif :
  statut (ok / missing / error), compteurs par sévérité, métriques propres à l’outil,
  quelques findings représentatifs (jamais la valeur d’un secret).
- Rapport exécutif : l’ensemble des résumés + quality gate + niveau de risque global.

Notes :
- Les sévérités natives sont ramenées à 6 niveaux (critical, high, medium, low, info, unknown).
"""


class ScanStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    ERROR = "error"


class Category(str, Enum):
    SECRETS = "SECRETS"
    SCA = "SCA"
    SAST = "SAST"
    SBOM = "SBOM"
    CONTAINER = "CONTAINER"
    LINT = "LINT"
    QUALITY = "QUALITY"


SEVERITY_LEVELS = ("critical", "high", "medium", "low", "info", "unknown")

# Alias natifs -> niveau normalisé
_SEVERITY_ALIASES = {
    "critical": "critical",
    "blocker": "critical",
    "high": "high",
    "error": "high",
    "major": "high",
    "medium": "medium",
    "moderate": "medium",
    "warning": "medium",
    "low": "low",
    "minor": "low",
    "negligible": "low",
    "info": "info",
    "informational": "info",
    "note": "info",
    "style": "info",
}


def normalize_severity(value: Any) -> str:
    return _SEVERITY_ALIASES.get(str(value or "").strip().lower(), "unknown")


class SeverityCounts(BaseModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    unknown: int = 0

    def add(self, severity: str, n: int = 1) -> None:
        """Incrémente le niveau (déjà normalisé, sinon `unknown`)."""
        level = severity if severity in SEVERITY_LEVELS else "unknown"
        setattr(self, level, getattr(self, level) + n)

    @property
    def total(self) -> int:
        return sum(getattr(self, level) for level in SEVERITY_LEVELS)

    def merge(self, other: "SeverityCounts") -> "SeverityCounts":
        return SeverityCounts(**{lvl: getattr(self, lvl) + getattr(other, lvl) for lvl in SEVERITY_LEVELS})


class Finding(BaseModel):
    id: str
    severity: str
    title: str = ""
    location: str = ""


class ScanSummary(BaseModel):
    tool: str
    category: Category
    status: ScanStatus
    source: Optional[str] = None
    counts: SeverityCounts = Field(default_factory=SeverityCounts)
    metrics: Dict[str, Any] = Field(default_factory=dict)
    findings: List[Finding] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def total(self) -> int:
        return self.counts.total


class GateResult(BaseModel):
    passed: bool
    reasons: List[str] = Field(default_factory=list)
    thresholds: Dict[str, int] = Field(default_factory=dict)


class ExecutiveReport(BaseModel):
    project: str
    build: Optional[str] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    summaries: List[ScanSummary]
    gate: GateResult

    @property
    def totals(self) -> SeverityCounts:
        acc = SeverityCounts()
        for s in self.summaries:
            acc = acc.merge(s.counts)
        return acc

    @property
    def secrets(self) -> int:
        return sum(s.total for s in self.summaries if s.category == Category.SECRETS)

    @property
    def risk_level(self) -> str:
        """CRITICAL / HIGH / MEDIUM / LOW selon les findings les plus graves."""
        t = self.totals
        if t.critical or self.secrets:
            return "CRITICAL"
        if t.high:
            return "HIGH"
        if t.medium:
            return "MEDIUM"
        return "LOW"

    def summary(self, tool: str) -> Optional[ScanSummary]:
        return next((s for s in self.summaries if s.tool == tool), None)
