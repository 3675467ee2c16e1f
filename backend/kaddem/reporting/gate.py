from __future__ import annotations

from typing import List, Optional

from kaddem.core.settings import settings
from kaddem.reporting.models import Category, GateResult, ScanStatus, ScanSummary, SeverityCounts

"""
Reporting Gate.

Rôle (fonctionnel) :
- Décide si le build passe, à partir des résumés de scanners :
  - nombre de findings CRITICAL / HIGH (tous outils sauf lint)
  - nombre de secrets détectés (Gitleaks)
  - statut du quality gate SonarQube (ERROR => échec)
- Seuils lus depuis settings (GATE_MAX_*), surchargeables ; -1 = pas de limite.

Un rapport absent ou illisible n’échoue pas le gate : il apparaît comme tel dans le dashboard.
"""

UNLIMITED = -1


def _exceeds(value: int, limit: int) -> bool:
    return limit != UNLIMITED and value > limit


def evaluate_gate(
    summaries: List[ScanSummary],
    *,
    max_critical: Optional[int] = None,
    max_high: Optional[int] = None,
    max_secrets: Optional[int] = None,
) -> GateResult:
    thresholds = {
        "max_critical": settings.GATE_MAX_CRITICAL if max_critical is None else max_critical,
        "max_high": settings.GATE_MAX_HIGH if max_high is None else max_high,
        "max_secrets": settings.GATE_MAX_SECRETS if max_secrets is None else max_secrets,
    }

    counts = SeverityCounts()
    secrets = 0
    reasons: List[str] = []

    for s in summaries:
        if s.status != ScanStatus.OK:
            continue
        if s.category == Category.SECRETS:
            secrets += s.total
        elif s.category != Category.LINT:
            counts = counts.merge(s.counts)
        if s.category == Category.QUALITY and s.metrics.get("quality_gate") == "ERROR":
            reasons.append(f"Quality gate {s.tool}: ERROR")

    if _exceeds(counts.critical, thresholds["max_critical"]):
        reasons.append(f"CRITICAL vulnerabilities: {counts.critical} (max: {thresholds['max_critical']})")
    if _exceeds(counts.high, thresholds["max_high"]):
        reasons.append(f"HIGH vulnerabilities: {counts.high} (max: {thresholds['max_high']})")
    if _exceeds(secrets, thresholds["max_secrets"]):
        reasons.append(f"Secrets detected: {secrets} (max: {thresholds['max_secrets']})")

    return GateResult(passed=not reasons, reasons=reasons, thresholds=thresholds)
