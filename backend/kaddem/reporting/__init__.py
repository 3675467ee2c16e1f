"""
kaddem.reporting

Agrégation des rapports des scanners de sécurité exécutés par le pipeline CI
(Gitleaks, Trivy, Syft/Grype, OWASP Dependency-Check, SonarQube, Checkstyle, Semgrep, Hadolint).

- models    : résumé normalisé par outil + rapport exécutif (Pydantic)
- parsers   : extraction des métriques depuis le format natif de chaque outil
- runner    : lancement des scanners + fichiers “placeholder” si un outil ne produit rien
- gate      : quality gate (seuils critical / high / secrets, statut Sonar)
- dashboard : dashboard HTML exécutif (Jinja2) + résumé JSON
"""

from kaddem.reporting.models import (
    Category,
    ExecutiveReport,
    Finding,
    GateResult,
    ScanStatus,
    ScanSummary,
    SeverityCounts,
)

__all__ = [
    "Category",
    "ExecutiveReport",
    "Finding",
    "GateResult",
    "ScanStatus",
    "ScanSummary",
    "SeverityCounts",
]
