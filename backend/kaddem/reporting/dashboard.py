from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from jinja2 import Environment

from kaddem.reporting.gate import evaluate_gate
from kaddem.reporting.models import SEVERITY_LEVELS, ExecutiveReport, GateResult, ScanSummary
from kaddem.reporting.parsers import TOOLS

"""
Reporting Dashboard.

Rôle (fonctionnel) :
- Assemble le rapport exécutif (résumés + quality gate + niveau de risque).
- Rend le dashboard HTML (autonome, sans assets externes) publié par le plugin HTML du CI.
- Écrit à côté un résumé JSON exploitable par d’autres jobs (même nom, extension .json).

Notes :
- Jinja2 avec autoescape : titres/messages des findings viennent des outils, jamais injectés bruts.
"""

log = logging.getLogger("kaddem.reporting")

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

DASHBOARD_TEMPLATE = """<!DOCTYPE html>
<html lang="fr">
<head>
<meta charset="utf-8">
<title>{{ report.project }} - Security Dashboard</title>
<style>
body { font-family: Arial, sans-serif; margin: 24px; color: #222; }
table { border-collapse: collapse; width: 100%; margin-bottom: 24px; }
th, td { border: 1px solid #ccc; padding: 6px 10px; text-align: left; }
th { background: #f3f3f3; }
.badge { display: inline-block; padding: 4px 12px; border-radius: 4px; color: #fff; font-weight: bold; }
.CRITICAL { background: #8b0000; } .HIGH { background: #d9534f; }
.MEDIUM { background: #f0ad4e; } .LOW { background: #5cb85c; }
.ok { color: #2e7d32; } .missing { color: #888; } .error { color: #c62828; }
.passed { background: #5cb85c; } .failed { background: #d9534f; }
</style>
</head>
<body>
<h1>{{ report.project }} - Executive Security Dashboard</h1>
<p>
Build <strong>{{ report.build or "local" }}</strong> - généré le {{ report.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC") }}
</p>
<p>
Niveau de risque : <span class="badge {{ report.risk_level }}">{{ report.risk_level }}</span>
Quality gate : <span class="badge {{ 'passed' if report.gate.passed else 'failed' }}">{{ "PASSED" if report.gate.passed else "FAILED" }}</span>
</p>
{% if report.gate.reasons %}
<ul>
{% for reason in report.gate.reasons %}
<li>{{ reason }}</li>
{% endfor %}
</ul>
{% endif %}

<h2>Synthèse</h2>
<table>
<tr>{% for level in levels %}<th>{{ level|upper }}</th>{% endfor %}<th>Secrets</th></tr>
<tr>{% for level in levels %}<td>{{ totals[level] }}</td>{% endfor %}<td>{{ report.secrets }}</td></tr>
</table>

<h2>Outils</h2>
<table>
<tr><th>Outil</th><th>Catégorie</th><th>Statut</th>{% for level in levels %}<th>{{ level|upper }}</th>{% endfor %}<th>Métriques</th></tr>
{% for s in report.summaries %}
<tr>
<td>{{ labels.get(s.tool, s.tool) }}</td>
<td>{{ s.category.value }}</td>
<td class="{{ s.status.value }}">{{ s.status.value }}{% if s.message %} ({{ s.message }}){% endif %}</td>
{% for level in levels %}<td>{{ s.counts[level] }}</td>{% endfor %}
<td>{% for key, value in s.metrics.items() %}{{ key }}={{ value }}{% if not loop.last %}, {% endif %}{% endfor %}</td>
</tr>
{% endfor %}
</table>

<h2>Principaux findings</h2>
<table>
<tr><th>Outil</th><th>Sévérité</th><th>Identifiant</th><th>Titre</th><th>Emplacement</th></tr>
{% for s in report.summaries %}
{% for f in s.findings %}
<tr><td>{{ labels.get(s.tool, s.tool) }}</td><td>{{ f.severity|upper }}</td><td>{{ f.id }}</td><td>{{ f.title }}</td><td>{{ f.location }}</td></tr>
{% endfor %}
{% endfor %}
</table>
</body>
</html>
"""


def build_report(
    summaries: List[ScanSummary],
    project: str,
    build: Optional[str] = None,
    gate: Optional[GateResult] = None,
) -> ExecutiveReport:
    return ExecutiveReport(
        project=project,
        build=build,
        summaries=summaries,
        gate=gate or evaluate_gate(summaries),
    )


def render_dashboard(report: ExecutiveReport) -> str:
    template = _env.from_string(DASHBOARD_TEMPLATE)
    return template.render(
        report=report,
        totals=report.totals.model_dump(),
        levels=SEVERITY_LEVELS,
        labels={name: spec.label for name, spec in TOOLS.items()},
    )


def report_as_dict(report: ExecutiveReport) -> dict:
    """Résumé JSON : le modèle + les valeurs calculées (totaux, risque)."""
    data = report.model_dump(mode="json")
    data["totals"] = report.totals.model_dump()
    data["secrets"] = report.secrets
    data["risk_level"] = report.risk_level
    return data


def write_dashboard(report: ExecutiveReport, output: Path) -> Tuple[Path, Path]:
    """Écrit le HTML (output) et le JSON (output avec extension .json)."""
    if output.suffix.lower() == ".json":
        raise ValueError(f"le dashboard HTML ne peut pas s’appeler {output.name} : le résumé JSON l’écraserait")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_dashboard(report), encoding="utf-8")

    summary_path = output.with_suffix(".json")
    summary_path.write_text(json.dumps(report_as_dict(report), indent=2, ensure_ascii=False), encoding="utf-8")

    log.info(
        "dashboard_written",
        extra={"report": str(output), "status": "passed" if report.gate.passed else "failed"},
    )
    return output, summary_path
