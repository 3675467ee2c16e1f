# backend/scripts/security_report.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from kaddem.core.logging import setup_logging
from kaddem.core.settings import settings
from kaddem.reporting.dashboard import build_report, write_dashboard
from kaddem.reporting.gate import evaluate_gate
from kaddem.reporting.parsers import TOOLS, collect_reports
from kaddem.reporting.runner import ensure_placeholders, run_all

"""
Étape "Security dashboard" du pipeline.

Exemples :
  python scripts/security_report.py --reports-dir reports --build 42
  python scripts/security_report.py --run --target .. --fail-on-gate

Codes de sortie :
  0 : dashboard écrit (gate passé, ou --fail-on-gate absent)
  1 : gate échoué avec --fail-on-gate
"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Agrège les rapports des scanners en dashboard HTML")
    parser.add_argument("--reports-dir", default=settings.REPORTS_DIR, help="Dossier des rapports natifs")
    parser.add_argument("--output", default=None, help="Fichier HTML (défaut: <reports-dir>/security-dashboard.html)")
    parser.add_argument("--project", default="kaddem", help="Nom du projet affiché")
    parser.add_argument("--build", default=None, help="Numéro de build CI")
    parser.add_argument("--run", action="store_true", help="Lance les scanners avant l'agrégation")
    parser.add_argument("--target", default=".", help="Dossier scanné (avec --run)")
    parser.add_argument(
        "--tools",
        default=",".join(TOOLS),
        help="Outils à inclure (CSV)",
    )
    parser.add_argument("--fail-on-gate", action="store_true", help="Code de sortie 1 si le gate échoue")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(settings.LOG_LEVEL)

    tools = [t.strip() for t in args.tools.split(",") if t.strip()]
    unknown = [t for t in tools if t not in TOOLS]
    if unknown:
        print(f"❌ Outils inconnus: {', '.join(unknown)} (connus: {', '.join(TOOLS)})")
        return 2

    reports_dir = Path(args.reports_dir)
    output = Path(args.output) if args.output else reports_dir / "security-dashboard.html"
    if output.suffix.lower() == ".json":
        print(f"❌ --output doit être un fichier HTML (reçu: {output.name}) : le résumé JSON est écrit à côté")
        return 2

    if args.run:
        for r in run_all(reports_dir, args.target, tools):
            print(f"… {r.tool}: {r.status.value}{f' ({r.message})' if r.message else ''}")

    # Aucun rapport manquant à l'archivage, même sans --run
    ensure_placeholders(reports_dir, tools)

    summaries = collect_reports(reports_dir, tools)
    report = build_report(summaries, project=args.project, build=args.build, gate=evaluate_gate(summaries))
    html_path, json_path = write_dashboard(report, output)

    print("✅ Dashboard écrit.")
    print(f"   - HTML: {html_path}")
    print(f"   - JSON: {json_path}")
    print(f"   - Niveau de risque: {report.risk_level}")
    print(f"   - Quality gate: {'PASSED' if report.gate.passed else 'FAILED'}")
    for reason in report.gate.reasons:
        print(f"     · {reason}")

    if args.fail_on_gate and not report.gate.passed:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
