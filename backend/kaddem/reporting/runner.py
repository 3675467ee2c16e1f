from __future__ import annotations

import json
import logging
import subprocess
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from kaddem.core.errors import now_iso
from kaddem.core.settings import settings
from kaddem.reporting.models import ScanStatus
from kaddem.reporting.parsers import PLACEHOLDER_KEY, TOOLS

"""
Reporting Runner.

Rôle (fonctionnel) :
- Lance les scanners installés sur l’agent CI, chacun écrivant son rapport natif dans reports_dir.
- Ne lève jamais d’exception : binaire absent, timeout ou erreur -> statut + message.
- Écrit un fichier placeholder quand un outil n’a rien produit, pour que l’archivage
  des artefacts (et le dashboard) ne casse jamais le build.

Commandes :
- `{out}` : chemin du rapport attendu, `{dir}` : dossier des rapports, `{target}` : dossier scanné.
- Hadolint écrit sur stdout : la sortie est recopiée dans le fichier.
- SonarQube n’est pas lancé ici : la réponse du quality gate est récupérée par le pipeline.
"""

log = logging.getLogger("kaddem.reporting")

VERSION_TIMEOUT_S = 10

COMMANDS: Dict[str, List[str]] = {
    "gitleaks": [
        "gitleaks", "detect", "--source", "{target}", "--no-git",
        "--report-format", "json", "--report-path", "{out}", "--exit-code", "0",
    ],
    "trivy": ["trivy", "fs", "--format", "json", "--output", "{out}", "--no-progress", "{target}"],
    "syft": ["syft", "dir:{target}", "-o", "json={out}"],
    "grype": ["grype", "sbom:{dir}/sbom.json", "-o", "json", "--file", "{out}"],
    "dependency-check": [
        "dependency-check", "--scan", "{target}", "--format", "JSON", "--out", "{dir}",
        "--project", "kaddem",
    ],
    "semgrep": ["semgrep", "scan", "--config", "auto", "--json", "--output", "{out}", "{target}"],
    "checkstyle": ["checkstyle", "-c", "/google_checks.xml", "-f", "xml", "-o", "{out}", "{target}/src"],
    "hadolint": ["hadolint", "--format", "json", "--no-fail", "{target}/Dockerfile"],
}

STDOUT_TOOLS = {"hadolint"}


@dataclass
class RunResult:
    tool: str
    status: ScanStatus
    report: str
    returncode: Optional[int] = None
    message: str = ""


def write_placeholder(tool: str, reports_dir: Path, reason: str) -> Path:
    """Écrit un rapport vide mais valide, marqué comme placeholder."""
    spec = TOOLS[tool]
    path = reports_dir / spec.filename
    path.parent.mkdir(parents=True, exist_ok=True)

    if spec.fmt == "xml":
        root = ET.Element("checkstyle", {"placeholder": "true", "reason": reason, "generated_at": now_iso()})
        ET.ElementTree(root).write(str(path), encoding="utf-8", xml_declaration=True)
    else:
        payload = {PLACEHOLDER_KEY: True, "tool": tool, "reason": reason, "generated_at": now_iso()}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    log.info("placeholder_written", extra={"tool": tool, "report": str(path)})
    return path


def ensure_placeholders(reports_dir: Path, tools: Optional[List[str]] = None) -> List[Path]:
    """Complète reports_dir : un placeholder pour chaque rapport attendu absent ou vide."""
    written = []
    for name in tools or list(TOOLS):
        path = reports_dir / TOOLS[name].filename
        if not path.exists() or path.stat().st_size == 0:
            written.append(write_placeholder(name, reports_dir, "aucun rapport produit"))
    return written


def _available(binary: str) -> bool:
    try:
        probe = subprocess.run(
            [binary, "--version"],
            capture_output=True, text=True, timeout=VERSION_TIMEOUT_S,
        )
        return probe.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError):
        return False


def run_scanner(tool: str, reports_dir: Path, target: str = ".", timeout: Optional[int] = None) -> RunResult:
    """Lance un scanner ; garantit qu’un fichier de rapport existe à la fin."""
    spec = TOOLS[tool]
    out = reports_dir / spec.filename
    reports_dir.mkdir(parents=True, exist_ok=True)
    timeout = int(timeout or settings.SCAN_TIMEOUT_S)

    template = COMMANDS.get(tool)
    if template is None:
        if not out.exists():
            write_placeholder(tool, reports_dir, "rapport fourni par le pipeline")
            return RunResult(tool, ScanStatus.MISSING, str(out), message="rapport fourni par le pipeline")
        return RunResult(tool, ScanStatus.OK, str(out), message="rapport existant")

    if not _available(template[0]):
        reason = f"{template[0]} introuvable sur l’agent"
        log.warning("scanner_missing", extra={"tool": tool})
        write_placeholder(tool, reports_dir, reason)
        return RunResult(tool, ScanStatus.MISSING, str(out), message=reason)

    cmd = [part.format(out=out, dir=reports_dir, target=target) for part in template]
    # Workspace CI réutilisé : le rapport d’un build précédent ne doit jamais passer pour le résultat courant
    out.unlink(missing_ok=True)
    log.info("scanner_started", extra={"tool": tool})

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        reason = f"{tool} timed out after {timeout} seconds"
        log.warning("scanner_timeout", extra={"tool": tool})
        write_placeholder(tool, reports_dir, reason)
        return RunResult(tool, ScanStatus.ERROR, str(out), message=reason)
    except OSError as exc:
        reason = f"Error running {tool}: {exc}"
        log.warning("scanner_failed", extra={"tool": tool})
        write_placeholder(tool, reports_dir, reason)
        return RunResult(tool, ScanStatus.ERROR, str(out), message=reason)

    if tool in STDOUT_TOOLS and proc.stdout.strip():
        out.write_text(proc.stdout, encoding="utf-8")

    # Les scanners sortent souvent en code != 0 quand ils trouvent quelque chose : seul le rapport compte
    if not out.exists() or out.stat().st_size == 0:
        reason = (proc.stderr or "").strip()[-300:] or f"{tool} n’a produit aucun rapport"
        write_placeholder(tool, reports_dir, reason)
        log.warning("scanner_no_report", extra={"tool": tool})
        return RunResult(tool, ScanStatus.ERROR, str(out), proc.returncode, reason)

    log.info("scanner_done", extra={"tool": tool, "status": ScanStatus.OK.value})
    return RunResult(tool, ScanStatus.OK, str(out), proc.returncode)


def run_all(reports_dir: Path, target: str = ".", tools: Optional[List[str]] = None) -> List[RunResult]:
    """Lance les scanners dans l’ordre du registre (syft avant grype : grype lit le SBOM)."""
    return [run_scanner(name, reports_dir, target) for name in tools or list(TOOLS)]
