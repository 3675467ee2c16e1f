from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from kaddem.core.errors import ReportingError
from kaddem.reporting.models import (
    Category,
    Finding,
    ScanStatus,
    ScanSummary,
    SeverityCounts,
    normalize_severity,
)

"""
Reporting Parsers.

Rôle (fonctionnel) :
- Lit le rapport natif de chaque scanner et en extrait des métriques normalisées (ScanSummary).
- Un extracteur par outil, fonction pure sur les données déjà chargées (dict/list/XML) :
  testable sans fichiers.
- parse_report() gère le cycle complet pour un fichier :
  - absent ou placeholder -> status "missing"
  - illisible / format inattendu -> status "error" (message explicite)
  - sinon -> status "ok"

Notes :
- Les findings conservés sont limités (MAX_FINDINGS) et triés par gravité.
- Les secrets détectés par Gitleaks ne sont jamais recopiés (règle + fichier + ligne seulement).
"""

log = logging.getLogger("kaddem.reporting")

MAX_FINDINGS = 10

PLACEHOLDER_KEY = "_placeholder"

_SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3, "info": 4, "unknown": 5}

Extracted = Tuple[SeverityCounts, List[Finding], Dict[str, Any]]


def _top(findings: List[Finding]) -> List[Finding]:
    return sorted(findings, key=lambda f: _SEVERITY_RANK.get(f.severity, 9))[:MAX_FINDINGS]


def _counted(findings: List[Finding]) -> SeverityCounts:
    counts = SeverityCounts()
    for f in findings:
        counts.add(f.severity)
    return counts


# -----------------------------
# Extracteurs (données natives -> métriques)
# -----------------------------
def extract_gitleaks(data: Any) -> Extracted:
    """Gitleaks `--report-format json` : liste de leaks, chacun compté comme secret HIGH."""
    if not isinstance(data, list):
        raise TypeError(f"liste de leaks attendue, reçu {type(data).__name__}")
    leaks = data
    findings = [
        Finding(
            id=str(leak.get("RuleID") or "secret"),
            severity="high",
            title=str(leak.get("Description") or ""),
            location=f"{leak.get('File', '')}:{leak.get('StartLine', '')}",
        )
        for leak in leaks
        if isinstance(leak, dict)
    ]
    rules = Counter(f.id for f in findings)
    return _counted(findings), _top(findings), {"secrets": len(findings), "rules": dict(rules)}


def extract_trivy(data: Dict[str, Any]) -> Extracted:
    """Trivy JSON : Results[].Vulnerabilities / Misconfigurations / Secrets."""
    findings: List[Finding] = []
    vulns = misconfigs = secrets = 0
    targets = []

    for result in data.get("Results") or []:
        target = str(result.get("Target", ""))
        targets.append(target)
        for v in result.get("Vulnerabilities") or []:
            vulns += 1
            findings.append(
                Finding(
                    id=str(v.get("VulnerabilityID", "")),
                    severity=normalize_severity(v.get("Severity")),
                    title=f"{v.get('PkgName', '')} {v.get('InstalledVersion', '')}".strip(),
                    location=target,
                )
            )
        for m in result.get("Misconfigurations") or []:
            misconfigs += 1
            findings.append(
                Finding(
                    id=str(m.get("ID", "")),
                    severity=normalize_severity(m.get("Severity")),
                    title=str(m.get("Title", "")),
                    location=target,
                )
            )
        for s in result.get("Secrets") or []:
            secrets += 1
            findings.append(
                Finding(
                    id=str(s.get("RuleID", "secret")),
                    severity=normalize_severity(s.get("Severity")),
                    title=str(s.get("Title", "")),
                    location=target,
                )
            )

    metrics = {
        "artifact": data.get("ArtifactName"),
        "targets": len(targets),
        "vulnerabilities": vulns,
        "misconfigurations": misconfigs,
        "secrets": secrets,
    }
    return _counted(findings), _top(findings), metrics


def extract_grype(data: Dict[str, Any]) -> Extracted:
    """Grype `-o json` : matches[].vulnerability.severity."""
    findings: List[Finding] = []
    fixable = 0
    for match in data.get("matches") or []:
        vuln = match.get("vulnerability") or {}
        artifact = match.get("artifact") or {}
        if (vuln.get("fix") or {}).get("state") == "fixed":
            fixable += 1
        findings.append(
            Finding(
                id=str(vuln.get("id", "")),
                severity=normalize_severity(vuln.get("severity")),
                title=f"{artifact.get('name', '')} {artifact.get('version', '')}".strip(),
                location=str(artifact.get("type", "")),
            )
        )
    return _counted(findings), _top(findings), {"matches": len(findings), "fixable": fixable}


def extract_syft(data: Dict[str, Any]) -> Extracted:
    """SBOM Syft JSON (`artifacts`) ou CycloneDX (`components`) : inventaire, pas de sévérité."""
    components = data.get("artifacts")
    fmt = "syft-json"
    if components is None:
        components = data.get("components") or []
        fmt = "cyclonedx"
    by_type = Counter(str(c.get("type", "unknown")) for c in components if isinstance(c, dict))
    metrics = {"format": fmt, "components": len(components), "by_type": dict(by_type)}
    return SeverityCounts(), [], metrics


def extract_dependency_check(data: Dict[str, Any]) -> Extracted:
    """OWASP Dependency-Check JSON : dependencies[].vulnerabilities[].severity."""
    findings: List[Finding] = []
    deps = data.get("dependencies") or []
    vulnerable = 0
    for dep in deps:
        vulns = dep.get("vulnerabilities") or []
        if vulns:
            vulnerable += 1
        for v in vulns:
            findings.append(
                Finding(
                    id=str(v.get("name", "")),
                    severity=normalize_severity(v.get("severity")),
                    title=str(v.get("description", ""))[:160],
                    location=str(dep.get("fileName", "")),
                )
            )
    metrics = {"dependencies": len(deps), "vulnerable_dependencies": vulnerable}
    return _counted(findings), _top(findings), metrics


# Semgrep : ERROR/WARNING/INFO
_SEMGREP_LEVELS = {"error": "high", "warning": "medium", "info": "low"}


def extract_semgrep(data: Dict[str, Any]) -> Extracted:
    findings: List[Finding] = []
    for r in data.get("results") or []:
        extra = r.get("extra") or {}
        sev = _SEMGREP_LEVELS.get(str(extra.get("severity", "")).lower(), "unknown")
        findings.append(
            Finding(
                id=str(r.get("check_id", "")),
                severity=sev,
                title=str(extra.get("message", ""))[:160],
                location=f"{r.get('path', '')}:{(r.get('start') or {}).get('line', '')}",
            )
        )
    metrics = {"results": len(findings), "errors": len(data.get("errors") or [])}
    return _counted(findings), _top(findings), metrics


# Lint : un problème de style ne doit jamais peser comme une vulnérabilité
_LINT_LEVELS = {"error": "medium", "warning": "low", "info": "info", "style": "info", "ignore": "info"}


def extract_hadolint(data: Any) -> Extracted:
    """Hadolint `--format json` : liste de {code, level, line, file, message}."""
    if not isinstance(data, list):
        raise TypeError(f"liste de problèmes attendue, reçu {type(data).__name__}")
    items = data
    findings = [
        Finding(
            id=str(i.get("code", "")),
            severity=_LINT_LEVELS.get(str(i.get("level", "")).lower(), "unknown"),
            title=str(i.get("message", "")),
            location=f"{i.get('file', '')}:{i.get('line', '')}",
        )
        for i in items
        if isinstance(i, dict)
    ]
    return _counted(findings), _top(findings), {"issues": len(findings)}


def extract_checkstyle(root: ET.Element) -> Extracted:
    """Checkstyle XML : <file name><error line severity message source/></file>."""
    findings: List[Finding] = []
    files_with_issues = 0
    for f in root.iter("file"):
        errors = list(f.iter("error"))
        if errors:
            files_with_issues += 1
        for e in errors:
            source = str(e.get("source", ""))
            findings.append(
                Finding(
                    id=source.rsplit(".", 1)[-1] or "checkstyle",
                    severity=_LINT_LEVELS.get(str(e.get("severity", "")).lower(), "unknown"),
                    title=str(e.get("message", "")),
                    location=f"{f.get('name', '')}:{e.get('line', '')}",
                )
            )
    metrics = {"violations": len(findings), "files_with_violations": files_with_issues}
    return _counted(findings), _top(findings), metrics


def extract_sonar(data: Dict[str, Any]) -> Extracted:
    """
    Réponse SonarQube `api/qualitygates/project_status` (récupérée par le pipeline).

    Pas de sévérités : le statut du quality gate est porté par metrics["quality_gate"].
    """
    status = data.get("projectStatus") or {}
    failed = [
        {
            "metric": c.get("metricKey"),
            "actual": c.get("actualValue"),
            "threshold": c.get("errorThreshold"),
        }
        for c in status.get("conditions") or []
        if str(c.get("status", "")).upper() == "ERROR"
    ]
    metrics = {"quality_gate": str(status.get("status", "NONE")).upper(), "failed_conditions": failed}
    return SeverityCounts(), [], metrics


# -----------------------------
# Registre des outils
# -----------------------------
@dataclass(frozen=True)
class ToolSpec:
    name: str
    label: str
    category: Category
    filename: str
    fmt: str  # "json" | "xml"
    extractor: Callable[[Any], Extracted]


TOOLS: Dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec("gitleaks", "Gitleaks", Category.SECRETS, "gitleaks-report.json", "json", extract_gitleaks),
        ToolSpec("trivy", "Trivy", Category.CONTAINER, "trivy-report.json", "json", extract_trivy),
        ToolSpec("syft", "Syft (SBOM)", Category.SBOM, "sbom.json", "json", extract_syft),
        ToolSpec("grype", "Grype", Category.SCA, "grype-report.json", "json", extract_grype),
        ToolSpec(
            "dependency-check",
            "OWASP Dependency-Check",
            Category.SCA,
            "dependency-check-report.json",
            "json",
            extract_dependency_check,
        ),
        ToolSpec("semgrep", "Semgrep", Category.SAST, "semgrep-report.json", "json", extract_semgrep),
        ToolSpec("checkstyle", "Checkstyle", Category.LINT, "checkstyle-result.xml", "xml", extract_checkstyle),
        ToolSpec("hadolint", "Hadolint", Category.LINT, "hadolint-report.json", "json", extract_hadolint),
        ToolSpec("sonarqube", "SonarQube", Category.QUALITY, "sonar-quality-gate.json", "json", extract_sonar),
    )
}


def _load(spec: ToolSpec, path: Path) -> Any:
    """Charge le fichier natif ; lève ReportingError si illisible."""
    try:
        if spec.fmt == "xml":
            return ET.parse(str(path)).getroot()
        text = path.read_text(encoding="utf-8").strip()
        # Certains outils écrivent un fichier vide quand il n’y a rien à signaler
        return json.loads(text) if text else ([] if spec.name in ("gitleaks", "hadolint") else {})
    except (ET.ParseError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ReportingError(spec.name, str(path), f"format invalide ({exc})") from exc
    except OSError as exc:
        raise ReportingError(spec.name, str(path), f"lecture impossible ({exc})") from exc


def _placeholder_reason(data: Any) -> Optional[str]:
    if isinstance(data, dict) and data.get(PLACEHOLDER_KEY):
        return str(data.get("reason") or "placeholder")
    if isinstance(data, ET.Element) and data.get("placeholder") == "true":
        return str(data.get("reason") or "placeholder")
    return None


def parse_report(tool: str, path: Path) -> ScanSummary:
    """Produit le ScanSummary d’un outil à partir de son fichier de rapport."""
    spec = TOOLS[tool]
    base = {"tool": spec.name, "category": spec.category, "source": str(path)}

    if not path.exists():
        return ScanSummary(**base, status=ScanStatus.MISSING, message="Rapport absent")

    try:
        data = _load(spec, path)
        reason = _placeholder_reason(data)
        if reason is not None:
            return ScanSummary(**base, status=ScanStatus.MISSING, message=reason)
        counts, findings, metrics = spec.extractor(data)
    except ReportingError as exc:
        log.warning("report_unreadable: %s", exc.reason, extra={"tool": tool, "report": str(path)})
        return ScanSummary(**base, status=ScanStatus.ERROR, message=exc.reason)
    except (AttributeError, TypeError) as exc:
        # Fichier JSON valide mais structure inattendue (ex : liste à la place d’un objet)
        log.warning("report_unexpected_shape", extra={"tool": tool, "report": str(path)})
        return ScanSummary(**base, status=ScanStatus.ERROR, message=f"structure inattendue ({exc})")

    return ScanSummary(
        **base,
        status=ScanStatus.OK,
        counts=counts,
        findings=findings,
        metrics=metrics,
    )


def collect_reports(reports_dir: Path, tools: Optional[List[str]] = None) -> List[ScanSummary]:
    """Parse tous les rapports attendus dans reports_dir (ordre du registre)."""
    names = tools or list(TOOLS)
    summaries = []
    for name in names:
        summary = parse_report(name, reports_dir / TOOLS[name].filename)
        log.info("report_parsed", extra={"tool": name, "status": summary.status.value})
        summaries.append(summary)
    return summaries
