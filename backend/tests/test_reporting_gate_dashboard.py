from __future__ import annotations

import json

import pytest

from kaddem.reporting.dashboard import build_report, render_dashboard, write_dashboard
from kaddem.reporting.gate import evaluate_gate
from kaddem.reporting.models import Category, Finding, ScanStatus, ScanSummary, SeverityCounts


def _summary(tool, category, status=ScanStatus.OK, metrics=None, findings=None, **counts):
    return ScanSummary(
        tool=tool,
        category=category,
        status=status,
        counts=SeverityCounts(**counts),
        metrics=metrics or {},
        findings=findings or [],
    )


def test_gate_passes_on_clean_reports():
    gate = evaluate_gate(
        [
            _summary("trivy", Category.CONTAINER, medium=4, low=10),
            _summary("gitleaks", Category.SECRETS),
        ],
        max_critical=0,
        max_high=-1,
        max_secrets=0,
    )
    assert gate.passed
    assert gate.reasons == []
    assert gate.thresholds == {"max_critical": 0, "max_high": -1, "max_secrets": 0}


def test_gate_fails_on_critical_secrets_and_sonar():
    gate = evaluate_gate(
        [
            _summary("trivy", Category.CONTAINER, critical=1, high=3),
            _summary("gitleaks", Category.SECRETS, high=2),
            _summary("sonarqube", Category.QUALITY, metrics={"quality_gate": "ERROR"}),
        ],
        max_critical=0,
        max_high=5,
        max_secrets=0,
    )
    assert not gate.passed
    assert any(r.startswith("CRITICAL") for r in gate.reasons)
    assert any(r.startswith("Secrets") for r in gate.reasons)
    assert any("sonarqube" in r for r in gate.reasons)
    assert not any(r.startswith("HIGH") for r in gate.reasons)


def test_gate_ignores_lint_and_missing_reports():
    gate = evaluate_gate(
        [
            _summary("checkstyle", Category.LINT, medium=50),
            _summary("grype", Category.SCA, status=ScanStatus.MISSING, critical=9),
            _summary("semgrep", Category.SAST, status=ScanStatus.ERROR),
        ],
        max_critical=0,
        max_high=0,
        max_secrets=0,
    )
    assert gate.passed


def test_gate_high_threshold():
    gate = evaluate_gate([_summary("grype", Category.SCA, high=3)], max_critical=0, max_high=2, max_secrets=0)
    assert gate.reasons == ["HIGH vulnerabilities: 3 (max: 2)"]


def test_report_risk_level_and_totals():
    summaries = [
        _summary("trivy", Category.CONTAINER, high=2, low=1),
        _summary("semgrep", Category.SAST, medium=1),
    ]
    report = build_report(summaries, project="kaddem", build="12")
    assert report.risk_level == "HIGH"
    assert report.totals.high == 2
    assert report.totals.total == 4

    with_secret = build_report(summaries + [_summary("gitleaks", Category.SECRETS, high=1)], project="kaddem")
    assert with_secret.risk_level == "CRITICAL"
    assert with_secret.secrets == 1

    assert build_report([], project="kaddem").risk_level == "LOW"


def test_dashboard_escapes_tool_output():
    finding = Finding(id="XSS-1", severity="high", title="<script>alert(1)</script>", location="a.js:1")
    report = build_report(
        [_summary("semgrep", Category.SAST, high=1, findings=[finding])],
        project="kaddem",
        build="7",
    )
    html = render_dashboard(report)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html
    assert "Semgrep" in html
    assert "Build <strong>7</strong>" in html


def test_write_dashboard_html_and_json(tmp_path):
    report = build_report(
        [
            _summary("trivy", Category.CONTAINER, critical=1),
            _summary("syft", Category.SBOM, metrics={"components": 12}),
            _summary("hadolint", Category.LINT, status=ScanStatus.MISSING),
        ],
        project="kaddem",
        build="99",
    )
    html_path, json_path = write_dashboard(report, tmp_path / "out" / "security-dashboard.html")

    assert html_path.exists()
    assert json_path.name == "security-dashboard.json"
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data["project"] == "kaddem"
    assert data["build"] == "99"
    assert data["risk_level"] == "CRITICAL"
    assert data["totals"]["critical"] == 1
    assert data["gate"]["passed"] is False
    assert [s["tool"] for s in data["summaries"]] == ["trivy", "syft", "hadolint"]
    assert data["summaries"][2]["status"] == "missing"


def test_write_dashboard_refuses_json_output(tmp_path):
    report = build_report([], project="kaddem")
    with pytest.raises(ValueError):
        write_dashboard(report, tmp_path / "security-dashboard.json")
    assert not (tmp_path / "security-dashboard.json").exists()
