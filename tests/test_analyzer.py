import json

from rugwatch.analyzer import ContractAnalyzer, audit_source
from rugwatch.models import Severity
from rugwatch.reporter import export_json
from rugwatch.utils import discover_files, read_source_safe


def write_tree(tmp_path, risky_source, clean_source):
    (tmp_path / "contracts").mkdir()
    (tmp_path / "contracts" / "Risky.sol").write_text(risky_source)
    (tmp_path / "contracts" / "Plain.sol").write_text(clean_source)
    (tmp_path / "contracts" / "notes.md").write_text("selfdestruct")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "Dep.sol").write_text(risky_source)


def test_discover_files_filters_and_prunes(tmp_path, risky_source, clean_source):
    write_tree(tmp_path, risky_source, clean_source)
    found = discover_files(str(tmp_path))
    names = sorted(p.rsplit("/", 1)[-1] for p in found)
    assert names == ["Plain.sol", "Risky.sol"]


def test_discover_single_file(tmp_path):
    target = tmp_path / "One.sol"
    target.write_text("contract One {}")
    assert discover_files(str(target)) == [str(target)]


def test_read_source_safe_missing_file(tmp_path):
    assert read_source_safe(str(tmp_path / "missing.sol")) is None


def test_analyzer_sorts_by_risk(tmp_path, risky_source, clean_source):
    write_tree(tmp_path, risky_source, clean_source)
    calls = []
    run = ContractAnalyzer([str(tmp_path)]).scan(
        progress_callback=lambda path, idx, total: calls.append((idx, total))
    )

    assert run.total_files == 2
    assert calls == [(0, 2), (1, 2)]
    assert run.reports[0].file_path.endswith("Risky.sol")
    assert run.reports[0].risk_score == 100
    assert run.reports[1].risk_score == 0
    assert run.total_findings == 7
    assert run.severity_counts == {"HIGH": 4, "MEDIUM": 3, "LOW": 0}
    assert run.errors == 0


def test_severity_level_filters_before_scoring(risky_source):
    report = audit_source(risky_source, severity_level=Severity.HIGH)
    assert {f.severity for f in report.findings} == {Severity.HIGH}
    assert report.risk_score == 100
    assert report.summary.vulnerabilities_count == {"high": 4, "medium": 0, "low": 0}


def test_audit_source_on_empty_text():
    report = audit_source("")
    assert report.findings == []
    assert report.risk_score == 0
    assert report.error is None


def test_export_json(tmp_path, risky_source, clean_source):
    write_tree(tmp_path, risky_source, clean_source)
    run = ContractAnalyzer([str(tmp_path / "contracts")]).scan()
    out = tmp_path / "report.json"
    export_json(run, str(out))

    data = json.loads(out.read_text())
    assert data["total_files"] == 2
    first = data["results"][0]
    assert first["risk_score"] == 100
    assert first["findings"][0]["rule_key"] == "reentrancy"
    assert first["findings"][0]["severity"] == "high"
    assert first["summary"]["privileged_roles"] == [
        "Owner can mint new tokens",
        "Owner can withdraw funds",
    ]
