import json

import pytest

from rugwatch.main import EXIT_BAD_INPUT, EXIT_HIGH_RISK, EXIT_OK, main


def run_cli(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def test_contract_command_exit_codes(tmp_path, risky_source, clean_source):
    risky = tmp_path / "Risky.sol"
    risky.write_text(risky_source)
    clean = tmp_path / "Plain.sol"
    clean.write_text(clean_source)

    assert run_cli(["contract", "--path", str(clean)]) == EXIT_OK
    assert run_cli(["contract", "--path", str(risky)]) == EXIT_HIGH_RISK


def test_contract_command_exports_json(tmp_path, risky_source):
    (tmp_path / "Risky.sol").write_text(risky_source)
    out = tmp_path / "out.json"
    code = run_cli(["contract", "--path", str(tmp_path), "--json-output", str(out), "-v"])
    assert code == EXIT_HIGH_RISK
    assert json.loads(out.read_text())["total_findings"] == 7


def test_contract_severity_filter_changes_exit_code(tmp_path):
    (tmp_path / "Owned.sol").write_text("contract A is Ownable { function transferOwnership() {} }")
    assert run_cli(["contract", "--path", str(tmp_path), "--severity-level", "high"]) == EXIT_OK


def test_signals_command(tmp_path, safe_signals, capsys):
    bundle = tmp_path / "signals.json"
    bundle.write_text(json.dumps({**safe_signals, "topHolderShare": "25%"}))
    out = tmp_path / "result.json"

    assert run_cli(["signals", str(bundle), "--json-output", str(out)]) == EXIT_OK
    assert "Top holder owns 25% of supply" in capsys.readouterr().out
    data = json.loads(out.read_text())
    assert data["level"] == "MEDIUM"
    assert data["reasons"] == ["Top holder owns 25% of supply"]


def test_signals_command_high_risk(tmp_path, safe_signals):
    bundle = tmp_path / "signals.json"
    bundle.write_text(json.dumps({**safe_signals, "honeypot": True}))
    assert run_cli(["signals", str(bundle)]) == EXIT_HIGH_RISK


def test_signals_command_rejects_incomplete_bundle(tmp_path, capsys):
    bundle = tmp_path / "signals.json"
    bundle.write_text(json.dumps({"honeypot": False}))
    assert run_cli(["signals", str(bundle)]) == EXIT_BAD_INPUT
    assert "missing signal fields" in capsys.readouterr().err


def test_signals_command_rejects_bad_json(tmp_path):
    bundle = tmp_path / "signals.json"
    bundle.write_text("{not json")
    assert run_cli(["signals", str(bundle)]) == EXIT_BAD_INPUT


def test_command_is_required():
    assert run_cli([]) == 2


def test_signals_command_rejects_non_utf8_file(tmp_path, capsys):
    bundle = tmp_path / "signals.json"
    bundle.write_bytes(b'{"honeypot": \xff}')
    assert run_cli(["signals", str(bundle)]) == EXIT_BAD_INPUT
    assert "Invalid signal bundle" in capsys.readouterr().err


def test_signals_command_rejects_nan_percentages(tmp_path):
    bundle = tmp_path / "signals.json"
    bundle.write_text(
        '{"honeypot": false, "sellTax": "5%", "buyTax": "2%", "topHolderShare": NaN,'
        ' "liquidityLocked": true, "liquidityLockShare": NaN, "verified": true}'
    )
    assert run_cli(["signals", str(bundle)]) == EXIT_BAD_INPUT
