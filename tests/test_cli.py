from __future__ import annotations

import pytest

import main


@pytest.fixture
def run_cli(db, monkeypatch, capsys):
    monkeypatch.setenv("PORTFOLIO_PASSWORD", "secret123")

    def run(*argv):
        monkeypatch.setattr("sys.argv", ["main.py", *argv])
        code = main.main() or 0
        return code, capsys.readouterr().out

    return run


def test_register_add_and_summarize(run_cli):
    code, out = run_cli("register", "--email", "cli@example.com", "--name", "Cli")
    assert code == 0
    assert "Account created" in out

    code, out = run_cli(
        "add-investment", "--email", "cli@example.com", "--category", "stock", "--name", "Infosys",
        "--symbol", "INFY", "--amount", "1000", "--current", "1200", "--date", "2023-01-01",
    )
    assert code == 0
    assert "Added Infosys" in out

    code, out = run_cli("investments", "--email", "cli@example.com")
    assert "Infosys" in out
    assert "INFY" in out

    code, out = run_cli("summary", "--email", "cli@example.com", "--what-if", "-10")
    assert "ROI:" in out
    assert "20.00%" in out
    assert "-10%" in out


def test_transactions_roundtrip(run_cli):
    run_cli("register", "--email", "cli@example.com")
    code, out = run_cli(
        "add-transaction", "--email", "cli@example.com", "--type", "buy", "--symbol", "tcs",
        "--quantity", "2", "--price", "100", "--brokerage", "5",
    )
    assert code == 0
    assert "205.00" in out

    code, out = run_cli("transactions", "--email", "cli@example.com")
    assert "TCS" in out

    code, out = run_cli("delete-transaction", "1", "--email", "cli@example.com")
    assert code == 0
    code, out = run_cli("transactions", "--email", "cli@example.com")
    assert "No transactions found." in out


def test_invalid_input_returns_error_code(run_cli):
    run_cli("register", "--email", "cli@example.com")
    code, out = run_cli("add-investment", "--email", "cli@example.com", "--category", "Shares", "--name", "X")
    assert code == 1
    assert "Unknown category" in out


def test_wrong_password_exits(run_cli, monkeypatch):
    run_cli("register", "--email", "cli@example.com")
    monkeypatch.setenv("PORTFOLIO_PASSWORD", "wrong-pass")
    with pytest.raises(SystemExit):
        run_cli("investments", "--email", "cli@example.com")
