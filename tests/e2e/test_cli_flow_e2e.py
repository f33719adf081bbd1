from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from profit_ledger.cli import app
from profit_ledger.storage import PROFIT_DATA_KEY
from tests.helpers.sqlite import read_raw

runner = CliRunner()


def _invoke(data_dir: Path, *args: str):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args])


def _saved_id(output: str) -> str:
    m = re.search(r"Saved \d{4}-\d{2}-\d{2} (\w+)", output)
    assert m, output
    return m.group(1)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "ledger-data"


def test_e2e_record_and_report_a_month(data_dir: Path):
    # -------------------------
    # Record
    # -------------------------
    r = _invoke(data_dir, "add", "2025-06-01", "1000", "-c", "salary", "-t", "income")
    assert r.exit_code == 0, r.output
    salary_id = _saved_id(r.output)

    r = _invoke(data_dir, "add", "2025-06-02", "400", "-c", "food", "--memo", "groceries")
    assert r.exit_code == 0, r.output
    food_id = _saved_id(r.output)

    doc = json.loads((data_dir / f"{PROFIT_DATA_KEY}.json").read_text(encoding="utf-8"))
    assert doc["2025-06-01"][0]["id"] == salary_id
    assert doc["2025-06-02"][0] == {
        "id": food_id,
        "amount": 400,
        "type": "expense",
        "categoryId": "food",
        "memo": "groceries",
    }

    # -------------------------
    # Views
    # -------------------------
    r = _invoke(data_dir, "day", "2025-06-02")
    assert r.exit_code == 0, r.output
    assert "Food" in r.output
    assert "Total: -400" in r.output

    r = _invoke(data_dir, "month", "2025-06")
    assert r.exit_code == 0, r.output
    assert "Net: +600" in r.output
    assert "Income: 1,000  Expense: 400" in r.output

    r = _invoke(data_dir, "breakdown", "2025-06")
    assert r.exit_code == 0, r.output
    assert "Food" in r.output
    assert "100.0%" in r.output
    assert "Total: 400" in r.output

    r = _invoke(data_dir, "breakdown", "2025-07", "-t", "income")
    assert "No income entries in 2025-07." in r.output

    r = _invoke(data_dir, "list", "--from", "2025-06-01", "--to", "2025-06-01", "-t", "income")
    assert r.exit_code == 0, r.output
    assert "Salary" in r.output
    assert "Food" not in r.output

    r = _invoke(data_dir, "list", "--from", "2025-06-30", "--to", "2025-06-01")
    assert "No entries between 2025-06-30 and 2025-06-01." in r.output

    # -------------------------
    # Edit and remove
    # -------------------------
    r = _invoke(data_dir, "add", "2025-06-03", "450", "-c", "food", "--id", food_id)
    assert r.exit_code == 0, r.output
    r = _invoke(data_dir, "day", "2025-06-02")
    assert "Total: +0" in r.output

    r = _invoke(data_dir, "remove", "2025-06-03", food_id)
    assert r.exit_code == 0, r.output
    assert f"Removed 2025-06-03 {food_id}" in r.output

    doc = json.loads((data_dir / f"{PROFIT_DATA_KEY}.json").read_text(encoding="utf-8"))
    assert list(doc) == ["2025-06-01"]


def test_e2e_rejects_bad_input_without_writing(data_dir: Path):
    r = _invoke(data_dir, "add", "2025-06-01", "0", "-c", "food")
    assert r.exit_code == 1
    assert "amount: must be greater than zero" in r.output

    r = _invoke(data_dir, "add", "2025-06-01", "10", "-c", "yacht")
    assert r.exit_code == 1
    assert "unknown category" in r.output

    r = _invoke(data_dir, "add", "June 1st", "10", "-c", "food")
    assert r.exit_code == 1

    r = _invoke(data_dir, "remove", "2025-06-01", "missing")
    assert r.exit_code == 1
    assert "no entry missing on 2025-06-01" in r.output

    r = _invoke(data_dir, "month", "2025-13")
    assert r.exit_code == 1
    assert "invalid month" in r.output

    assert not (data_dir / f"{PROFIT_DATA_KEY}.json").exists()


def test_e2e_migrate_legacy_document(data_dir: Path):
    data_dir.mkdir(parents=True)
    path = data_dir / f"{PROFIT_DATA_KEY}.json"
    path.write_text(json.dumps({"2025-05-10": {"amount": 500}}), encoding="utf-8")

    r = _invoke(data_dir, "migrate")
    assert r.exit_code == 0, r.output
    assert "Upgraded: wrapped=1 ids=1 types=1 dropped=0" in r.output

    doc = json.loads(path.read_text(encoding="utf-8"))
    (element,) = doc["2025-05-10"]
    assert element["type"] == "expense"
    assert element["id"].startswith("20250510000000")

    r = _invoke(data_dir, "migrate")
    assert "Already up to date." in r.output


def test_e2e_corrupt_document_is_left_alone(data_dir: Path):
    data_dir.mkdir(parents=True)
    path = data_dir / f"{PROFIT_DATA_KEY}.json"
    path.write_text("{not json", encoding="utf-8")

    r = _invoke(data_dir, "month", "2025-06")
    assert r.exit_code == 0, r.output
    assert "not valid JSON" in r.output
    assert "No entries in 2025-06." in r.output

    r = _invoke(data_dir, "migrate")
    assert r.exit_code == 1
    assert path.read_text(encoding="utf-8") == "{not json"


def test_e2e_legacy_entry_keeps_its_id_across_invocations(data_dir: Path):
    data_dir.mkdir(parents=True)
    path = data_dir / f"{PROFIT_DATA_KEY}.json"
    path.write_text(
        json.dumps({"2025-05-10": {"amount": 500, "type": "income", "categoryId": "salary"}}),
        encoding="utf-8",
    )

    # -------------------------
    # First view saves the synthesized id
    # -------------------------
    r = _invoke(data_dir, "day", "2025-05-10")
    assert r.exit_code == 0, r.output
    (element,) = json.loads(path.read_text(encoding="utf-8"))["2025-05-10"]
    legacy_id = element["id"]
    assert legacy_id in r.output

    r = _invoke(data_dir, "day", "2025-05-10")
    assert legacy_id in r.output

    # -------------------------
    # Edit in place, then remove, in separate invocations
    # -------------------------
    r = _invoke(
        data_dir, "add", "2025-05-10", "700", "-c", "salary", "-t", "income", "--id", legacy_id
    )
    assert r.exit_code == 0, r.output
    assert f"Saved 2025-05-10 {legacy_id}" in r.output

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc == {
        "2025-05-10": [
            {"id": legacy_id, "amount": 700, "type": "income", "categoryId": "salary", "memo": ""}
        ]
    }

    r = _invoke(data_dir, "remove", "2025-05-10", legacy_id)
    assert r.exit_code == 0, r.output
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_e2e_logs_stay_quiet_by_default(data_dir: Path, monkeypatch: pytest.MonkeyPatch):
    r = _invoke(data_dir, "add", "2025-06-01", "300", "-c", "food")
    assert r.exit_code == 0, r.output
    assert "store:upsert" not in r.output

    monkeypatch.setenv("PROFIT_LEDGER_LOG_LEVEL", "INFO")
    r = _invoke(data_dir, "add", "2025-06-01", "200", "-c", "food")
    assert r.exit_code == 0, r.output
    assert "store:upsert action=append" in r.output


def test_e2e_database_url_from_dotenv(tmp_path: Path):
    db_file = tmp_path / "cli.db"
    url = f"sqlite+pysqlite:///{db_file}"
    (Path.cwd() / ".env").write_text(f"DATABASE_URL={url}\n", encoding="utf-8")

    r = runner.invoke(app, ["add", "2025-06-01", "1200", "-c", "transport"])
    assert r.exit_code == 0, r.output
    entry_id = _saved_id(r.output)

    doc = json.loads(read_raw(url, PROFIT_DATA_KEY) or "{}")
    assert doc["2025-06-01"][0]["id"] == entry_id
    assert not (Path.cwd() / ".profit_ledger").exists()


def test_e2e_categories_listing():
    r = runner.invoke(app, ["categories"])
    assert r.exit_code == 0, r.output
    for cid in ("food", "salary", "other"):
        assert cid in r.output
