"""Tests for the command-line statement importer."""

import pytest

from tools import import_statement
from tools.import_statement import main

CSV_SAMPLE = """Date,Description,Amount
2024-01-15,Customer invoice payment,1250.00
2024-01-16,Office rent,-800.00
2024-01-17,Unknown,abc
"""


@pytest.fixture
def statement_file(tmp_path):
    path = tmp_path / "jan.csv"
    path.write_text(CSV_SAMPLE, encoding="utf-8")
    return path


def test_dry_run_prints_preview(statement_file, capsys):
    assert main([str(statement_file), "--dry-run"]) == 0

    out = capsys.readouterr().out
    assert "2024-01-15" in out
    assert "revenue" in out
    assert "rent" in out
    assert "2 transactions, 1 rows skipped, range 2024-01-15 .. 2024-01-16" in out


def test_dry_run_format_error(tmp_path, capsys):
    path = tmp_path / "bad.csv"
    path.write_text("Amount\n10\n", encoding="utf-8")

    assert main([str(path), "--dry-run"]) == 1
    assert "Missing required columns" in capsys.readouterr().out


def test_import_requires_user_id(statement_file, capsys):
    assert main([str(statement_file)]) == 1
    assert "--user-id is required" in capsys.readouterr().out


def test_import_without_service_key(statement_file, monkeypatch, capsys):
    def no_client():
        raise RuntimeError("SUPABASE_SERVICE_KEY is not set")

    monkeypatch.setattr(import_statement, "get_service_client", no_client)

    assert main([str(statement_file), "--user-id", "user-1"]) == 1
    assert "SUPABASE_SERVICE_KEY" in capsys.readouterr().out


def test_import_runs_upload_flow(statement_file, monkeypatch, capsys):
    from apps.api.conftest import FakeSupabase

    fake = FakeSupabase()
    monkeypatch.setattr(import_statement, "get_service_client", lambda: fake)

    assert main([str(statement_file), "--user-id", "user-1", "--bank-name", "ING"]) == 0

    [statement] = fake.tables["bank_statements"]
    assert statement["status"] == "completed"
    assert statement["uploaded_by"] == "user-1"
    assert statement["bank_name"] == "ING"
    assert len(fake.tables["bank_transactions"]) == 2
    assert f"Imported statement {statement['id']}" in capsys.readouterr().out


def test_import_persistence_error(statement_file, monkeypatch, capsys):
    from apps.api.conftest import FakeSupabase

    fake = FakeSupabase()
    fake.fail("bank_statements", "insert")
    monkeypatch.setattr(import_statement, "get_service_client", lambda: fake)

    assert main([str(statement_file), "--user-id", "user-1"]) == 1
    assert "Failed to create statement record" in capsys.readouterr().out
