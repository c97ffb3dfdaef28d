"""Tests for the vendorgate command line."""

import json

import pytest
from click.testing import CliRunner

from conftest import FakeModel, finding_json
from vendorgate import cli
from vendorgate.errors import ConfigurationError


@pytest.fixture
def documents(tmp_path):
    paths = []
    for name in ("soc2.txt", "background_check.txt", "financial_statement.txt", "insurance_coi.txt"):
        path = tmp_path / name
        path.write_text(f"Contents of {name}", encoding="utf-8")
        paths.append(str(path))
    return paths


def use_model(monkeypatch, model):
    monkeypatch.setattr(cli, "GeminiClient", lambda settings: model)


def test_score_passing_json(monkeypatch, documents):
    use_model(monkeypatch, FakeModel([finding_json(95)] * 4))
    result = CliRunner().invoke(cli.main, ["score", *documents, "--company", "Acme Ltd", "--format", "json"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["status"] == "passed"
    assert report["companyName"] == "Acme Ltd"


def test_score_failing_exit_code(monkeypatch, documents):
    use_model(monkeypatch, FakeModel([finding_json(20)]))
    result = CliRunner().invoke(cli.main, ["score", documents[0], "--format", "human"])
    assert result.exit_code == 2
    assert "FAILED" in result.output


def test_stale_upload_date(monkeypatch, documents):
    use_model(monkeypatch, FakeModel([finding_json(50)] * 4))
    result = CliRunner().invoke(cli.main, ["score", *documents, "--uploaded", "2001-01-01", "--format", "json"])
    assert result.exit_code == 2
    report = json.loads(result.output)
    assert len(report["complianceResult"]["issues"]) == 4
    assert report["requiredActions"] == ["Renew insurance certificate"]


def test_explicit_categories(monkeypatch, tmp_path):
    model = FakeModel([finding_json(90)])
    use_model(monkeypatch, model)
    path = tmp_path / "scan.txt"
    path.write_text("x")
    CliRunner().invoke(cli.main, ["score", str(path), "--category", "financial", "--format", "json"])
    assert "Analyze the following financial document" in model.prompts[0]


def test_too_many_categories(monkeypatch, documents):
    use_model(monkeypatch, FakeModel())
    result = CliRunner().invoke(cli.main, ["score", documents[0], "--category", "risk", "--category", "financial"])
    assert result.exit_code != 0
    assert "more --category values than files" in result.output


def test_csv_output(monkeypatch, documents, tmp_path):
    use_model(monkeypatch, FakeModel([finding_json(95)] * 4))
    out = tmp_path / "out.csv"
    result = CliRunner().invoke(cli.main, ["score", *documents, "--format", "csv", "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8").startswith("document,status,risk_level")


def test_missing_api_key(monkeypatch, documents):
    use_model(monkeypatch, FakeModel([ConfigurationError("Gemini API key not found")]))
    result = CliRunner().invoke(cli.main, ["score", documents[0]])
    assert result.exit_code == 1
    assert "Gemini API key not found" in result.output


def test_categorize():
    result = CliRunner().invoke(cli.main, ["categorize", "soc2.pdf", "tax_return.pdf", "photo.png"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["cybersecurity\tsoc2.pdf", "financial\ttax_return.pdf", "other\tphoto.png"]
