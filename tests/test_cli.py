"""Tests for the command line interface"""

import re

from typer.testing import CliRunner

from leasedocs.cli.main import app

runner = CliRunner()

CONTRACT_ARGS = [
    "contract",
    "--kind", "tenant",
    "--counterpart-id", "ten-1",
    "--counterpart-name", "Bola Ade",
    "--property-id", "prop-1",
    "--property-name", "Sunset Villas",
    "--currency", "USD",
    "--start", "2024-04-01",
    "--end", "2025-03-31",
    "--amount", "1200",
]


def _plain(output: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", output)


def _document_id(output: str) -> str:
    match = re.search(r"ID: ([0-9a-f-]{36})", _plain(output))
    assert match, output
    return match.group(1)


class TestCli:
    def test_init(self):
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert "Initialization complete" in _plain(result.output)

    def test_template_add_and_list(self, tmp_path):
        body = tmp_path / "lease.txt"
        body.write_text("Lease for {{TENANT_NAME}} at {{PROPERTY_NAME}}", encoding="utf-8")

        result = runner.invoke(app, [
            "template-add", "--name", "Standard Lease",
            "--description", "Residential", "--body-file", str(body),
        ])
        assert result.exit_code == 0
        assert "TENANT_NAME, PROPERTY_NAME" in _plain(result.output)

        listed = runner.invoke(app, ["templates"])
        assert "Standard" in _plain(listed.output)

    def test_variables(self, tmp_path):
        body = tmp_path / "notice.txt"
        body.write_text("{{DATE}} {{NAME}} {{DATE}}", encoding="utf-8")
        result = runner.invoke(app, ["variables", str(body)])
        assert result.exit_code == 0
        output = _plain(result.output)
        assert output.index("DATE") < output.index("NAME")

    def test_contract_send_download(self, tmp_path):
        created = runner.invoke(app, CONTRACT_ARGS)
        assert created.exit_code == 0, created.output
        document_id = _document_id(created.output)

        sent = runner.invoke(app, ["send", document_id, "--user", "owner-1"])
        assert sent.exit_code == 0
        assert "pending" in _plain(sent.output)

        again = runner.invoke(app, ["send", document_id])
        assert again.exit_code == 1

        output = tmp_path / "lease.docx"
        downloaded = runner.invoke(app, ["download", document_id, "--format", "docx", "--output", str(output)])
        assert downloaded.exit_code == 0
        assert output.read_bytes()[:2] == b"PK"

        listed = runner.invoke(app, ["documents", "--status", "pending"])
        assert "pending" in _plain(listed.output)

    def test_contract_needs_one_compensation(self):
        args = [a for a in CONTRACT_ARGS if a not in ("--amount", "1200")]
        result = runner.invoke(app, args)
        assert result.exit_code == 1

    def test_invalid_term(self):
        args = CONTRACT_ARGS[:-4] + ["--end", "2023-01-01", "--amount", "1200"]
        result = runner.invoke(app, args)
        assert result.exit_code == 1

    def test_non_finite_percent(self):
        args = [a for a in CONTRACT_ARGS if a not in ("--amount", "1200")] + ["--percent", "NaN"]
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "finite" in _plain(result.output)
