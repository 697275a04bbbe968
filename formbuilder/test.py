"""Tests for the command line interface."""

import json

import httpx
import pytest

from formbuilder import __main__ as cli
from formbuilder.session import FormBuilder


@pytest.fixture
def schema_file(tmp_path, contact_schema):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(contact_schema))
    return path


@pytest.fixture
def fake_service(monkeypatch, contact_schema):
    """Route CLI sessions to an in-memory service; returns posted bodies."""
    posted: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if "/api/v1/forms/" in request.url.path:
            return httpx.Response(200, json={"version": 1, "schema": contact_schema})
        if request.method == "GET":
            return httpx.Response(404)
        posted.append(json.loads(request.content))
        return httpx.Response(200, json={"messageHeader": "Saved"})

    def factory(settings):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return FormBuilder(settings, http=http)

    monkeypatch.setattr(cli, "FormBuilder", factory)
    return posted


class TestLocalCommands:
    """Tests for validate and render."""

    @pytest.mark.unit
    def test_validate_invalid(self, tmp_path, schema_file, capsys):
        """Invalid answers print the error map and exit 1."""
        answers = tmp_path / "answers.json"
        answers.write_text("{}")
        assert cli.main(["validate", str(schema_file), str(answers)]) == 1
        errors = json.loads(capsys.readouterr().out)
        assert errors == {
            "name": "This field is required",
            "contact.email": "This field is required",
        }

    @pytest.mark.unit
    def test_validate_valid(self, tmp_path, schema_file, valid_contact_answers, capsys):
        """Valid answers exit 0."""
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps(valid_contact_answers))
        assert cli.main(["validate", str(schema_file), str(answers)]) == 0
        assert json.loads(capsys.readouterr().out) == {}

    @pytest.mark.unit
    def test_validate_missing_file(self, tmp_path, schema_file):
        """Unreadable input exits 1."""
        missing = tmp_path / "missing.json"
        assert cli.main(["validate", str(schema_file), str(missing)]) == 1

    @pytest.mark.unit
    def test_render_to_file(self, tmp_path, schema_file):
        """Render writes HTML to the output file."""
        output = tmp_path / "form.html"
        assert cli.main(["render", str(schema_file), "-o", str(output)]) == 0
        html = output.read_text()
        assert "<h2>Contact</h2>" in html
        assert 'name="contact.email"' in html

    @pytest.mark.unit
    def test_no_command(self, capsys):
        """No command prints help and exits 1."""
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestRemoteCommands:
    """Tests for fetch and submit against a fake service."""

    @pytest.mark.unit
    def test_fetch(self, fake_service, capsys):
        """Fetch prints the loaded form."""
        code = cli.main(["fetch", "--base-url", "http://fbms.test", "--form", "contact"])
        assert code == 0
        assert 'name="name"' in capsys.readouterr().out

    @pytest.mark.unit
    def test_fetch_requires_form(self, fake_service):
        """Without a form name the command fails."""
        assert cli.main(["fetch", "--base-url", "http://fbms.test"]) == 1

    @pytest.mark.unit
    def test_submit(self, tmp_path, fake_service, valid_contact_answers, capsys):
        """Submit posts the answers and prints the server notice."""
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps(valid_contact_answers))
        code = cli.main(
            ["submit", str(answers), "--base-url", "http://fbms.test", "--form", "contact"]
        )
        assert code == 0
        assert fake_service[0]["answers"] == valid_contact_answers
        assert "Saved" in capsys.readouterr().out

    @pytest.mark.unit
    def test_submit_invalid(self, tmp_path, fake_service, capsys):
        """Invalid answers are reported without posting."""
        answers = tmp_path / "answers.json"
        answers.write_text(json.dumps({"name": "J"}))
        code = cli.main(
            ["submit", str(answers), "--base-url", "http://fbms.test", "--form", "contact"]
        )
        assert code == 1
        assert fake_service == []
        assert "Must be at least 2 characters" in capsys.readouterr().out
