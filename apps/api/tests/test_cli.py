"""Tests for the admin CLI."""

from click.testing import CliRunner

from squeak import cli as cli_module
from squeak.db.models import Question, SqueakConfig
from squeak.services import config_service


def test_create_org_creates_config(db):
    runner = CliRunner()

    result = runner.invoke(
        cli_module.cli,
        ["create-org", "--name", "Acme", "--org-id", "acme", "--permalink-base", "/faq/", "--no-auto-publish"],
    )

    assert result.exit_code == 0, result.output
    assert "Created organization: Acme" in result.output
    config = db.query(SqueakConfig).filter(SqueakConfig.organization_id == "acme").one()
    assert config.permalink_base == "faq"
    assert config.question_auto_publish is False
    assert config_service.permalink_prefix(config) == "/faq/"


def test_create_org_refuses_existing_id(db, test_org):
    result = CliRunner().invoke(cli_module.cli, ["create-org", "--name", "Again", "--org-id", test_org.id])

    assert result.exit_code == 0
    assert "already exists" in result.output


class FakeSlackClient:
    def __init__(self, token, http_client, base_url=None):
        assert token == "xoxb-cli"

    async def conversations_history(self, channel):
        return [
            {"ts": "1700000300.000100", "text": "First question"},
            {"ts": "1700000400.000100", "subtype": "channel_join", "text": "joined"},
        ]

    async def conversations_replies(self, channel, ts):
        return []


def test_import_slack_imports_unpublished_threads(db, test_org, monkeypatch):
    test_org.config.slack_api_key = "xoxb-cli"
    test_org.config.slack_question_channel = "C0QUESTIONS"
    db.commit()
    monkeypatch.setattr(cli_module, "SlackClient", FakeSlackClient)

    result = CliRunner().invoke(cli_module.cli, ["import-slack", "--org-id", test_org.id])

    assert result.exit_code == 0, result.output
    assert "Imported 1 threads (0 skipped)" in result.output
    question = db.query(Question).one()
    assert question.subject == "No subject"
    assert question.published is False
    assert question.slack_timestamp == "1700000300.000100"


def test_import_slack_without_config(db, test_org):
    result = CliRunner().invoke(cli_module.cli, ["import-slack", "--org-id", test_org.id])

    assert "Slack is not configured" in result.output
