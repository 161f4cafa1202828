"""CLI tools for Squeak administration."""

import anyio
import click
import httpx

from squeak.core.config import settings
from squeak.core.exceptions import SqueakError
from squeak.db.enums import DEFAULT_PERMALINK_BASE
from squeak.db.session import SessionLocal
from squeak.services import config_service, org_service, slack_import_service
from squeak.services.slack_service import SlackApiError, SlackClient


@click.group()
def cli():
    """Squeak CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--org-id", default=None, help="Explicit organization id (defaults to a UUID)")
@click.option("--permalink-base", default=DEFAULT_PERMALINK_BASE, show_default=True,
              help="Path prefix of question permalinks")
@click.option("--no-auto-publish", is_flag=True, help="Hold new questions for moderation")
def create_org(name: str, org_id: str | None, permalink_base: str, no_auto_publish: bool):
    """
    Create an organization and its widget config.
    
    Example:
        python -m squeak.cli create-org --name "Acme" --permalink-base questions
    """
    db = SessionLocal()
    try:
        if org_id and org_service.get_org_by_id(db, org_id):
            click.echo(f"❌ Organization '{org_id}' already exists")
            return

        org = org_service.create_org(
            db,
            name=name,
            org_id=org_id,
            permalink_base=permalink_base,
            question_auto_publish=not no_auto_publish,
        )
        click.echo(f"✓ Created organization: {name}")
        click.echo(f"  ID: {org.id}")
        click.echo(f"  Permalinks: /{permalink_base.strip('/')}/<question>")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--org-id", required=True, help="Organization to import into")
def import_slack(org_id: str):
    """
    Import every not-yet-imported thread of the org's Slack question channel.

    Imported threads have no subject or slug, so they stay unpublished
    until an admin edits them.
    """
    db = SessionLocal()
    try:
        config = config_service.require_config(db, org_id)
        token, channel = slack_import_service.require_slack_settings(config)

        async def fetch():
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as http_client:
                client = SlackClient(token=token, http_client=http_client)
                return await slack_import_service.list_importable_threads(db, org_id, client, channel)

        threads = anyio.run(fetch)
        created, skipped = slack_import_service.import_threads(db, org_id, threads)
        click.echo(f"✓ Imported {len(created)} threads ({len(skipped)} skipped)")
    except (SqueakError, SlackApiError) as e:
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
