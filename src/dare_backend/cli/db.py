import os

import click
from alembic import command
from alembic.config import Config

from dare_backend.settings import settings

SCRIPT_LOCATION = os.path.join(os.path.dirname(os.path.dirname(__file__)), "alembic")


def alembic_config(url: str = None) -> Config:
  config = Config()
  config.set_main_option("script_location", SCRIPT_LOCATION)
  config.set_main_option("sqlalchemy.url", (url or settings.database_url).replace("%", "%%"))
  return config


@click.command()
@click.option("--url", default=None, help="Database URL, defaults to the configured database")
@click.option("--revision", default="head")
def upgrade(url, revision):
  command.upgrade(alembic_config(url), revision)
  click.echo(f"Database upgraded to {revision}")


@click.command()
@click.option("--url", default=None, help="Database URL, defaults to the configured database")
@click.option("--revision", default="-1")
def downgrade(url, revision):
  command.downgrade(alembic_config(url), revision)
  click.echo(f"Database downgraded to {revision}")


@click.group()
def db():
  pass

db.add_command(upgrade,"upgrade")
db.add_command(downgrade,"downgrade")
