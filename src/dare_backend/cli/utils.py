import functools
from contextlib import contextmanager

import click
from sqlalchemy.exc import SQLAlchemyError

from dare_backend.database import get_session_factory
from dare_backend.permissions.errors import AccessControlError


@contextmanager
def open_session():
  """Session from the factory on the click context, or the configured database"""
  ctx = click.get_current_context(silent=True)
  factory = None
  if ctx is not None and isinstance(ctx.obj, dict):
    factory = ctx.obj.get("session_factory")

  db = (factory or get_session_factory())()
  try:
    yield db
  finally:
    db.close()


def handle_access_errors(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except AccessControlError as e:
      click.echo(f"[{click.style(e.code,fg='red')}] {e.message}", err=True)
      raise click.exceptions.Exit(1)
    except ValueError as e:
      click.echo(f"[{click.style('ValidationError',fg='red')}] {e}", err=True)
      raise click.exceptions.Exit(1)
    except SQLAlchemyError as e:
      click.echo(f"[{click.style('StoreUnavailable',fg='red')}] {e.args if e.args != () else 'Database error'}", err=True)
      raise click.exceptions.Exit(1)

  return wrapper
