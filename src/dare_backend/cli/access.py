import click

from dare_backend.cli.utils import handle_access_errors, open_session
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.defaults import apply_defaults, load_profile
from dare_backend.permissions.resolver import AuthorizationResolver


@click.command()
@click.option("--file", "-f", "path", type=click.Path(exists=True, dir_okay=False), default=None, help="Access defaults YAML")
@handle_access_errors
def seed(path):
  """Create the admin role, the permission catalog and the default roles"""
  profile = load_profile(path)
  with open_session() as db:
    summary = apply_defaults(db, profile)

  click.echo(
    f"{summary.permissions_created} permission(s), {summary.roles_created} role(s), "
    f"{summary.grants_applied} grant(s), {summary.overrides_applied} override rule(s) created"
  )
  for skipped in summary.skipped:
    click.echo(f"skipped {skipped}")


@click.command()
@click.argument("principal_id")
@click.argument("resource")
@click.argument("action")
@handle_access_errors
def check(principal_id, resource, action):
  with open_session() as db:
    allowed = AuthorizationResolver(db).check_by_id(principal_id, resource, action)

  click.echo("allowed" if allowed else "denied")
  if not allowed:
    raise click.exceptions.Exit(1)


@click.command()
@click.argument("principal_id")
@handle_access_errors
def permissions(principal_id):
  with open_session() as db:
    resolver = AuthorizationResolver(db)
    for pair in resolver.list_permissions_by_id(principal_id):
      click.echo(f"{pair.resource}:{pair.action}")


# Catalog

@click.command()
@handle_access_errors
def list_catalog():
  with open_session() as db:
    for resource, actions in sorted(AccessAdministration(db).catalog.grouped().items()):
      click.echo(f"{resource}: {', '.join(sorted(actions))}")


@click.command()
@click.argument("resource")
@click.argument("action")
@click.option("--description", "-d", default=None)
@handle_access_errors
def add_permission(resource, action, description):
  with open_session() as db:
    AccessAdministration(db).catalog.register(resource, action, description)
  click.echo(f"Registered {resource}:{action}")


@click.command()
@click.argument("resource")
@click.argument("action")
@handle_access_errors
def remove_permission(resource, action):
  with open_session() as db:
    AccessAdministration(db).catalog.remove(resource, action)
  click.echo(f"Removed {resource}:{action}")


@click.command()
@click.option("--resource", "-r", "resources", multiple=True, required=True)
@click.option("--action", "-a", "actions", multiple=True, required=True)
@handle_access_errors
def generate(resources, actions):
  with open_session() as db:
    created = AccessAdministration(db).catalog.generate_missing(resources, actions)
  click.echo(f"Generated {created} permission(s)")


@click.group()
def catalog():
  pass

catalog.add_command(list_catalog,"list")
catalog.add_command(add_permission,"add")
catalog.add_command(remove_permission,"remove")
catalog.add_command(generate,"generate")


# Override rules

@click.command()
@handle_access_errors
def list_overrides():
  with open_session() as db:
    for rule in AccessAdministration(db).list_override_rules():
      click.echo(f"{rule.effect} {rule.resource}:{rule.action} for '{rule.role_name_pattern}'")


@click.command()
@click.argument("pattern")
@click.argument("resource")
@click.argument("action")
@click.option("--description", "-d", default=None)
@handle_access_errors
def add_override(pattern, resource, action, description):
  with open_session() as db:
    AccessAdministration(db).add_override_rule(pattern, resource, action, description=description)
  click.echo(f"Denying {resource}:{action} for '{pattern}'")


@click.command()
@click.argument("pattern")
@click.argument("resource")
@click.argument("action")
@handle_access_errors
def remove_override(pattern, resource, action):
  with open_session() as db:
    removed = AccessAdministration(db).remove_override_rule(pattern, resource, action)
  click.echo("Removed override rule" if removed else "No such override rule")


@click.group()
def overrides():
  pass

overrides.add_command(list_overrides,"list")
overrides.add_command(add_override,"add")
overrides.add_command(remove_override,"remove")


# Principals

@click.command()
@click.argument("principal_id")
@click.option("--legacy-role", "-l", default=None, help="Legacy single-role label")
@handle_access_errors
def register_principal(principal_id, legacy_role):
  with open_session() as db:
    record = AccessAdministration(db).register_principal(principal_id, legacy_role)
    click.echo(f"Registered {record.id} (legacy role: {record.legacy_role or '-'})")


@click.command()
@click.argument("principal_id")
@click.argument("legacy_role", required=False)
@handle_access_errors
def set_legacy_role(principal_id, legacy_role):
  """Set or, without LEGACY_ROLE, clear the legacy role label"""
  with open_session() as db:
    record = AccessAdministration(db).set_legacy_role(principal_id, legacy_role)
    click.echo(f"Legacy role of {record.id}: {record.legacy_role or '-'}")


@click.command()
@click.argument("principal_id")
@handle_access_errors
def principal_roles(principal_id):
  with open_session() as db:
    for role in AccessAdministration(db).roles_for_principal(principal_id):
      click.echo(role.name)


@click.group()
def principals():
  pass

principals.add_command(register_principal,"register")
principals.add_command(set_legacy_role,"set-role")
principals.add_command(principal_roles,"roles")
