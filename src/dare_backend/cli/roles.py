import click

from dare_backend.cli.utils import handle_access_errors, open_session
from dare_backend.interface.roles import GrantChange
from dare_backend.permissions.admin import AccessAdministration


@click.command()
@handle_access_errors
def list_roles():
  with open_session() as db:
    for role in AccessAdministration(db).list_roles():
      flags = []
      if role.is_system:
        flags.append("system")
      if not role.is_editable:
        flags.append("locked")
      suffix = f" ({', '.join(flags)})" if flags else ""
      click.echo(f"{role.id}\t{role.name}{suffix}")


@click.command()
@click.argument("name")
@click.option("--description", "-d", default=None)
@handle_access_errors
def create_role(name, description):
  with open_session() as db:
    role = AccessAdministration(db).create_role(name, description)
    click.echo(f"Created role '{role.name}' ({role.id})")


@click.command()
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@handle_access_errors
def delete_role(name, yes):
  with open_session() as db:
    admin = AccessAdministration(db)
    role = admin.get_role_by_name(name)
    if not yes:
      click.confirm(f"Delete role '{role.name}' with its grants and assignments?", abort=True)
    grants, assignments = admin.delete_role(role.id)
    click.echo(f"Deleted role '{name}' ({grants} grant(s), {assignments} assignment(s))")


@click.command()
@click.argument("name")
@handle_access_errors
def list_grants(name):
  with open_session() as db:
    admin = AccessAdministration(db)
    for grant in admin.list_grants(admin.get_role_by_name(name).id):
      click.echo(f"{grant.resource}:{grant.action}")


@click.command()
@click.argument("name")
@click.argument("permissions", nargs=-1, required=True)
@handle_access_errors
def grant(name, permissions):
  """Grant RESOURCE:ACTION pairs to a role; all pairs are applied or none"""
  changes = [GrantChange(resource=resource, action=action, granted=True) for resource, action in map(_split_pair, permissions)]
  with open_session() as db:
    admin = AccessAdministration(db)
    result = admin.set_role_permissions(admin.get_role_by_name(name).id, changes)
    click.echo(f"Granted {result.added} new permission(s) to '{name}'")


@click.command()
@click.argument("name")
@click.argument("permissions", nargs=-1, required=True)
@handle_access_errors
def revoke(name, permissions):
  changes = [GrantChange(resource=resource, action=action, granted=False) for resource, action in map(_split_pair, permissions)]
  with open_session() as db:
    admin = AccessAdministration(db)
    result = admin.set_role_permissions(admin.get_role_by_name(name).id, changes)
    click.echo(f"Revoked {result.removed} permission(s) from '{name}'")


@click.command()
@click.argument("principal_id")
@click.argument("name")
@handle_access_errors
def assign(principal_id, name):
  with open_session() as db:
    admin = AccessAdministration(db)
    admin.assign_role(principal_id, admin.get_role_by_name(name).id)
    click.echo(f"Assigned '{name}' to {principal_id}")


@click.command()
@click.argument("principal_id")
@click.argument("name")
@handle_access_errors
def unassign(principal_id, name):
  with open_session() as db:
    admin = AccessAdministration(db)
    removed = admin.unassign_role(principal_id, admin.get_role_by_name(name).id)
    click.echo(f"Unassigned '{name}' from {principal_id}" if removed else f"{principal_id} does not hold '{name}'")


def _split_pair(value: str):
  resource, separator, action = value.partition(":")
  if not separator or not resource or not action:
    raise click.BadParameter(f"'{value}' is not of the form RESOURCE:ACTION")
  return resource, action


@click.group()
def roles():
  pass

roles.add_command(list_roles,"list")
roles.add_command(create_role,"create")
roles.add_command(delete_role,"delete")
roles.add_command(list_grants,"grants")
roles.add_command(grant,"grant")
roles.add_command(revoke,"revoke")
roles.add_command(assign,"assign")
roles.add_command(unassign,"unassign")
