import logging

import click
import uvicorn

from .access import catalog, check, overrides, permissions, principals, seed
from .db import db
from .roles import roles

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx, verbose):
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

@click.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000, type=int)
@click.option("--reload", is_flag=True)
def serve(host, port, reload):
    uvicorn.run("dare_backend.server:app", host=host, port=port, reload=reload, workers=1)

cli.add_command(seed,"seed")
cli.add_command(check,"check")
cli.add_command(permissions,"permissions")
cli.add_command(catalog,"catalog")
cli.add_command(roles,"roles")
cli.add_command(overrides,"overrides")
cli.add_command(principals,"principals")
cli.add_command(db,"db")
cli.add_command(serve,"serve")

if __name__ == '__main__':
    cli()
