"""CLI tools for contact API administration."""

import click

from contact_api.core.security import create_access_token
from contact_api.db.base import Base
from contact_api.db.session import engine


@click.group()
def cli():
    """Contact API CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    Meant for local SQLite setups; deployed databases use `alembic upgrade head`.

    Example:
        contact-api init-db
    """
    import contact_api.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    click.echo(f"✓ Created tables: {', '.join(sorted(Base.metadata.tables))}")


@cli.command()
@click.option("--subject", required=True, help="Token subject (operator id or email)")
@click.option("--hours", default=None, type=int, help="Lifetime in hours (default: JWT_EXPIRES_HOURS)")
def mint_token(subject: str, hours: int | None):
    """
    Print a signed bearer token for the operator endpoints.

    Example:
        contact-api mint-token --subject "ops@maliev.com" --hours 1
    """
    if hours is not None and hours <= 0:
        raise click.BadParameter("must be positive", param_hint="--hours")
    click.echo(create_access_token(subject, expires_hours=hours))


if __name__ == "__main__":
    cli()
