"""Custom Click group with automatic help display on errors."""

from typing import Any

import click


class NodeImageGroup(click.Group):
    """Click group that shows the failing command's help on usage errors."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (
            click.exceptions.UsageError,
            click.exceptions.BadParameter,
            click.exceptions.MissingParameter,
        ) as e:
            click.echo(f"Error: {e.format_message()}", err=True)

            # Most specific context available, the subcommand's if any
            error_ctx = e.ctx if getattr(e, "ctx", None) else ctx

            click.echo("", err=True)
            click.echo(error_ctx.get_help(), err=True)
            error_ctx.exit(getattr(e, "exit_code", 2))
            return None
