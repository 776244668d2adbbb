import click

from .utils.logging import configure_logging


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add a --debug/--no-debug flag that configures logging before the command runs"""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(
            0,
            click.Option(
                ["--debug/--no-debug"],
                default=False,
                is_eager=True,
                expose_value=False,
                callback=lambda ctx, param, value: _set_debug(ctx, value),
                help="Enable debug mode",
            ),
        )
    return cmd


def _set_debug(ctx: click.Context, value: bool) -> bool:
    """Callback function for debug flag"""
    ctx.ensure_object(dict)
    ctx.obj["DEBUG"] = value

    configure_logging(value)
    return value
