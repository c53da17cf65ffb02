"""CLI entrypoint: Typer app definition and command registration"""

import typer

from contentidx.cli.commands import build_cmd, history_cmd, init_cmd, list_cmd, validate_cmd


app = typer.Typer(name="contentidx", no_args_is_help=True, help="Content validation, indexing, and snapshot publishing")

app.command(name="build")(build_cmd)
app.command(name="validate")(validate_cmd)
app.command(name="list")(list_cmd)
app.command(name="history")(history_cmd)
app.command(name="init")(init_cmd)
