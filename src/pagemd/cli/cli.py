"""CLI entrypoint: Typer app definition and command registration"""

import typer

from pagemd.cli.commands import export_cmd, import_cmd, init_cmd, list_cmd, validate_cmd


app = typer.Typer(name="pagemd", no_args_is_help=True, help="Batch page <-> Markdown transcoder")

app.command(name="init")(init_cmd)
app.command(name="list")(list_cmd)
app.command(name="export")(export_cmd)
app.command(name="import")(import_cmd)
app.command(name="validate")(validate_cmd)
