"""CLI for the Thrift IDL parser."""

import json
import logging
from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.errors import ThriftIdlError, ThriftSyntaxError
from .core.types import IncludePolicy, ParserOptions
from .dsl.parser import ThriftParser
from .dsl.preprocessor import strip_comments
from .dsl.printer import dump_tree, render_tree, to_dict

app = typer.Typer(
    name="thrift-idl",
    help="Thrift IDL parser - check, parse and flatten .thrift documents",
)
console = Console()
err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command("check")
def check_command(
    idl_files: list[Path] = typer.Argument(..., help="IDL files to check"),
):
    """Check that each file is syntactically valid Thrift."""
    parser = ThriftParser()

    table = Table(title="Syntax Check")
    table.add_column("File", style="cyan")
    table.add_column("Result")
    table.add_column("Detail")

    failures = 0
    for idl_file in idl_files:
        try:
            text = idl_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            failures += 1
            table.add_row(str(idl_file), "[red]UNREADABLE[/red]", escape(str(e)))
            continue

        try:
            parser.parse(text)
        except ThriftSyntaxError as e:
            failures += 1
            table.add_row(str(idl_file), "[red]INVALID[/red]", escape(str(e)).removeprefix("Syntax error at "))
            continue
        table.add_row(str(idl_file), "[green]OK[/green]", "")

    console.print(table)
    if failures:
        console.print(f"[red]{failures} of {len(idl_files)} file(s) failed.[/red]")
        raise typer.Exit(1)


@app.command("parse")
def parse_command(
    idl_file: Path = typer.Argument(..., help="Path to the IDL file"),
    root: Path = typer.Option(None, "--root", "-r", help="Directory includes are resolved against"),
    strict_includes: bool = typer.Option(False, "--strict-includes", help="Fail on unresolvable includes"),
    requiredness: bool = typer.Option(False, "--requiredness", help="Keep required/optional markers"),
    auto_number: bool = typer.Option(False, "--auto-number", help="Number enum values without one"),
    as_json: bool = typer.Option(False, "--json", help="Emit the document as JSON"),
    out: Path = typer.Option(None, "--out", "-o", help="Write the output to a file"),
):
    """Parse a file, merge its includes and print the document."""
    if not idl_file.exists():
        console.print(f"[red]Error: File {idl_file} not found.[/red]")
        raise typer.Exit(1)

    options = ParserOptions(
        include_root=root,
        include_policy=IncludePolicy.FAIL if strict_includes else IncludePolicy.SKIP,
        retain_requiredness=requiredness,
        auto_number_enums=auto_number,
    )
    parser = ThriftParser(options)
    path = idl_file.resolve()
    resolver = parser.include_resolver(parser.default_loader(path))

    try:
        document = resolver.resolve(str(path))
    except ThriftSyntaxError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        if e.source == str(path):
            text = strip_comments(path.read_text(encoding=options.encoding))
            console.print(escape(e.get_context(text)), highlight=False)
        raise typer.Exit(1)
    except ThriftIdlError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    for skipped in resolver.skipped:
        console.print(
            f"[yellow]Skipped include {skipped.path!r} from {skipped.included_from}[/yellow]"
        )

    if as_json:
        payload = json.dumps(to_dict(document), indent=2)
        if out:
            out.write_text(payload + "\n", encoding="utf-8")
            console.print(f"[green]Wrote {out}[/green]")
        else:
            typer.echo(payload)
        return

    if out:
        out.write_text(dump_tree(document), encoding="utf-8")
        console.print(f"[green]Wrote {out}[/green]")
    else:
        console.print(render_tree(document))

    kinds = Counter(type(d).__name__.removesuffix("Node") for d in document.definitions)
    table = Table(title="Document Summary")
    table.add_column("Item", style="cyan")
    table.add_column("Count", style="green")
    table.add_row("Headers", str(len(document.headers)))
    for kind, count in sorted(kinds.items()):
        table.add_row(kind, str(count))
    console.print(table)
    console.print(Panel(f"[green]PARSED[/green] {escape(idl_file.name)}", title="Result"))


if __name__ == "__main__":
    app()
