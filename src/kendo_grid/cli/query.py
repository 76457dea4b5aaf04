import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from kendo_grid.config import get_settings
from kendo_grid.core.errors import UnknownFieldError
from kendo_grid.core.fields import RecordSchema
from kendo_grid.core.grid import grid_result
from kendo_grid.db.memory import InMemoryCollection
from kendo_grid.models import GridRequest, SortSpec

console = Console()

FileArgument = Annotated[
    Path, typer.Argument(exists=True, dir_okay=False, help="JSON file holding an array of records.")
]
SearchFieldOption = Annotated[
    list[str] | None, typer.Option("--search-field", help="Search only this text field (repeatable).")
]
IgnoreFieldOption = Annotated[
    list[str] | None, typer.Option("--ignore-field", help="Never search this text field (repeatable).")
]


def load_rows(path: Path) -> list[dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise typer.BadParameter(f"{path} must contain a JSON array of objects")
    return data


def file_schema(
    rows: list[dict[str, Any]], search_field: list[str] | None, ignore_field: list[str] | None
) -> RecordSchema:
    return RecordSchema.from_rows(rows, include=search_field or (), ignore=ignore_field or ())


def parse_sort(values: Sequence[str]) -> list[SortSpec]:
    specs: list[SortSpec] = []
    for value in values:
        name, _, direction = value.partition(":")
        try:
            specs.append(SortSpec(field=name, dir=direction or "asc"))
        except ValidationError as exc:
            raise typer.BadParameter(f"Invalid sort {value!r}: use FIELD[:asc|desc]") from exc
    return specs


def _render_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row))
    console.print(table)


def query(
    file: FileArgument,
    text_filter: Annotated[str | None, typer.Option("--filter", "-f", help="Case-insensitive text filter.")] = None,
    sort: Annotated[list[str] | None, typer.Option("--sort", "-s", help="FIELD[:asc|desc] (repeatable).")] = None,
    skip: Annotated[int, typer.Option(min=0, help="Records to skip.")] = 0,
    take: Annotated[int | None, typer.Option(min=0, help="Page size.")] = None,
    search_field: SearchFieldOption = None,
    ignore_field: IgnoreFieldOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the grid envelope as JSON.")] = False,
) -> None:
    """Run a grid request against a JSON file of records."""
    rows = load_rows(file)
    schema = file_schema(rows, search_field, ignore_field)
    request = GridRequest(
        text_filter=text_filter,
        sort=parse_sort(sort or []) or None,
        skip=skip,
        take=get_settings().default_take if take is None else take,
    )

    try:
        result = asyncio.run(grid_result(InMemoryCollection(rows, schema=schema), request))
    except UnknownFieldError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(result.to_wire()))
        return

    headers = [f.name for f in schema.fields]
    _render_table(headers, [[record.get(h) for h in headers] for record in result.records])
    console.print(f"({len(result.records)} of {result.count} records)")


def fields(
    file: FileArgument,
    search_field: SearchFieldOption = None,
    ignore_field: IgnoreFieldOption = None,
) -> None:
    """Show the fields inferred from a JSON file and which of them the text filter searches."""
    schema = file_schema(load_rows(file), search_field, ignore_field)
    searched = {f.name for f in schema.candidate_text_fields()}
    soft_delete = schema.soft_delete
    _render_table(
        ["field", "kind", "searched", "soft delete"],
        [
            (f.name, f.kind.value, "yes" if f.name in searched else "", "yes" if f is soft_delete else "")
            for f in schema.fields
        ],
    )
