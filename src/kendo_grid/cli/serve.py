from typing import Annotated, Any

import typer
from fastapi import FastAPI
from rich.console import Console

from kendo_grid.cli.query import FileArgument, IgnoreFieldOption, SearchFieldOption, file_schema, load_rows
from kendo_grid.core.fields import RecordSchema
from kendo_grid.db.memory import InMemoryCollection

console = Console()


def create_file_app(rows: list[dict[str, Any]], schema: RecordSchema, path: str = "/records") -> FastAPI:
    from kendo_grid.api.app import create_app
    from kendo_grid.api.routes.grid import grid_router
    from kendo_grid.api.schemas import RowSchema

    def source() -> InMemoryCollection[dict[str, Any]]:
        return InMemoryCollection(rows, schema=schema)

    return create_app(grid_router(path, source, RowSchema), title="Kendo Grid file server")


def serve(
    file: FileArgument,
    host: str = "127.0.0.1",
    port: int = 8000,
    path: Annotated[str, typer.Option(help="Route serving the grid.")] = "/records",
    search_field: SearchFieldOption = None,
    ignore_field: IgnoreFieldOption = None,
) -> None:
    """Serve a JSON file of records as a Kendo grid endpoint."""
    import uvicorn

    rows = load_rows(file)
    app = create_file_app(rows, file_schema(rows, search_field, ignore_field), path)
    console.print(f"[green]Serving {len(rows)} records at http://{host}:{port}{path}[/green]")
    uvicorn.run(app, host=host, port=port)
