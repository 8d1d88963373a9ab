__all__ = ["app"]

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from returns.result import Failure, Success

from .equations import EquationSystem

app = typer.Typer()


@app.command()
def gravtensor(
    path: Annotated[
        Path,
        typer.Argument(
            show_default=False,
            help="File with one equation per line, e.g. #<lambda:0:0:2:0> - #<xi:0:0:2:0>.",
        ),
    ],
    workers: Annotated[
        Optional[int],
        typer.Option(
            "--workers",
            "-w",
            min=1,
            help="Number of coefficients generated in parallel. Defaults to the thread pool default.",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            "-d",
            help="Log the progress of every coefficient and equation to standard error.",
        ),
    ] = False,
):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(threadName)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        typer.echo(f"Failed to open {path}: {error}", err=True)
        raise typer.Exit(1) from error

    with EquationSystem(max_workers=workers) as system:
        match system.load(text):
            case Failure(error):
                typer.echo(f"Failed to parse equations:\n{error}", err=True)
                raise typer.Exit(1)
            case Success(_):
                pass
            case _:
                raise NotImplementedError()

        match system.solve():
            case Failure(error):
                typer.echo(str(error), err=True)
                raise typer.Exit(1)
            case Success(solution):
                pass
            case _:
                raise NotImplementedError()

    typer.echo(solution.deparse(), nl=False)
