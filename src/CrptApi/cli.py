"""Typer CLI for submitting documents to the registry.

Commands:
- ``crpt submit FILE...``: validate and submit documents under the rate limit
- ``crpt sample``: print a sample ``LP_INTRODUCE_GOODS`` document
- ``crpt settings``: print effective settings with secrets redacted

Exit codes: 0 when every document was accepted, 1 when any submission failed
or was cancelled, 2 for configuration or document errors.

Example:
    $ crpt sample > doc.json
    $ crpt --rate 5/second submit doc.json --signature-file doc.sig
"""

import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from CrptApi import __version__
from CrptApi.documents import dump_document, load_document, sample_document
from CrptApi.errors import ConfigurationError, DocumentError
from CrptApi.logging_config import setup_logging
from CrptApi.settings import CrptApiSettings, load_settings
from CrptApi.submitter import DocumentSubmitter

EXIT_FAILED = 1
EXIT_USAGE = 2

app = typer.Typer(
    name="crpt",
    help="Rate-limited client for the goods-labeling registry",
    no_args_is_help=True,
)


class _State:
    rate: Optional[str] = None
    url: Optional[str] = None
    verbosity: int = 0
    log_json: Optional[bool] = None


_state = _State()


def _fail(message: str, code: int = EXIT_USAGE) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"crpt {__version__}")
        raise typer.Exit(0)


def _settings() -> CrptApiSettings:
    overrides = {"rate_limit": _state.rate, "api_url": _state.url, "log_json": _state.log_json}
    try:
        return load_settings(**{key: value for key, value in overrides.items() if value is not None})
    except ConfigurationError as exc:
        _fail(str(exc))


@app.callback()
def main(
    rate: Optional[str] = typer.Option(
        None, "--rate", "-r", help="Rate limit, e.g. 5/second (overrides CRPT_RATE_LIMIT)"
    ),
    url: Optional[str] = typer.Option(None, "--url", help="Document creation endpoint"),
    verbosity: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase verbosity (-v INFO, -vv DEBUG)"
    ),
    log_json: Optional[bool] = typer.Option(
        None, "--log-json/--no-log-json", help="Emit JSON log lines"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Submit documents to the goods-labeling registry without exceeding its rate limit."""
    _state.rate = rate
    _state.url = url
    _state.verbosity = verbosity
    _state.log_json = log_json


@app.command()
def submit(
    files: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Document JSON files"
    ),
    signature: Optional[str] = typer.Option(
        None, "--signature", "-s", help="Detached signature (falls back to CRPT_SIGNATURE)"
    ),
    signature_file: Optional[Path] = typer.Option(
        None, "--signature-file", exists=True, dir_okay=False, help="Read the signature from a file"
    ),
    workers: int = typer.Option(4, "--workers", "-w", min=1, help="Concurrent submissions"),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0, help="Maximum seconds to wait for rate-limit capacity"
    ),
) -> None:
    """Validate and submit documents, printing one JSON result line per file."""
    settings = _settings()
    level = {0: settings.log_level, 1: "INFO"}.get(_state.verbosity, "DEBUG")
    setup_logging(level, json_output=settings.log_json)

    if signature_file is not None:
        signature = signature_file.read_text(encoding="utf-8").strip()
    signature = signature or settings.signature
    if not signature:
        _fail("a signature is required (--signature, --signature-file, or CRPT_SIGNATURE)")

    try:
        documents = [load_document(path) for path in files]
    except DocumentError as exc:
        _fail(str(exc))

    with DocumentSubmitter.from_settings(settings) as submitter:
        results = submitter.submit_many(
            [(document, signature) for document in documents],
            workers=workers,
            timeout=timeout,
        )

    for path, result in zip(files, results):
        typer.echo(
            json.dumps(
                {
                    "file": str(path),
                    "doc_id": result.doc_id,
                    "outcome": result.outcome.value,
                    "status": result.status_code,
                    "error": result.error,
                    "waited_ms": round(result.waited * 1000, 1),
                }
            )
        )

    if not all(result.ok for result in results):
        raise typer.Exit(EXIT_FAILED)


@app.command()
def sample() -> None:
    """Print a sample LP_INTRODUCE_GOODS document."""
    typer.echo(dump_document(sample_document()))


@app.command("settings")
def show_settings() -> None:
    """Print effective settings as JSON with secrets redacted."""
    typer.echo(json.dumps(_settings().redacted(), indent=2, sort_keys=True))


if __name__ == "__main__":
    app()
