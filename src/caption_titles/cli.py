import sys
from pathlib import Path

import typer

from .core.errors import ReferenceNotFound, UnrecognizedCaptionFormat
from .core.logging import setup_logging
from .services import session as conversion
from .services.files import format_hint_for, read_reference_bytes
from .services.pipeline import convert_caption_file
from .services.subtitle_types import CaptionFormat

app = typer.Typer(help="Convert SRT and ITT captions into Final Cut Pro FCPXML titles.")


@app.callback()
def _configure(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default from CT_LOG_LEVEL / LOG_LEVEL, else INFO).",
    ),
) -> None:
    # Logs go to stderr so stdout only carries command output.
    setup_logging(level=log_level, stream=sys.stderr)


@app.command("convert")
def convert(
    source: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to the SRT or ITT caption file.",
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        dir_okay=False,
        help="Where the FCPXML is written (any other extension is replaced by .fcpxml).",
    ),
    reference: Path = typer.Option(
        None,
        "--reference",
        "-r",
        help="Reference .fcpxml/.xml file or .fcpxmld bundle exported from Final Cut Pro.",
    ),
    caption_format: CaptionFormat = typer.Option(
        None,
        "--format",
        case_sensitive=False,
        help="Caption format; detected from extension and content when omitted.",
    ),
    name: str = typer.Option(
        None,
        "--name",
        help="Event and project name (default: output file name without extension).",
    ),
) -> None:
    """Convert a caption file to an FCPXML timeline of titles."""
    try:
        result = convert_caption_file(
            source,
            output,
            reference=reference,
            format_hint=caption_format,
            project_name=name,
        )
    except (UnrecognizedCaptionFormat, ReferenceNotFound) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    typer.echo(result.session.status)
    typer.echo(f"Saved FCPXML to: {result.output_path}")


@app.command("inspect")
def inspect(
    source: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to the SRT or ITT caption file.",
    ),
    reference: Path = typer.Option(
        None,
        "--reference",
        "-r",
        help="Reference .fcpxml/.xml file or .fcpxmld bundle.",
    ),
    caption_format: CaptionFormat = typer.Option(
        None,
        "--format",
        case_sensitive=False,
        help="Caption format; detected from extension and content when omitted.",
    ),
) -> None:
    """Show the detected format, timeline reference and cues without writing anything."""
    try:
        reference_bytes = read_reference_bytes(reference) if reference else None
    except ReferenceNotFound as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    hint = caption_format or format_hint_for(source)
    session = conversion.load(source.read_bytes(), reference_bytes, hint=hint)
    typer.echo(session.status)
    if not session.recognized:
        raise typer.Exit(code=1)

    timeline = session.reference
    typer.echo(f"Format: {session.source_format.label}")
    typer.echo(f"Cues: {len(session.cues)}")
    typer.echo(f"Timescale: {timeline.timescale}")
    typer.echo(f"Frame duration: {timeline.frame_duration}")
    typer.echo(f"Format name: {timeline.format_name}")
    typer.echo(f"Effect UID: {timeline.effect_uid}")
    typer.echo(f"Reference origin: {session.reference_origin.value}")
    typer.echo("")
    for idx, cue in enumerate(session.cues, start=1):
        text = cue.text.replace("\n", " / ")
        typer.echo(f"{idx:>4}  {cue.start:10.3f} -> {cue.end:10.3f}  {text}")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", min=1, max=65535, help="Port to listen on."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("caption_titles.main:app", host=host, port=port)


def main() -> None:
    """Entry point for `python -m caption_titles.cli`."""
    app()


if __name__ == "__main__":
    main()
