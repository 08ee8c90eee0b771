"""Notewise CLI."""

import asyncio
import json
import sys
from pathlib import Path

import click
import httpx
from pydantic import BaseModel

from .config import get_settings
from .logging_config import setup_colored_logging


def _load_tasks():
    from .engine import StudyTasks
    from .llm import create_llm_client

    try:
        settings = get_settings()
    except Exception as e:
        click.echo(f"Error loading settings: {e}", err=True)
        sys.exit(1)

    if not settings.is_configured:
        click.echo("Warning: OPENAI_API_KEY is not set; results will be empty defaults.", err=True)
    return StudyTasks(create_llm_client(settings))


def _echo_json(result) -> None:
    if isinstance(result, BaseModel):
        data = result.model_dump(exclude_none=True)
    elif isinstance(result, list):
        data = [r.model_dump(exclude_none=True) if isinstance(r, BaseModel) else r for r in result]
    else:
        data = result
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _read_notes(paths: tuple[str, ...]) -> list:
    from .artifacts import SourceMaterial

    return [
        SourceMaterial(id=str(i), title=Path(p).stem, content=Path(p).read_text(encoding="utf-8"))
        for i, p in enumerate(paths, start=1)
    ]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, verbose):
    """Notewise - turn your notes into explanations, quizzes, flashcards and exams."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_colored_logging(verbose)


@cli.command()
@click.option("--host", default=None, help="Host to bind")
@click.option("--port", "-p", default=None, type=int, help="Port to run on")
def serve(host, port):
    """Start the HTTP API server."""
    from .api import create_app
    import uvicorn

    settings = get_settings()
    app = create_app(settings)

    run_host = host or settings.host
    run_port = port or settings.port
    click.echo(f"Starting Notewise API at http://{run_host}:{run_port}")

    uvicorn.run(app, host=run_host, port=run_port, log_level="info")


@cli.command()
def status():
    """Show whether the API server is running and the model backend is configured."""
    settings = get_settings()
    url = f"http://{settings.host}:{settings.port}"

    click.echo("Notewise Status")
    click.echo("=" * 40)
    click.echo(f"  OpenAI key: {'configured' if settings.is_configured else 'missing'}")
    click.echo(f"  Model:      {settings.openai_model}")

    try:
        response = httpx.get(f"{url}/health", timeout=2.0)
        if response.status_code == 200:
            click.echo(f"  Server:     running at {url}")
        else:
            click.echo(f"  Server:     {url} returned {response.status_code}")
    except httpx.HTTPError:
        click.echo(f"  Server:     not running ({url})")


@cli.command()
@click.argument("concept")
@click.option("--context", "-c", default="", help="Additional context")
@click.option(
    "--level",
    "-l",
    type=click.Choice(["eli5", "beginner", "standard", "graduate", "professor"]),
    default="standard",
    show_default=True,
)
@click.option("--notes", "-n", multiple=True, type=click.Path(exists=True), help="Note file to draw on")
def explain(concept, context, level, notes):
    """Explain CONCEPT, using your note files as the primary source."""
    tasks = _load_tasks()
    result = asyncio.run(tasks.explain_concept(concept, context, level, _read_notes(notes)))
    click.echo(result.explanation)
    if result.source_breakdown:
        click.echo("")
        click.echo(f"Source: {result.source_breakdown}")


@cli.command()
@click.argument("question")
@click.option("--notes", "-n", multiple=True, type=click.Path(exists=True), help="Note file to draw on")
def ask(question, notes):
    """Answer QUESTION from your note files and list the notes used."""
    tasks = _load_tasks()
    materials = _read_notes(notes)
    result = asyncio.run(tasks.explain_question(question, materials))
    click.echo(result.explanation)
    titles = {m.id: m.title for m in materials}
    if result.used_note_ids:
        click.echo("")
        click.echo("Notes used: " + ", ".join(titles.get(i, i) for i in result.used_note_ids))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True))
@click.option("--count", "-n", default=5, show_default=True, help="Number of questions")
def quiz(file_path, count):
    """Generate quiz questions from a note file."""
    tasks = _load_tasks()
    content = Path(file_path).read_text(encoding="utf-8")
    _echo_json(asyncio.run(tasks.generate_quiz(content, count)))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True))
@click.option("--count", "-n", default=10, show_default=True, help="Number of cards")
def flashcards(file_path, count):
    """Generate flashcards from a note file."""
    tasks = _load_tasks()
    content = Path(file_path).read_text(encoding="utf-8")
    _echo_json(asyncio.run(tasks.generate_flashcards(content, count)))


@cli.command()
@click.argument("file_paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--duration", "-d", default=60, show_default=True, help="Exam length in minutes")
@click.option("--difficulty", type=click.Choice(["easy", "medium", "hard"]), default="medium", show_default=True)
def exam(file_paths, duration, difficulty):
    """Generate an exam covering one or more note files."""
    tasks = _load_tasks()
    materials = [Path(p).read_text(encoding="utf-8") for p in file_paths]
    _echo_json(asyncio.run(tasks.generate_exam(materials, duration, difficulty)))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True))
def citations(file_path):
    """Suggest sources to cite for a note file."""
    tasks = _load_tasks()
    content = Path(file_path).read_text(encoding="utf-8")
    _echo_json(asyncio.run(tasks.find_citations(content)))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True))
def summarize(file_path):
    """Summarize a research paper (plain text)."""
    tasks = _load_tasks()
    paper = Path(file_path).read_text(encoding="utf-8")
    _echo_json(asyncio.run(tasks.summarize_paper(paper)))


@cli.command("clean-notes")
@click.argument("image_path", type=click.Path(exists=True))
def clean_notes(image_path):
    """Convert a photo of handwritten notes into structured text."""
    path = Path(image_path)
    mime_types = {
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".gif": "image/gif",
        ".webp": "image/webp",
    }
    mime_type = mime_types.get(path.suffix.lower(), "image/jpeg")

    tasks = _load_tasks()
    click.echo(asyncio.run(tasks.clean_handwritten_image(path.read_bytes(), mime_type)))


if __name__ == "__main__":
    cli()
