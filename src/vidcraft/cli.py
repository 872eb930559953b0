"""Command-line interface using Typer."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from vidcraft import __version__
from vidcraft.logging import setup_logging
from vidcraft.utils import run_async

# Setup logging
setup_logging()

app = typer.Typer(
    name="vidcraft",
    help="VidCraft AI - AI content studio for YouTube creators",
    add_completion=False,
)

# Subcommand groups
projects_app = typer.Typer(help="Project management commands")
app.add_typer(projects_app, name="projects")

console = Console()

USER_OPTION = typer.Option(
    "local",
    "--user",
    "-u",
    envvar="VIDCRAFT_USER_ID",
    help="User id the command acts as",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"VidCraft AI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """VidCraft AI - Turn videos into titles, thumbnails, threads and posts."""
    pass


@app.command("version")
def show_version() -> None:
    """Show the installed version."""
    console.print(f"VidCraft AI v{__version__}")


@app.command()
def health() -> None:
    """Check the health of all services."""
    import httpx

    from vidcraft.config import settings

    url = f"{settings.public_base_url.rstrip('/')}/health/ready"

    try:
        response = httpx.get(url, timeout=10)
        data = response.json()

        table = Table(title="Service Health")
        table.add_column("Component", style="cyan")
        table.add_column("Status")

        table.add_row("Database", "✓" if data.get("database") else "✗")
        table.add_row("Redis", "✓" if data.get("redis") else "✗")

        for component, healthy in data.get("components", {}).items():
            table.add_row(component, "✓" if healthy else "✗")

        console.print(table)

        if data.get("ready"):
            console.print("[bold green]All services healthy![/bold green]")
        else:
            console.print("[bold yellow]Some services unhealthy[/bold yellow]")
            raise typer.Exit(code=1)

    except httpx.RequestError as e:
        console.print(f"[bold red]Cannot connect to API: {e}[/bold red]")
        console.print("[dim]Is the API server running?[/dim]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API server."""
    import uvicorn

    from vidcraft.config import settings

    uvicorn.run(
        "vidcraft.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload or settings.api_reload,
    )


@app.command()
def worker() -> None:
    """Start a Celery worker (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    subprocess.run(
        [
            sys.executable,
            "-m",
            "celery",
            "-A",
            "vidcraft.worker",
            "worker",
            "--loglevel=info",
            "-Q",
            "transcription,generation,celery",
        ],
        check=True,
    )


@app.command()
def validate(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file to check"),
) -> None:
    """Check a video file against the upload limits."""
    from vidcraft.client.video import VideoFile, validate_video_file

    video = VideoFile.from_path(file)
    result = validate_video_file(video)

    if result.is_valid:
        console.print(
            f"[bold green]✓ {video.name}[/bold green] "
            f"[dim]({video.size / 1024 / 1024:.1f}MB, {video.mime_type})[/dim]"
        )
        return

    console.print(f"[bold red]✗ {video.name}[/bold red]")
    for error in result.errors:
        console.print(f"  [red]- {error}[/red]")
    raise typer.Exit(code=1)


@app.command()
def upload(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file to upload"),
    project: str = typer.Option(..., "--project", "-p", help="Project ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Video title"),
    transcribe: bool = typer.Option(False, "--transcribe", help="Start transcription after upload"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="API base URL"),
    user: str = USER_OPTION,
) -> None:
    """Upload a video to a project through the API."""
    from vidcraft.client import ApiClient, VideoFile, VideoUploader
    from vidcraft.errors import ServiceError

    video = VideoFile.from_path(file)

    async def _upload():
        async with ApiClient(base_url=api_url, user_id=user) as api:
            with Progress(
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TextColumn("{task.percentage:>3.0f}%"),
                console=console,
            ) as progress:
                task = progress.add_task(f"Uploading {video.name}", total=1.0)
                return await VideoUploader(api).upload_video(
                    video,
                    project,
                    title=title,
                    on_progress=lambda value: progress.update(task, completed=value),
                    auto_transcribe=transcribe,
                )

    try:
        result = run_async(_upload())
    except ServiceError as e:
        console.print(f"[bold red]Upload failed: {e.message}[/bold red]")
        raise typer.Exit(code=1)

    console.print("[bold green]✓ Video uploaded[/bold green]")
    console.print(f"[cyan]Video ID:[/cyan] {result.video_id}")
    console.print(f"[cyan]Storage ID:[/cyan] {result.storage_id}")
    if result.metadata and result.metadata.duration:
        console.print(f"[cyan]Duration:[/cyan] {result.metadata.duration:.1f}s")
    if transcribe:
        console.print("[dim]Transcription scheduled[/dim]")


@app.command()
def generate(
    agent_type: str = typer.Argument(..., help="title, description, tweets, blog or linkedin"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Video title"),
    transcript: Optional[Path] = typer.Option(
        None, "--transcript", help="Text file with the video transcription", exists=True
    ),
    context: Optional[str] = typer.Option(None, "--context", "-c", help="Extra requirements"),
    show_prompt: bool = typer.Option(False, "--show-prompt", help="Print the prompt as well"),
) -> None:
    """Generate one piece of content with the configured LLM provider."""
    from vidcraft.domain.models import GenerationRequest, VideoData
    from vidcraft.errors import ServiceError
    from vidcraft.services.generation import ContentGenerator

    request = GenerationRequest(
        agent_type=agent_type,
        video_data=VideoData(
            title=title,
            transcription=transcript.read_text() if transcript else None,
        ),
        additional_context=context,
    )

    try:
        result = run_async(ContentGenerator().generate_content(request))
    except ServiceError as e:
        console.print(f"[bold red]Generation failed: {e.message}[/bold red]")
        raise typer.Exit(code=1)

    if show_prompt:
        console.print(Panel(result.prompt, title="Prompt", border_style="dim"))
    console.print(Panel(result.content, title=agent_type.capitalize(), border_style="green"))


# =============================================================================
# PROJECTS COMMANDS
# =============================================================================


@projects_app.command("create")
def projects_create(
    title: str = typer.Option(..., "--title", "-t", help="Project title"),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Project description"
    ),
    category: Optional[str] = typer.Option(None, "--category", help="Project category"),
    user: str = USER_OPTION,
) -> None:
    """Create a new project."""
    from vidcraft.db.session import get_session_context
    from vidcraft.services.projects import ProjectService

    with get_session_context() as session:
        project = ProjectService(session).create(
            user, title, description=description, category=category
        )

        console.print("[bold green]Project created successfully![/bold green]")
        console.print(f"[cyan]ID:[/cyan] {project.id}")
        console.print(f"[cyan]Title:[/cyan] {project.title}")

        console.print("\n[dim]Upload a video with:[/dim]")
        console.print(f"[dim]  vidcraft upload video.mp4 --project {project.id}[/dim]")


@projects_app.command("list")
def projects_list(
    status: Optional[str] = typer.Option(
        None, "--status", "-s", help="active, archived or deleted"
    ),
    user: str = USER_OPTION,
) -> None:
    """List projects."""
    from vidcraft.db.session import get_session_context
    from vidcraft.domain.enums import ProjectStatus
    from vidcraft.services.projects import ProjectService

    try:
        status_filter = ProjectStatus(status) if status else None
    except ValueError:
        console.print(f"[bold red]Unknown status: {status}[/bold red]")
        raise typer.Exit(code=1)

    with get_session_context() as session:
        projects = ProjectService(session).list_for_user(user, status_filter)

        if not projects:
            console.print("[dim]No projects found. Create one with 'vidcraft projects create'[/dim]")
            return

        table = Table(title="Projects")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Status")
        table.add_column("Videos", justify="right")
        table.add_column("Agents", justify="right")
        table.add_column("Created")

        for project in projects:
            stats = project.stats or {}
            table.add_row(
                str(project.id),
                project.title,
                project.status,
                str(stats.get("video_count", 0)),
                str(stats.get("agent_count", 0)),
                project.created_at.strftime("%Y-%m-%d") if project.created_at else "-",
            )

        console.print(table)


@projects_app.command("show")
def projects_show(
    project_id: str = typer.Argument(..., help="Project ID (UUID)"),
    user: str = USER_OPTION,
) -> None:
    """Show details of a project."""
    from vidcraft.db.session import get_session_context
    from vidcraft.errors import ServiceError
    from vidcraft.services.projects import ProjectService

    try:
        with get_session_context() as session:
            service = ProjectService(session)
            project = service.get(project_id, user)
            stats = service.refresh_stats(project)

            console.print(Panel.fit(
                f"[bold]{project.title}[/bold]\n\n"
                f"[cyan]ID:[/cyan] {project.id}\n"
                f"[cyan]Description:[/cyan] {project.description or 'N/A'}\n"
                f"[cyan]Status:[/cyan] {project.status}\n"
                f"[cyan]Videos:[/cyan] {stats['video_count']}\n"
                f"[cyan]Agents:[/cyan] {stats['agent_count']}\n"
                f"[cyan]Generations:[/cyan] {stats['total_generations']}\n"
                f"[cyan]Shared:[/cyan] {'Yes' if project.is_shared else 'No'}",
                title="Project Details",
                border_style="blue",
            ))
    except ServiceError as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
