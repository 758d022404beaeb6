import logging
from pathlib import Path
from typing import Optional

import typer
from PIL import Image
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .assets import ASSETS_ENV_VAR
from .core import ALPHA_THRESHOLD, MAX_ALPHA
from .core.engine import WatermarkEngine
from .core.position import describe_watermark
from .exceptions import WatermarkError
from .processors.archive import default_archive_name, write_archive
from .processors.batch import BatchResult, get_files_to_process, plan_output_paths, process_batch
from .processors.image import (
    MAX_FILE_SIZE,
    SUPPORTED_IMAGE_FORMATS,
    default_output_path,
    process_image,
)

app = typer.Typer(
    name="gemini-unblend",
    help="Remove the Gemini corner watermark from images by reverse alpha blending.",
    add_completion=True,
)
console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def load_engine(assets: Optional[Path], alpha_threshold: float, max_alpha: float) -> WatermarkEngine:
    """Create the engine or exit with an error message."""
    try:
        return WatermarkEngine.create(
            assets,
            alpha_threshold=alpha_threshold,
            max_alpha=max_alpha,
        )
    except (WatermarkError, ValueError) as e:
        console.print(f"[red]Failed to create engine:[/red] {e}")
        raise typer.Exit(2)


@app.command()
def process(
    path: Path = typer.Argument(
        ...,
        help="Path to image file or directory for batch processing",
        exists=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (file or directory). Defaults to input location with '_output' suffix.",
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Process directories recursively",
    ),
    suffix: str = typer.Option(
        "_output",
        "--suffix",
        "-s",
        help="Suffix to add to output filenames",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        "-y",
        help="Overwrite existing output files without prompting",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-j",
        min=1,
        help="Number of images processed in parallel (1 = sequential)",
    ),
    archive: Optional[Path] = typer.Option(
        None,
        "--zip",
        help="Also package all outputs into this zip archive",
    ),
    assets: Optional[Path] = typer.Option(
        None,
        "--assets",
        envvar=ASSETS_ENV_VAR,
        help="Directory with bg_48.png and bg_96.png reference captures",
    ),
    alpha_threshold: float = typer.Option(
        ALPHA_THRESHOLD,
        "--alpha-threshold",
        help="Alpha below which pixels are left untouched",
    ),
    max_alpha: float = typer.Option(
        MAX_ALPHA,
        "--max-alpha",
        max=0.999,
        help="Upper clamp for alpha during inverse blending",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Remove the watermark from images.

    Output images are always written as PNG.

    Examples:
        gemini-unblend process image.png
        gemini-unblend process image.jpg -o cleaned.png
        gemini-unblend process ./photos/ -r -j 4 --zip photos.zip
    """
    configure_logging(verbose)

    files = get_files_to_process(path, recursive)

    if not files:
        console.print(f"[red]No supported files found in {path}[/red]")
        console.print(f"Supported formats: {SUPPORTED_IMAGE_FORMATS}")
        raise typer.Exit(1)

    engine = load_engine(assets, alpha_threshold, max_alpha)

    if path.is_file():
        file_output = output if output else default_output_path(path, suffix)
        if file_output.exists() and not overwrite:
            if not typer.confirm(f"Overwrite {file_output}?"):
                raise typer.Exit(0)
        try:
            result = process_image(path, file_output, suffix, engine=engine)
        except (WatermarkError, OSError) as e:
            console.print(f"[red]Error processing {path}:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]Image saved:[/green] {result}")
        results = [BatchResult(source=path, output=result)]
    else:
        output_dir = output
        if output_dir:
            output_dir.mkdir(parents=True, exist_ok=True)

        # Plan outputs and confirm overwrites up front, before work is handed to the pool
        outputs = plan_output_paths(files, output_dir, suffix)
        if not overwrite:
            kept = [
                (file_path, file_output)
                for file_path, file_output in zip(files, outputs)
                if not (isinstance(file_output, Path) and file_output.exists())
                or typer.confirm(f"Overwrite {file_output}?")
            ]
            files = [file_path for file_path, _ in kept]
            outputs = [file_output for _, file_output in kept]

        console.print(
            Panel(
                f"Processing {len(files)} image(s)",
                title="Gemini Unblend",
                border_style="blue",
            )
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            main_task = progress.add_task("Processing images...", total=len(files))

            def report(item: BatchResult) -> None:
                if item.ok:
                    console.print(f"  [green]Image saved:[/green] {item.output}")
                else:
                    console.print(f"  [red]Error processing {item.source}:[/red] {item.error}")
                progress.advance(main_task)

            results = process_batch(
                files,
                engine,
                output_dir=output_dir,
                suffix=suffix,
                max_workers=workers,
                on_complete=report,
                outputs=outputs,
            )

        failed = [r for r in results if not r.ok]
        if failed:
            console.print(f"[yellow]{len(failed)} of {len(results)} image(s) failed[/yellow]")
        if results and len(failed) == len(results):
            raise typer.Exit(1)

    if archive:
        archive_path = archive / default_archive_name() if archive.is_dir() else archive
        try:
            names = write_archive(results, archive_path)
        except WatermarkError as e:
            console.print(f"[red]Cannot write archive:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]Archived {len(names)} image(s):[/green] {archive_path}")

    console.print("[bold green]Done![/bold green]")


@app.command()
def describe(
    path: Path = typer.Argument(..., help="Image file", exists=True, dir_okay=False),
):
    """Show where the watermark is expected on an image."""
    try:
        # Header read only, pixels are never decoded
        with Image.open(path) as img:
            width, height = img.size
    except OSError as e:
        console.print(f"[red]Cannot read {path}:[/red] {e}")
        raise typer.Exit(1)

    watermark = describe_watermark(width, height)

    table = Table(title=path.name, show_header=False)
    table.add_row("Image size", f"{width} x {height} px")
    table.add_row("Watermark", f"{watermark.size} x {watermark.size} px")
    table.add_row("Position", f"({watermark.position.x}, {watermark.position.y})")
    table.add_row(
        "Margins",
        f"right {watermark.config.margin_right} px, bottom {watermark.config.margin_bottom} px",
    )
    if not watermark.position.fits(width, height):
        table.add_row("Status", "[red]image too small for watermark[/red]")
    console.print(table)


@app.command()
def info():
    """Display information about supported formats and algorithm."""
    console.print(
        Panel(
            "[bold]Gemini Unblend[/bold]\n\n"
            "Removes the Gemini sparkle watermark from the bottom-right corner of images.\n\n"
            "[cyan]Watermark geometry:[/cyan]\n"
            "  - 96x96 logo, 64px margins when width and height both exceed 1024px\n"
            "  - 48x48 logo, 32px margins otherwise\n\n"
            f"[cyan]Supported Image Formats:[/cyan] {', '.join(sorted(SUPPORTED_IMAGE_FORMATS))}\n"
            f"[cyan]Maximum File Size:[/cyan] {MAX_FILE_SIZE // (1024 * 1024)} MiB\n"
            "[cyan]Output:[/cyan] PNG\n\n"
            "[dim]original = (watermarked - alpha * 255) / (1 - alpha)[/dim]\n"
            "[dim]alpha derived from bundled reference captures[/dim]",
            title="About",
            border_style="blue",
        )
    )


if __name__ == "__main__":
    app()
