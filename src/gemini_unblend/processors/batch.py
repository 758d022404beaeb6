"""Batch processing of many images with per-item outcomes."""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ..core.engine import WatermarkEngine
from ..exceptions import OutputConflictError
from .image import is_supported_image, process_image

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch item."""

    source: Path
    output: Path | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_files_to_process(path: Path, recursive: bool = False) -> list[Path]:
    """Get all supported images from path (file or directory)."""
    if path.is_file():
        return [path]

    pattern = "**/*" if recursive else "*"
    return sorted(f for f in path.glob(pattern) if f.is_file() and is_supported_image(f))


def output_path_for(
    file_path: Path,
    output_dir: Path | None,
    suffix: str = "_output",
) -> Path:
    """Output location for one item: beside the input, or inside output_dir."""
    directory = output_dir if output_dir is not None else file_path.parent
    return directory / f"{file_path.stem}{suffix}.png"


def plan_output_paths(
    files: Sequence[Path],
    output_dir: Path | None = None,
    suffix: str = "_output",
) -> list[Path | OutputConflictError]:
    """
    Assign every file its own output path.

    The first file claiming a name keeps the plain `<stem><suffix>.png`.
    A later file with the same stem gets its source extension folded into the
    name (`a.bmp` -> `a_bmp_output.png`). If that name is taken as well, the
    item gets an OutputConflictError instead of a path.
    """
    claimed: set[Path] = set()
    planned: list[Path | OutputConflictError] = []
    for file_path in files:
        plain = output_path_for(file_path, output_dir, suffix)
        extension = file_path.suffix.lstrip(".").lower()
        with_extension = plain.with_name(f"{file_path.stem}_{extension}{suffix}.png")

        for candidate in (plain, with_extension):
            if candidate.resolve() not in claimed:
                claimed.add(candidate.resolve())
                planned.append(candidate)
                break
        else:
            planned.append(
                OutputConflictError(f"{file_path}: output {plain.name} is used by another input")
            )
    return planned


def process_batch(
    files: Sequence[Path],
    engine: WatermarkEngine,
    output_dir: Path | None = None,
    suffix: str = "_output",
    max_workers: int | None = None,
    on_complete: Callable[[BatchResult], None] | None = None,
    outputs: Sequence[Path | OutputConflictError] | None = None,
) -> list[BatchResult]:
    """
    Remove the watermark from every file.

    Each item is independent: a failure is recorded on that item's result
    and never stops the rest of the batch. Output paths are planned before
    any work starts, so no two items ever write the same file.

    Args:
        files: Input image paths
        engine: Shared engine (its alpha map cache is thread-safe)
        output_dir: Directory for outputs. Defaults to each input's directory.
        suffix: Suffix added to output file names
        max_workers: Thread pool size. 1 processes sequentially.
        on_complete: Called once per item with that item's result
        outputs: Output paths from plan_output_paths, one per file. Planned
            here when not given.

    Returns:
        Results in the same order as files
    """

    def run(item: tuple[Path, Path | OutputConflictError]) -> BatchResult:
        file_path, target = item
        result = BatchResult(source=file_path)
        try:
            if isinstance(target, OutputConflictError):
                raise target
            result.output = process_image(file_path, target, engine=engine)
        except Exception as e:
            logger.warning("Failed to process %s: %s", file_path, e)
            result.error = e
        if on_complete is not None:
            on_complete(result)
        return result

    if outputs is None:
        outputs = plan_output_paths(files, output_dir, suffix)
    items = list(zip(files, outputs))

    if max_workers == 1:
        return [run(item) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(run, items))
