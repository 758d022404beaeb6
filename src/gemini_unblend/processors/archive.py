import time
import zipfile
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from ..exceptions import OutputConflictError
from .batch import BatchResult


def default_archive_name() -> str:
    return f"unwatermarked_{int(time.time() * 1000)}.zip"


def write_archive(results: Iterable[BatchResult], archive_path: Path) -> list[str]:
    """
    Package the outputs of successful batch items into one zip file.

    Failed items are skipped. Entries are stored under their output file name.

    Returns:
        Names of the archived entries

    Raises:
        OutputConflictError: If two outputs share a file name. Nothing is written.
    """
    outputs = [r.output for r in results if r.ok and r.output is not None]

    duplicates = sorted(name for name, count in Counter(p.name for p in outputs).items() if count > 1)
    if duplicates:
        raise OutputConflictError(f"Duplicate archive entries: {', '.join(duplicates)}")

    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for output in outputs:
            zf.write(output, arcname=output.name)
    return [output.name for output in outputs]
