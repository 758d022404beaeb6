from .archive import default_archive_name, write_archive
from .batch import BatchResult, get_files_to_process, process_batch
from .image import (
    MAX_FILE_SIZE,
    SUPPORTED_IMAGE_FORMATS,
    is_supported_image,
    load_image,
    process_image,
    save_image,
)

__all__ = [
    "process_image",
    "process_batch",
    "load_image",
    "save_image",
    "write_archive",
    "default_archive_name",
    "get_files_to_process",
    "is_supported_image",
    "BatchResult",
    "MAX_FILE_SIZE",
    "SUPPORTED_IMAGE_FORMATS",
]
