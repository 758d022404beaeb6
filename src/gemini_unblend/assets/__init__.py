# Reference captures: bg_48.png and bg_96.png
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

ASSETS_ENV_VAR = "GEMINI_UNBLEND_ASSETS"


def reference_capture_name(size: int) -> str:
    """File name of the reference capture for a watermark size."""
    return f"bg_{size}.png"


def get_asset_path(filename: str, assets_dir: Path | None = None) -> Traversable:
    """Get the path to a bundled asset file, or to one in an override directory."""
    if assets_dir is not None:
        return Path(assets_dir) / filename
    return resources.files(__package__).joinpath(filename)
