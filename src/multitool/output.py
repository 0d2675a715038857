"""Where generated media is written."""

from datetime import datetime
from pathlib import Path


def output_path(output_dir: str | Path, prefix: str, extension: str) -> Path:
    """Timestamped, non-clobbering file path inside ``output_dir``.

    ``extension`` may be given with or without the leading dot.
    """
    directory = Path(output_dir).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    suffix = extension if extension.startswith(".") else f".{extension}"
    stem = f"{prefix}-{datetime.now().strftime('%Y%m%d-%H%M%S')}"

    candidate = directory / f"{stem}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}-{counter}{suffix}"
        counter += 1
    return candidate
