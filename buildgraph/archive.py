import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from .logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

logger = get_logger(__name__)


def zip_directory(
    source_dir: Path, dest_file: Path, files: "Iterable[Path] | None" = None
) -> Path:
    """
    Zip `files` (default: every file below `source_dir`) into `dest_file`, stored
    relative to `source_dir`.
    """
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Cannot archive missing directory '{source_dir}'.")

    if files is None:
        files = sorted(p for p in source_dir.rglob("*") if p.is_file())

    dest_file.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with zipfile.ZipFile(dest_file, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in files:
            path = path if path.is_absolute() else source_dir / path
            archive.write(path, arcname=path.relative_to(source_dir).as_posix())
            count += 1

    logger.info("archive_written", archive=str(dest_file), files=count)
    return dest_file
