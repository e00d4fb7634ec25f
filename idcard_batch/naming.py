"""Roll-number extraction and photo lookup."""

import os
from pathlib import Path

# Probe order matters: the first extension that exists wins.
DEFAULT_ASSET_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff")
DEFAULT_TEMPLATE_EXTENSIONS = (".psd",)
DEFAULT_RESIZE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".gif")


def extract_identifier(file_name, extension=None):
    """Return ``file_name`` without its final extension.

    With ``extension`` set, only that extension is stripped (case-insensitive),
    so ``"1042.PSD"`` gives ``"1042"`` and ``"1042.jpg"`` is left alone.
    """
    if not file_name:
        raise ValueError("file name must not be empty")

    name = os.path.basename(os.fspath(file_name))
    if extension is not None:
        if name.lower().endswith(extension.lower()) and len(name) > len(extension):
            return name[: -len(extension)]
        return name

    stem, ext = os.path.splitext(name)
    return stem if ext else name


def find_asset(identifier, directory, extensions=DEFAULT_ASSET_EXTENSIONS):
    """Return the first ``directory/identifier+ext`` that exists, else ``None``."""
    directory = Path(directory)
    for ext in extensions:
        candidate = directory / f"{identifier}{ext}"
        if candidate.is_file():
            return candidate
    return None


def list_files(directory, extensions):
    """List regular files in ``directory`` whose suffix is in ``extensions``."""
    wanted = {ext.lower() for ext in extensions}
    return sorted(
        p for p in Path(directory).iterdir()
        if p.is_file() and p.suffix.lower() in wanted
    )
