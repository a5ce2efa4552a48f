"""Collision-free filename allocation."""

from collections.abc import Callable
from pathlib import PurePosixPath

# (exists, filename, ext) -> name that does not exist yet
FilenamePolicy = Callable[[Callable[[str], bool], str, str], str]


def unique_filename(exists: Callable[[str], bool], filename: str, ext: str) -> str:
    """Return `filename`, or the first free `{base}_{n}{ext}` variant of it.

    `exists` is the view of the target directory: it reports whether an
    entry with the given name is already present. `ext` is the extension
    part of `filename` (possibly empty, matched case-insensitively) and is
    the suffix of every renamed candidate.

    This is a check, not a reservation. Callers must serialize the call
    together with the creation of the file.
    """
    base = filename[: -len(ext)] if ext and filename.lower().endswith(ext.lower()) else filename

    candidate = filename
    count = 1
    while exists(candidate):
        candidate = f"{base}_{count}{ext}"
        count += 1

    return candidate


def split_extension(filename: str) -> str:
    """Return the lower-cased extension of `filename`, including the dot."""
    return PurePosixPath(filename).suffix.lower()


def normalize_extension(ext: str) -> str:
    """Normalize an extension to lower case with a leading dot.

    Raises:
        ValueError: If the extension is empty
    """
    value = ext.strip().lower()
    if not value or value == ".":
        raise ValueError("Extension must not be empty")

    if not value.startswith("."):
        value = "." + value

    return value


def base_filename(filename: str) -> str:
    """Strip any directory component a client may have sent with the name."""
    return PurePosixPath(filename.replace("\\", "/")).name
