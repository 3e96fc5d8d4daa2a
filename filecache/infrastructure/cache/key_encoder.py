"""Translates arbitrary cache keys into filesystem-safe file names.

Path-special characters are replaced by multi-character escape sequences:

    "_"  -> "___"
    "/"  -> "_s_"
    "\\" -> "_b_"
    ":"  -> "_d_"

Every escape starts with "_" and its second character tells them apart, so
the mapping is injective. Names that would make the full path too long fall
back to an md5 digest of the unescaped key.
"""

import hashlib
import os
from pathlib import Path
from typing import Union

CACHE_FILE_EXTENSION = ".cache"

# Windows full paths need to stay under 260 characters. Approximative value
# due to NTFS short file names (e.g. PROGRA~1) that get longer when evaluated.
MAX_PATH_LENGTH = 160

# Most filesystems cap a single name at 255 bytes. Writers wrap the entry name
# as ".<name>.XXXXXXXX.tmp" while filling it, hence the margin.
MAX_FILE_NAME_BYTES = 255 - 16

_ESCAPES = str.maketrans({
    "_": "___",
    "/": "_s_",
    "\\": "_b_",
    ":": "_d_",
})


def escape_key(text: str) -> str:
    """Replaces "_", "/", "\\" and ":" with their escape sequences."""
    return text.translate(_ESCAPES)


def encode_file_name(raw_key: str, prefix: str, directory: Union[str, Path]) -> str:
    """Returns the entry file name for `prefix + raw_key` inside `directory`.

    Args:
        raw_key: The caller's key.
        prefix: The namespace prefix, kept readable in both branches.
        directory: The directory the file will live in; counts towards the
            path length limit.

    Returns:
        The escaped name with the cache extension, or the escaped prefix plus
        an md5 hex digest when the full path would reach MAX_PATH_LENGTH bytes
        or the name alone would exceed MAX_FILE_NAME_BYTES.
    """
    full_key = prefix + raw_key
    name = escape_key(full_key) + CACHE_FILE_EXTENSION
    if _fits(directory, name):
        return name
    digest = hashlib.md5(full_key.encode("utf-8")).hexdigest()
    return escape_key(prefix) + digest + CACHE_FILE_EXTENSION


def _fits(directory: Union[str, Path], name: str) -> bool:
    # Lengths are counted in encoded bytes, not characters
    if len(os.fsencode(name)) > MAX_FILE_NAME_BYTES:
        return False
    return len(os.fsencode(_with_separator(directory) + name)) < MAX_PATH_LENGTH


def _with_separator(directory: Union[str, Path]) -> str:
    rendered = str(directory)
    if not rendered.endswith(os.sep):
        rendered += os.sep
    return rendered
