"""Version detection from source URLs.

Default version collaborator for the loader. It recognises the common
archive naming schemes:

    https://example.org/pkg-1.2.3.tar.gz                  → 1.2.3
    https://github.com/o/r/archive/refs/tags/v2.0.1.tar.gz → 2.0.1
    https://example.org/llvm-project-15.0.7.src.tar.xz    → 15.0.7
    https://example.org/download/v1.4/tool.zip            → 1.4
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import unquote, urlsplit

_ARCHIVE_EXTENSION = re.compile(
    r"\.(?:tar\.(?:gz|bz2|xz|lz|lzma|zst|Z)|tgz|tbz2?|txz|tlz|zip|gz|bz2|xz|7z|rar"
    r"|dmg|pkg|jar|deb|rpm|gem|crate|tar)$",
    re.IGNORECASE,
)
_SOURCE_SUFFIX = re.compile(r"[-_.](?:src|source|sources|orig|dist|stable|release)$", re.IGNORECASE)

_VERSION = r"\d+(?:\.\d+)*(?:[-_.]?(?:alpha|beta|rc|pre|a|b|p)\.?\d*)?[a-z]?"

# name-1.2.3, name_1.2.3, name-v1.2.3
_NAME_VERSION = re.compile(rf"[-_]v?({_VERSION})$", re.IGNORECASE)
# 1.2.3 or v1.2.3 (tag archives)
_BARE_VERSION = re.compile(rf"^v?({_VERSION})$", re.IGNORECASE)
# .../1.2.3/... or .../v1.2.3/...
_DIRECTORY_VERSION = re.compile(r"/v?(\d+(?:\.\d+)+)/")


def _archive_stem(path: str) -> str:
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return ""
    basename = segments[-1]
    # SourceForge style .../pkg-1.2.tar.gz/download
    if basename == "download" and len(segments) > 1:
        basename = segments[-2]
    stem = _ARCHIVE_EXTENSION.sub("", basename)
    return _SOURCE_SUFFIX.sub("", stem)


def parse_version(url: str) -> str | None:
    """Derive a version string from a source URL.

    Args:
        url: Source archive URL

    Returns:
        The version, or None when the URL carries no recognisable version
    """
    if not url:
        return None
    path = unquote(urlsplit(url).path)
    stem = _archive_stem(path)

    for pattern in (_NAME_VERSION, _BARE_VERSION):
        match = pattern.search(stem)
        if match:
            return match.group(1)

    match = _DIRECTORY_VERSION.search(posixpath.dirname(path) + "/")
    if match:
        return match.group(1)
    return None
