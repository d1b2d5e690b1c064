"""Tests for version detection from source URLs."""

import pytest

from src.formula.version import parse_version


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://x/pkg-1.2.tar.gz", "1.2"),
        ("https://ftp.gnu.org/gnu/wget/wget-1.21.4.tar.gz", "1.21.4"),
        ("https://github.com/o/r/archive/refs/tags/v2.0.1.tar.gz", "2.0.1"),
        ("https://example.org/llvm-project-15.0.7.src.tar.xz", "15.0.7"),
        ("https://example.org/download/v1.4/tool.zip", "1.4"),
        ("https://downloads.sourceforge.net/project/foo/foo-2.3.tar.gz/download", "2.3"),
        ("https://example.org/tool_3.0rc1.tgz", "3.0rc1"),
        ("https://example.org/curl-8.4.0.tar.bz2", "8.4.0"),
    ],
)
def test_parse_version(url, expected):
    assert parse_version(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://example.org/tool.tar.gz",
        "https://github.com/o/tool.git",
    ],
)
def test_no_version(url):
    assert parse_version(url) is None
