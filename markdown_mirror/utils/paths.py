"""
Path and URL utilities for the markdown mirror.

Maps page URLs onto flat, filesystem-safe Markdown filenames and decides
which URLs belong to the mirrored domain.
"""

import os
import re
import shutil
from typing import Optional
from urllib.parse import urlparse, urljoin, urldefrag, unquote

from .constants import (
    DEFAULT_CHARSET,
    FILENAME_CHARSETS,
    FILENAME_SEPARATOR,
    INDEX_NAME,
    MARKDOWN_EXTENSION,
    SKIPPED_LINK_PREFIXES,
)
from .log import get_logger


logger = get_logger("paths")

_SEPARATOR_RUN = re.compile(f"{re.escape(FILENAME_SEPARATOR)}+")


def extract_local_path(url: str) -> Optional[str]:
    """
    Extract the decoded path component of an absolute URL.

    Args:
        url: Absolute URL

    Returns:
        Path string, or None if the URL cannot be parsed
    """
    try:
        parsed = urlparse(url)
        # Accessing the port validates the netloc
        parsed.port
    except ValueError:
        logger.warning(f"Invalid URL: {url}")
        return None

    if not parsed.scheme or not parsed.netloc:
        logger.warning(f"Invalid URL: {url}")
        return None

    return unquote(parsed.path)


def path_to_filename(
    path: Optional[str],
    extension: str = MARKDOWN_EXTENSION,
    charset: str = DEFAULT_CHARSET
) -> str:
    """
    Convert a URL path into a canonical page filename.

    Every character outside the charset becomes a separator, separator runs
    collapse to one, and separators at either end are stripped.

    Args:
        path: URL path (None is treated as the root path)
        extension: Extension appended to the name
        charset: Key of FILENAME_CHARSETS

    Returns:
        Filename such as 'Foo-Bar.md' or 'index.md'
    """
    if charset not in FILENAME_CHARSETS:
        raise ValueError(f"Unknown filename charset: {charset}")

    name = FILENAME_CHARSETS[charset].sub(FILENAME_SEPARATOR, path or "")
    name = _SEPARATOR_RUN.sub(FILENAME_SEPARATOR, name)
    name = name.strip(FILENAME_SEPARATOR)

    if not name:
        name = INDEX_NAME

    return f"{name}{extension}"


def url_to_filename(
    url: str,
    extension: str = MARKDOWN_EXTENSION,
    charset: str = DEFAULT_CHARSET
) -> str:
    """
    Convert an absolute URL to its page filename.

    An unparseable URL falls back to the index filename.
    """
    return path_to_filename(extract_local_path(url), extension, charset)


def get_domain(url: str) -> str:
    """
    Extract the host from a URL, lower-cased and without a 'www.' prefix.

    Args:
        url: URL to extract domain from

    Returns:
        Domain string (e.g., 'example.com'), empty if there is none
    """
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return strip_www(host)


def strip_www(domain: str) -> str:
    """Lower-case a host name and drop a leading 'www.'."""
    domain = domain.strip().lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def is_same_domain(url: str, domain: str) -> bool:
    """
    Check if a URL is on the mirrored domain.

    Args:
        url: Absolute URL to check
        domain: Configured domain, with or without 'www.'

    Returns:
        True if same domain, False otherwise
    """
    host = get_domain(url)
    return bool(host) and host == strip_www(domain)


def absolutize_url(href: str, page_url: str) -> Optional[str]:
    """
    Resolve an href found on a page to an absolute http(s) URL.

    Scheme-relative hrefs get 'https:', relative hrefs are resolved against
    the page URL, and fragments are dropped.

    Args:
        href: Raw attribute value
        page_url: URL of the page containing the reference

    Returns:
        Absolute URL, or None for non-navigable or malformed references
    """
    href = (href or "").strip()
    if not href or href.lower().startswith(SKIPPED_LINK_PREFIXES):
        return None

    if href.startswith("//"):
        href = f"https:{href}"

    try:
        url, _ = urldefrag(urljoin(page_url, href))
        scheme = urlparse(url).scheme
    except ValueError:
        logger.warning(f"Invalid URL: {href}")
        return None

    if scheme not in ("http", "https"):
        return None

    return url


def image_filename(url: str) -> Optional[str]:
    """
    Get the local filename of an image: the final segment of its URL path.

    The segment is split off before percent-decoding, so an encoded slash
    stays part of the name.

    Args:
        url: Absolute image URL

    Returns:
        Decoded filename, or None if the path has no final segment
    """
    if extract_local_path(url) is None:
        return None

    segment = urlparse(url).path.rsplit("/", 1)[-1]
    name = unquote(segment)
    # Decoded separators must not reach the filesystem
    name = name.replace("/", "_").replace("\\", "_")
    return name or None


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        ensure_dir(parent)


def clear_dir(path: str) -> None:
    """
    Remove a directory tree if present and recreate it empty.

    Args:
        path: Directory to clear
    """
    if os.path.isdir(path):
        shutil.rmtree(path)
    ensure_dir(path)
