"""
Utility modules for the markdown mirror.

Contains logging, URL-to-filename mapping, and constants.
"""

from .log import setup_logger, get_logger
from .paths import (
    extract_local_path,
    path_to_filename,
    url_to_filename,
    is_same_domain,
    ensure_dir,
    clear_dir,
)
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_PAGES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_ROOT_SELECTOR,
    MARKDOWN_EXTENSION,
    MDX_EXTENSION,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "extract_local_path",
    "path_to_filename",
    "url_to_filename",
    "is_same_domain",
    "ensure_dir",
    "clear_dir",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_MAX_PAGES",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_ROOT_SELECTOR",
    "MARKDOWN_EXTENSION",
    "MDX_EXTENSION",
]
