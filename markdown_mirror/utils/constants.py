"""
Shared constants for the markdown mirror.

Contains common configuration values used across multiple modules.
"""

import re

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Default request timeout in seconds
DEFAULT_TIMEOUT = 30

# Maximum pages to fetch by default
DEFAULT_MAX_PAGES = 1000

# Folder that holds one mirror directory per domain
DEFAULT_OUTPUT_DIR = "results"

# Element converted to Markdown when no root selector is given
DEFAULT_ROOT_SELECTOR = "body"

# Extension appended to every page filename (crawl-wide)
MARKDOWN_EXTENSION = ".md"
MDX_EXTENSION = ".mdx"

# Read size for streamed downloads
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Separator replacing disallowed filename characters
FILENAME_SEPARATOR = "-"

# Fallback filename for root and empty paths
INDEX_NAME = "index"

# Characters NOT allowed in page filenames, per charset
FILENAME_CHARSETS = {
    "letters": re.compile(r"[^a-zA-Z]"),
    "extended": re.compile(r"[^a-zA-Z0-9\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u024F]"),
}

DEFAULT_CHARSET = "letters"

# Link schemes that never point to a crawlable page
SKIPPED_LINK_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")
