"""
Markdown Mirror - mirror a documentation site as local Markdown files.

This package crawls the pages of a single domain, converts each one to
Markdown, downloads its images, and rewrites internal links so the mirror
can be browsed offline.
"""

__version__ = "1.0.0"
__author__ = "Markdown Mirror Team"
