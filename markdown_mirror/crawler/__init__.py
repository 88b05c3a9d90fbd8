"""
Crawler module for mirroring a site as Markdown.

Contains components for crawling, downloading, and rewriting pages.
"""

from .crawler import MirrorCrawler, CrawlResult, CrawlTarget
from .downloader import AssetDownloader, FetchedPage
from .rewrite import ContentRewriter, ImageRef, RewrittenPage
from .state import CrawlState

__all__ = [
    "MirrorCrawler",
    "CrawlResult",
    "CrawlTarget",
    "AssetDownloader",
    "FetchedPage",
    "ContentRewriter",
    "ImageRef",
    "RewrittenPage",
    "CrawlState",
]
