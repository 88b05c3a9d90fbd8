"""
Main crawler module.

Walks the same-domain pages of a site, converting each one to Markdown and
saving it together with its images under a per-domain folder.
"""

import asyncio
import os
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence

from .downloader import AssetDownloader
from .rewrite import ContentRewriter, RewrittenPage
from .state import CrawlState
from ..utils.constants import (
    DEFAULT_CHARSET,
    DEFAULT_MAX_PAGES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_ROOT_SELECTOR,
    DEFAULT_TIMEOUT,
    MARKDOWN_EXTENSION,
)
from ..utils.log import get_logger, print_info, print_success
from ..utils.paths import ensure_dir, is_same_domain, strip_www, url_to_filename


@dataclass(frozen=True)
class CrawlTarget:
    """A URL and the folder it is mirrored into."""

    url: str
    folder: str


@dataclass
class CrawlResult:
    """Results of the crawling operation."""

    pages_written: int = 0
    pages_ignored: int = 0
    images_downloaded: int = 0
    errors: List[Dict] = field(default_factory=list)
    pages: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    cancelled: bool = False


class MirrorCrawler:
    """
    Mirrors a site into Markdown files.

    Pages are visited depth-first in document order. Each page filename is
    claimed in the crawl state before it is fetched, so every page is fetched
    and written at most once.
    """

    def __init__(
        self,
        domain: str,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        root_selector: str = DEFAULT_ROOT_SELECTOR,
        max_pages: int = DEFAULT_MAX_PAGES,
        ignore_patterns: Sequence[str] = (),
        extension: str = MARKDOWN_EXTENSION,
        charset: str = DEFAULT_CHARSET,
        class_captions: bool = False,
        localize_external_images: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        downloader: Optional[AssetDownloader] = None,
        state: Optional[CrawlState] = None
    ):
        """
        Initialize the crawler.

        Args:
            domain: Domain to mirror, without scheme (e.g. 'docs.example.com')
            output_dir: Folder holding one mirror directory per domain
            root_selector: CSS selector of the element converted to Markdown
            max_pages: Maximum number of pages to fetch
            ignore_patterns: Filename substrings that are never fetched
            extension: Page filename extension ('.md' or '.mdx')
            charset: Filename charset ('letters' or 'extended')
            class_captions: Emit '{.class}' captions after classed images
            localize_external_images: Also download images from other domains
            timeout: Per-request timeout in seconds
            downloader: Downloader to use instead of an AssetDownloader
            state: Crawl state to share instead of a fresh one
        """
        self.domain = strip_www(domain)
        self.output_dir = os.path.abspath(output_dir)
        self.domain_dir = os.path.join(self.output_dir, self.domain)
        self.start_url = f"https://{self.domain}"
        self.max_pages = max_pages
        self.ignore_patterns = [p for p in ignore_patterns if p]
        self.extension = extension
        self.charset = charset

        self.logger = get_logger("crawler")

        self.downloader = downloader or AssetDownloader(timeout=timeout)
        self.rewriter = ContentRewriter(
            self.domain,
            root_selector=root_selector,
            extension=extension,
            charset=charset,
            class_captions=class_captions,
            localize_external_images=localize_external_images
        )
        self.state = state or CrawlState()

        self._pages_fetched = 0
        self._result = CrawlResult()
        self._cancel_event = asyncio.Event()

    def cancel(self) -> None:
        """Stop the crawl before the next page is started."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def limit_reached(self) -> bool:
        return self._pages_fetched >= self.max_pages

    async def crawl(self) -> CrawlResult:
        """
        Mirror the domain starting from its root page.

        Returns:
            CrawlResult with statistics and errors
        """
        start_time = time.time()

        print_info(f"Starting crawl of {self.start_url}")
        print_info(f"Output directory: {self.domain_dir}")

        ensure_dir(self.domain_dir)

        async with self.downloader:
            await self._crawl_pages(CrawlTarget(self.start_url, self.domain_dir))

        result = self._result
        result.images_downloaded = len(self.downloader.downloaded_images)
        result.cancelled = self.cancelled
        result.duration_seconds = time.time() - start_time

        print_success(
            f"Crawl complete! {result.pages_written} pages, "
            f"{result.images_downloaded} images in {result.duration_seconds:.1f}s"
        )

        return result

    async def _crawl_pages(self, root: CrawlTarget) -> None:
        """
        Process targets until none remain.

        Children go to the front of the worklist in document order, which
        visits pages in the same order as a recursive depth-first walk.
        """
        worklist: Deque[CrawlTarget] = deque([root])

        while worklist:
            if self.cancelled:
                self.logger.warning("Crawl cancelled")
                break

            target = worklist.popleft()
            children = await self.process_target(target)
            worklist.extendleft(reversed(children))

    async def process_target(self, target: CrawlTarget) -> List[CrawlTarget]:
        """
        Mirror one URL.

        Args:
            target: URL and destination folder

        Returns:
            Targets for the same-domain links found on the page; empty when
            the page was skipped or failed
        """
        filename = url_to_filename(target.url, self.extension, self.charset)

        if self.cancelled or self.limit_reached:
            return []

        if not self.state.claim_page(filename):
            return []

        pattern = self._matching_ignore_pattern(filename)
        if pattern is not None:
            self.logger.info(f"Ignoring {target.url} ({filename} matches '{pattern}')")
            self._result.pages_ignored += 1
            return []

        self._pages_fetched += 1
        self.logger.info(
            f"[{self._pages_fetched}/{self.max_pages}] Crawling: {target.url}"
        )

        fetched = await self.downloader.fetch_page(target.url)
        if fetched is None:
            self._record_error(target.url, "Failed to fetch page", "fetch_error")
            return []

        if not is_same_domain(fetched.url, self.domain):
            self.logger.info(f"Skipping external redirect: {target.url} -> {fetched.url}")
            self._record_error(target.url, f"Redirected to {fetched.url}", "redirect_error")
            return []

        try:
            page = self.rewriter.rewrite(fetched.body, fetched.url)
        except Exception as e:
            self.logger.error(f"Error converting {target.url}: {e}")
            self._record_error(target.url, str(e), "convert_error")
            return []

        await self._download_images(page, target.folder)

        local_path = os.path.join(target.folder, filename)
        if self.downloader.save_page(local_path, page.markdown):
            self.logger.info(f"Downloaded and saved {target.url} as {local_path}")
            self._result.pages_written += 1
            self._result.pages.append(filename)
        else:
            self._record_error(target.url, f"Failed to write {local_path}", "save_error")

        return [CrawlTarget(link, self.domain_dir) for link in page.links]

    async def _download_images(self, page: RewrittenPage, folder: str) -> None:
        """Download the page's images that no earlier page has claimed."""
        for image in page.images:
            if not self.state.claim_image(image.url):
                continue

            local_path = os.path.join(folder, image.filename)
            if not await self.downloader.download_image(image.url, local_path):
                self._record_error(image.url, "Failed to download image", "image_error")

    def _matching_ignore_pattern(self, filename: str) -> Optional[str]:
        for pattern in self.ignore_patterns:
            if pattern in filename:
                return pattern
        return None

    def _record_error(self, url: str, error: str, error_type: str) -> None:
        self._result.errors.append({
            'url': url,
            'error': error,
            'type': error_type
        })
