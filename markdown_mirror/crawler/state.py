"""
Per-run crawl state.

Holds the visited page filenames and the claimed image URLs for a single
crawl. Separate crawls in the same process use separate instances.
"""

from typing import Set


class CrawlState:
    """
    Dedup sets shared by every step of one crawl.

    Both sets only grow. The claim methods test and insert in one step with
    no suspension point, so under asyncio no other task can interleave
    between the check and the insert.
    """

    def __init__(self):
        self._visited_pages: Set[str] = set()
        self._claimed_images: Set[str] = set()

    def claim_page(self, filename: str) -> bool:
        """
        Mark a page filename as visited.

        Args:
            filename: Canonical page filename

        Returns:
            True if the caller now owns the page, False if it was already visited
        """
        if filename in self._visited_pages:
            return False
        self._visited_pages.add(filename)
        return True

    def claim_image(self, url: str) -> bool:
        """
        Mark an image URL as downloaded.

        Args:
            url: Resolved image URL

        Returns:
            True if the caller should download it, False if already claimed
        """
        if url in self._claimed_images:
            return False
        self._claimed_images.add(url)
        return True

    def is_visited(self, filename: str) -> bool:
        return filename in self._visited_pages

    @property
    def visited_pages(self) -> Set[str]:
        """Get a copy of the visited page filenames."""
        return self._visited_pages.copy()

    @property
    def claimed_images(self) -> Set[str]:
        """Get a copy of the claimed image URLs."""
        return self._claimed_images.copy()
