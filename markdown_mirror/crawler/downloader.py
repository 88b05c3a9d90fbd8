"""
Asset downloader for fetching pages and images.

Uses aiohttp for asynchronous downloads. Failures are logged and reported
through return values; nothing is retried.
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional, Set

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, DOWNLOAD_CHUNK_SIZE
from ..utils.log import get_logger
from ..utils.paths import ensure_parent_dir


@dataclass
class FetchedPage:
    """A fetched page body and the URL it was finally served from."""

    body: bytes

    # URL after redirects
    url: str


class AssetDownloader:
    """
    Downloads pages and images over HTTP(S).

    The aiohttp session is opened with start() or 'async with' and shared by
    every request of a crawl.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE
    ):
        """
        Initialize the downloader.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User agent string for requests
            chunk_size: Read size for streamed bodies
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.chunk_size = chunk_size
        self.logger = get_logger("downloader")

        self._session: Optional[aiohttp.ClientSession] = None
        self._downloaded_images: Set[str] = set()
        self._failed: Set[str] = set()

    async def start(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AssetDownloader":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def downloaded_images(self) -> Set[str]:
        """Get the image URLs that were written to disk."""
        return self._downloaded_images.copy()

    @property
    def failed(self) -> Set[str]:
        """Get the URLs that failed to download."""
        return self._failed.copy()

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("AssetDownloader.start() has not been called")
        return self._session

    async def fetch_page(self, url: str) -> Optional[FetchedPage]:
        """
        Fetch a page body.

        Args:
            url: Page URL

        Returns:
            FetchedPage with the raw body and final URL, or None on failure
        """
        session = self._require_session()

        try:
            async with session.get(url, allow_redirects=True) as response:
                if response.status >= 400:
                    self.logger.error(
                        f"Failed to download and save {url}: HTTP {response.status}"
                    )
                    self._failed.add(url)
                    return None

                chunks = []
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    chunks.append(chunk)

                final_url = str(response.url)
                self.logger.debug(f"Fetched page: {url} (served from {final_url})")
                return FetchedPage(body=b"".join(chunks), url=final_url)

        except ClientError as e:
            self.logger.error(f"Failed to download and save {url}: {e}")
        except asyncio.TimeoutError:
            self.logger.error(f"Failed to download and save {url}: timed out")

        self._failed.add(url)
        return None

    async def download_image(self, url: str, local_path: str) -> bool:
        """
        Stream an image to disk.

        Returns only after the file has been flushed and synced.

        Args:
            url: Image URL
            local_path: Destination file path

        Returns:
            True if the image was written, False otherwise
        """
        session = self._require_session()
        opened = False

        try:
            async with session.get(url, allow_redirects=True) as response:
                if response.status >= 400:
                    self.logger.error(
                        f"Failed to download image {url}: HTTP {response.status}"
                    )
                    self._failed.add(url)
                    return False

                ensure_parent_dir(local_path)
                with open(local_path, "wb") as f:
                    opened = True
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        f.write(chunk)
                    f.flush()
                    os.fsync(f.fileno())

        except ClientError as e:
            self.logger.error(f"Failed to download image {url}: {e}")
        except asyncio.TimeoutError:
            self.logger.error(f"Failed to download image {url}: timed out")
        except OSError as e:
            self.logger.error(f"Failed to save image {url} to {local_path}: {e}")
        else:
            self._downloaded_images.add(url)
            self.logger.info(f"Downloaded and saved image {url} as {local_path}")
            return True

        self._failed.add(url)
        if opened:
            self._remove_partial(local_path)
        return False

    def save_page(self, local_path: str, markdown: str) -> bool:
        """
        Write a Markdown page to disk.

        Args:
            local_path: Destination file path
            markdown: Markdown text

        Returns:
            True if successful, False otherwise
        """
        try:
            ensure_parent_dir(local_path)
            with open(local_path, "w", encoding="utf-8") as f:
                f.write(markdown)
        except OSError as e:
            self.logger.error(f"Error saving page {local_path}: {e}")
            return False

        return True

    def _remove_partial(self, local_path: str) -> None:
        try:
            if os.path.exists(local_path):
                os.remove(local_path)
        except OSError as e:
            self.logger.debug(f"Could not remove partial file {local_path}: {e}")
