"""
Content rewriter for converting fetched pages to mirrored Markdown.

Relocates image sources to local filenames, repoints same-domain links to
their mirrored page filenames, and converts the result to Markdown. The
rewrite itself performs no I/O; the images it reports are downloaded by the
caller.
"""

import re
from dataclasses import dataclass, field
from typing import List, Union
from urllib.parse import quote, urljoin

from bs4 import BeautifulSoup
from markdownify import markdownify as md

from ..utils.constants import DEFAULT_CHARSET, DEFAULT_ROOT_SELECTOR, MARKDOWN_EXTENSION
from ..utils.log import get_logger
from ..utils.paths import (
    absolutize_url,
    extract_local_path,
    image_filename,
    is_same_domain,
    path_to_filename,
)


@dataclass
class ImageRef:
    """An image referenced by a page."""

    # Resolved source URL
    url: str

    # Filename the image is saved under, beside the page
    filename: str

    # CSS classes of the original element, in order
    classes: List[str] = field(default_factory=list)

    @property
    def src(self) -> str:
        """Percent-encoded reference to the local file."""
        return quote(self.filename)


@dataclass
class RewrittenPage:
    """Output of a page rewrite."""

    markdown: str = ""

    # Images to download, in document order
    images: List[ImageRef] = field(default_factory=list)

    # Absolute same-domain URLs linked from the page, in document order
    links: List[str] = field(default_factory=list)


class ContentRewriter:
    """
    Rewrites page HTML into self-contained Markdown.

    Images are localized first, then links, then the root scope is converted
    to Markdown and image titles are stripped.
    """

    # ![alt](url "title") -> ![alt](url)
    IMAGE_TITLE_PATTERN = re.compile(
        r'(!\[(?:[^\[\]]|\[[^\[\]]*\])*\]\((?:[^()\s]|\([^()\s]*\))+)\s+"(?:[^"\\]|\\.)*"\)'
    )

    def __init__(
        self,
        domain: str,
        root_selector: str = DEFAULT_ROOT_SELECTOR,
        extension: str = MARKDOWN_EXTENSION,
        charset: str = DEFAULT_CHARSET,
        class_captions: bool = False,
        localize_external_images: bool = True
    ):
        """
        Initialize the content rewriter.

        Args:
            domain: Mirrored domain
            root_selector: CSS selector of the element converted to Markdown
            extension: Page filename extension
            charset: Filename charset (see FILENAME_CHARSETS)
            class_captions: Emit '{.class}' captions after classed images
            localize_external_images: Also localize images from other domains
        """
        self.domain = domain
        self.root_selector = root_selector or DEFAULT_ROOT_SELECTOR
        self.extension = extension
        self.charset = charset
        self.class_captions = class_captions
        self.localize_external_images = localize_external_images
        self.logger = get_logger("rewriter")

    def rewrite(self, html: Union[str, bytes], page_url: str) -> RewrittenPage:
        """
        Rewrite a page.

        Args:
            html: Page HTML (bytes are decoded by the parser)
            page_url: Final URL the page was served from

        Returns:
            RewrittenPage with the Markdown, images to download and links found
        """
        soup = self.parse(html)
        page = RewrittenPage()

        base = soup.find('base', href=True)
        if base is not None:
            page_url = urljoin(page_url, base['href'].strip())

        page.images = self.rewrite_images(soup, page_url)
        page.links = self.rewrite_links(soup, page_url)

        root = self.select_root(soup)
        page.markdown = self.to_markdown(root)

        return page

    def parse(self, html: Union[str, bytes]) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, 'lxml')
        except Exception:
            return BeautifulSoup(html, 'html.parser')

    def rewrite_images(self, soup: BeautifulSoup, page_url: str) -> List[ImageRef]:
        """
        Point every image at its local filename.

        Args:
            soup: Parsed page, modified in place
            page_url: URL for resolving relative sources

        Returns:
            ImageRef per localized image, in document order
        """
        images: List[ImageRef] = []

        for img in soup.find_all('img'):
            if img.has_attr('title'):
                del img['title']

            src = (img.get('src') or '').strip()
            if not src or src.startswith('data:'):
                continue

            url = absolutize_url(src, page_url)
            if not url:
                continue

            if not self.localize_external_images and not is_same_domain(url, self.domain):
                continue

            filename = image_filename(url)
            if not filename:
                self.logger.debug(f"Image without a filename: {url}")
                continue

            classes = list(img.get('class') or [])
            images.append(ImageRef(url=url, filename=filename, classes=classes))
            img['src'] = images[-1].src

            # srcset would still point at the remote copies
            if img.has_attr('srcset'):
                del img['srcset']

            if self.class_captions and classes:
                caption = soup.new_tag('p')
                caption.string = ' '.join(f"{{.{name}}}" for name in classes)
                img.insert_after(caption)

        return images

    def rewrite_links(self, soup: BeautifulSoup, page_url: str) -> List[str]:
        """
        Point same-domain anchors at their mirrored page filenames.

        Args:
            soup: Parsed page, modified in place
            page_url: URL for resolving relative hrefs

        Returns:
            Unique absolute URLs of the rewritten links, in document order
        """
        links: List[str] = []
        seen = set()

        for anchor in soup.find_all('a', href=True):
            url = absolutize_url(anchor['href'], page_url)
            if not url or not is_same_domain(url, self.domain):
                continue

            path = extract_local_path(url)
            if path is None:
                continue

            anchor['href'] = path_to_filename(path, self.extension, self.charset)

            if url not in seen:
                seen.add(url)
                links.append(url)

        return links

    def select_root(self, soup: BeautifulSoup):
        """Get the element converted to Markdown, or the whole document."""
        root = soup.select_one(self.root_selector)
        if root is None:
            self.logger.debug(
                f"Root selector '{self.root_selector}' matched nothing, "
                f"converting the whole document"
            )
            return soup
        return root

    def to_markdown(self, root) -> str:
        markdown = md(str(root), heading_style="ATX")
        markdown = self.strip_image_titles(markdown)
        return markdown.strip() + "\n"

    @classmethod
    def strip_image_titles(cls, markdown: str) -> str:
        """
        Remove quoted titles from Markdown images.

        Args:
            markdown: Markdown text

        Returns:
            Markdown with '![alt](url "title")' normalized to '![alt](url)'
        """
        return cls.IMAGE_TITLE_PATTERN.sub(r'\1)', markdown)

