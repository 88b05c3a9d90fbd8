"""Tests for the HTTP downloader against an in-process aiohttp server."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from markdown_mirror.crawler.downloader import AssetDownloader
from markdown_mirror.crawler.rewrite import ContentRewriter


PAGE_HTML = b"<html><body><h1>Hello</h1></body></html>"
IMAGE_BYTES = bytes(range(256)) * 1024


async def page_handler(request):
    return web.Response(body=PAGE_HTML, content_type="text/html")


async def image_handler(request):
    return web.Response(body=IMAGE_BYTES, content_type="image/png")


async def redirect_handler(request):
    raise web.HTTPFound("/en/latest/")


async def latest_handler(request):
    return web.Response(text='<a href="intro.html">intro</a>', content_type="text/html")


async def slow_handler(request):
    await asyncio.sleep(2)
    return web.Response(text="late")


@pytest_asyncio.fixture
async def site():
    app = web.Application()
    app.router.add_get("/page", page_handler)
    app.router.add_get("/logo.png", image_handler)
    app.router.add_get("/slow", slow_handler)
    app.router.add_get("/", redirect_handler)
    app.router.add_get("/en/latest/", latest_handler)

    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()


def url(site, path):
    return str(site.make_url(path))


@pytest.mark.asyncio
async def test_fetch_page_returns_body(site):
    async with AssetDownloader(timeout=5) as downloader:
        page = await downloader.fetch_page(url(site, "/page"))

    assert page.body == PAGE_HTML
    assert page.url == url(site, "/page")


@pytest.mark.asyncio
async def test_fetch_page_reports_redirect_target(site):
    async with AssetDownloader(timeout=5) as downloader:
        page = await downloader.fetch_page(url(site, "/"))

    assert page.url == url(site, "/en/latest/")

    links = ContentRewriter(site.host).rewrite(page.body, page.url).links
    assert links == [url(site, "/en/latest/intro.html")]


@pytest.mark.asyncio
async def test_fetch_page_http_error_returns_none(site, caplog):
    async with AssetDownloader(timeout=5) as downloader:
        body = await downloader.fetch_page(url(site, "/missing"))

    assert body is None
    assert url(site, "/missing") in downloader.failed
    assert "Failed to download and save" in caplog.text


@pytest.mark.asyncio
async def test_fetch_page_connection_error_returns_none():
    async with AssetDownloader(timeout=5) as downloader:
        body = await downloader.fetch_page("http://127.0.0.1:1/page")

    assert body is None


@pytest.mark.asyncio
async def test_fetch_page_timeout_returns_none(site):
    async with AssetDownloader(timeout=0.2) as downloader:
        body = await downloader.fetch_page(url(site, "/slow"))

    assert body is None


@pytest.mark.asyncio
async def test_fetch_requires_started_session():
    downloader = AssetDownloader()

    with pytest.raises(RuntimeError):
        await downloader.fetch_page("https://example.com/")


@pytest.mark.asyncio
async def test_download_image_writes_complete_file(site, tmp_path):
    target = tmp_path / "example.com" / "logo.png"

    async with AssetDownloader(timeout=5, chunk_size=1024) as downloader:
        ok = await downloader.download_image(url(site, "/logo.png"), str(target))

    assert ok
    assert target.read_bytes() == IMAGE_BYTES
    assert downloader.downloaded_images == {url(site, "/logo.png")}


@pytest.mark.asyncio
async def test_download_image_http_error_writes_nothing(site, tmp_path):
    target = tmp_path / "gone.png"

    async with AssetDownloader(timeout=5) as downloader:
        ok = await downloader.download_image(url(site, "/gone.png"), str(target))

    assert not ok
    assert not target.exists()
    assert downloader.downloaded_images == set()


@pytest.mark.asyncio
async def test_download_image_keeps_existing_file_on_connection_error(tmp_path):
    target = tmp_path / "logo.png"
    target.write_bytes(b"earlier image")

    async with AssetDownloader(timeout=5) as downloader:
        ok = await downloader.download_image("http://127.0.0.1:1/logo.png", str(target))

    assert not ok
    assert target.read_bytes() == b"earlier image"


def test_save_page_writes_markdown(tmp_path):
    target = tmp_path / "example.com" / "index.md"

    assert AssetDownloader().save_page(str(target), "# Héllo\n")
    assert target.read_text(encoding="utf-8") == "# Héllo\n"


def test_save_page_failure_is_reported(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    assert not AssetDownloader().save_page(str(blocker / "index.md"), "text")
    assert "Error saving page" in caplog.text
