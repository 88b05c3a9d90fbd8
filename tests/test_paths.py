"""Tests for URL-to-filename mapping and domain matching."""

import logging

import pytest

from markdown_mirror.utils.paths import (
    absolutize_url,
    clear_dir,
    extract_local_path,
    image_filename,
    is_same_domain,
    path_to_filename,
    url_to_filename,
)


class TestUrlToFilename:

    def test_path_becomes_filename(self):
        assert url_to_filename("https://example.com/Foo-Bar") == "Foo-Bar.md"

    def test_nested_path_is_flattened(self):
        url = "https://example.com/docs/getting-started/"
        assert url_to_filename(url) == "docs-getting-started.md"

    def test_is_deterministic(self):
        url = "https://example.com/wiki/Some_Page?x=1"
        assert url_to_filename(url) == url_to_filename(url)

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "https://example.com/",
        "https://example.com/123/456/",
        "https://example.com/---",
    ])
    def test_root_and_separator_only_paths_are_index(self, url):
        assert url_to_filename(url) == "index.md"

    def test_unparseable_url_falls_back_to_index(self):
        assert url_to_filename("not a url") == "index.md"

    def test_paths_differing_in_non_letters_collide(self):
        a = url_to_filename("https://example.com/foo-bar")
        b = url_to_filename("https://example.com/foo_bar")
        assert a == b == "foo-bar.md"

    def test_digits_are_dropped_with_letters_charset(self):
        assert url_to_filename("https://example.com/v2/api") == "v-api.md"

    def test_mdx_extension(self):
        assert url_to_filename("https://example.com/guide", extension=".mdx") == "guide.mdx"

    def test_extended_charset_keeps_digits_and_accents(self):
        url = "https://example.com/caf%C3%A9/v2"
        assert url_to_filename(url, charset="extended") == "café-v2.md"

    def test_extended_charset_drops_math_signs(self):
        url = "https://example.com/x%C3%97y%C3%B7z"
        assert url_to_filename(url, charset="extended") == "x-y-z.md"

    def test_unknown_charset_is_rejected(self):
        with pytest.raises(ValueError):
            path_to_filename("/a", charset="klingon")


class TestExtractLocalPath:

    def test_returns_path(self):
        assert extract_local_path("https://example.com/a/b?q=1#x") == "/a/b"

    @pytest.mark.parametrize("url", ["not a url", "/relative/path", "http://[::1"])
    def test_invalid_url_is_logged_and_returns_none(self, url, caplog):
        with caplog.at_level(logging.WARNING):
            assert extract_local_path(url) is None
        assert f"Invalid URL: {url}" in caplog.text


class TestDomainMatching:

    @pytest.mark.parametrize("url", [
        "https://example.com/page",
        "http://example.com",
        "https://www.example.com/page",
        "https://WWW.Example.COM/page",
    ])
    def test_same_domain(self, url):
        assert is_same_domain(url, "example.com")

    @pytest.mark.parametrize("url", [
        "https://docs.example.com/page",
        "https://example.org/page",
        "https://notexample.com/",
        "mailto:someone@example.com",
    ])
    def test_other_domain(self, url):
        assert not is_same_domain(url, "example.com")

    def test_configured_domain_may_carry_www(self):
        assert is_same_domain("https://example.com/a", "www.example.com")


class TestAbsolutizeUrl:

    page = "https://example.com/docs/intro"

    def test_absolute_url_is_kept(self):
        assert absolutize_url("https://example.com/a", self.page) == "https://example.com/a"

    def test_scheme_relative_gets_https(self):
        assert absolutize_url("//example.com/a", "http://example.com/") == "https://example.com/a"

    def test_relative_is_resolved_against_page(self):
        assert absolutize_url("setup", self.page) == "https://example.com/docs/setup"
        assert absolutize_url("/faq", self.page) == "https://example.com/faq"

    def test_fragment_is_dropped(self):
        assert absolutize_url("/faq#top", self.page) == "https://example.com/faq"

    @pytest.mark.parametrize("href", [
        "", "#top", "mailto:a@example.com", "javascript:void(0)", "tel:123",
        "ftp://example.com/file",
    ])
    def test_non_navigable_links(self, href):
        assert absolutize_url(href, self.page) is None


class TestImageFilename:

    def test_last_segment(self):
        assert image_filename("https://cdn.example.org/img/logo.png?v=2") == "logo.png"

    def test_no_segment(self):
        assert image_filename("https://example.com/") is None

    def test_encoded_characters_are_decoded(self):
        assert image_filename("https://example.com/img/my%20pic.png") == "my pic.png"

    def test_encoded_slash_stays_in_the_name(self):
        assert image_filename("https://example.com/img/a%2Fb.png") == "a_b.png"


def test_clear_dir_empties_directory(tmp_path):
    target = tmp_path / "example.com"
    target.mkdir()
    (target / "old.md").write_text("stale")

    clear_dir(str(target))

    assert target.is_dir()
    assert list(target.iterdir()) == []
