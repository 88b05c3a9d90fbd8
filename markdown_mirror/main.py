#!/usr/bin/env python3
"""
Markdown Mirror - mirror a documentation site as local Markdown files.

Crawls every page reachable under one domain, converts it to Markdown,
downloads its images next to it, and rewrites internal links to the local
filenames so the mirror can be browsed offline.

Usage:
    python -m markdown_mirror.main --domain docs.example.com --root main

Features:
    - Follows same-domain links, fetching every page once
    - Flat, deterministic filenames derived from URL paths
    - Images downloaded once per crawl and linked locally
    - Optional ignore patterns for edit/history/search pages
"""

import argparse
import asyncio
import logging
import os
import sys
import traceback

from markdown_mirror.crawler import MirrorCrawler
from markdown_mirror.utils.constants import (
    DEFAULT_CHARSET,
    DEFAULT_MAX_PAGES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_ROOT_SELECTOR,
    DEFAULT_TIMEOUT,
    MARKDOWN_EXTENSION,
    MDX_EXTENSION,
)
from markdown_mirror.utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_info,
    print_warning
)
from markdown_mirror.utils.paths import clear_dir, strip_www


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='markdown-mirror',
        description='Mirror a website as local Markdown files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --domain docs.example.com
    %(prog)s -d wiki.example.org --root "#content" --ignore=-edit --ignore=-history
    %(prog)s -d docs.example.com --clear --mdx --max-pages 100
        """
    )

    # Required arguments
    parser.add_argument(
        '--domain', '-d',
        type=str,
        required=True,
        help='Domain name to crawl, without scheme (e.g., docs.example.com)'
    )

    # Optional arguments
    parser.add_argument(
        '--root', '-r',
        type=str,
        default=DEFAULT_ROOT_SELECTOR,
        help=f'CSS selector of the element converted to Markdown (default: {DEFAULT_ROOT_SELECTOR})'
    )

    parser.add_argument(
        '--clear',
        action='store_true',
        help='Clear the domain output directory before crawling'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f'Folder holding one directory per domain (default: {DEFAULT_OUTPUT_DIR})'
    )

    parser.add_argument(
        '--max-pages', '-m',
        type=int,
        default=DEFAULT_MAX_PAGES,
        help=f'Maximum number of pages to fetch (default: {DEFAULT_MAX_PAGES})'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f'Request timeout in seconds (default: {DEFAULT_TIMEOUT})'
    )

    parser.add_argument(
        '--ignore', '-i',
        action='append',
        default=[],
        metavar='PATTERN',
        help='Skip pages whose filename contains PATTERN (repeatable)'
    )

    parser.add_argument(
        '--mdx',
        action='store_true',
        help=f'Write {MDX_EXTENSION} files instead of {MARKDOWN_EXTENSION}'
    )

    parser.add_argument(
        '--extended-charset',
        action='store_true',
        help='Keep digits and accented Latin letters in filenames'
    )

    parser.add_argument(
        '--class-captions',
        action='store_true',
        help='Add a {.class} caption after images that carry CSS classes'
    )

    parser.add_argument(
        '--keep-external-images',
        action='store_true',
        help='Leave images from other domains as remote URLs'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    return parser.parse_args(argv)


def validate_domain(domain: str) -> str:
    """
    Validate the domain argument.

    Args:
        domain: Domain string to validate

    Returns:
        Domain lower-cased and without a 'www.' prefix

    Raises:
        ValueError: If the domain is empty or contains a scheme or path
    """
    domain = strip_www(domain or '')

    if not domain:
        raise ValueError("Domain must not be empty")

    if '://' in domain or '/' in domain:
        raise ValueError(f"Expected a host name without scheme or path: {domain}")

    return domain


def print_summary(result) -> None:
    """
    Print the crawl summary.

    Args:
        result: CrawlResult object
    """
    print_status("=" * 60, "dim")
    print_success("CRAWL SUMMARY")
    print_status(f"  Pages written:     {result.pages_written}", "none")
    print_status(f"  Pages ignored:     {result.pages_ignored}", "none")
    print_status(f"  Images downloaded: {result.images_downloaded}", "none")
    print_status(f"  Errors:            {len(result.errors)}", "none")
    print_status(f"  Duration:          {result.duration_seconds:.1f} seconds", "none")
    print_status("=" * 60, "dim")


async def main(argv=None) -> int:
    """
    Main entry point for the markdown mirror.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    try:
        domain = validate_domain(args.domain)
        domain_dir = os.path.join(os.path.abspath(args.output), domain)

        if args.clear:
            if not args.quiet:
                print_info(f"Clearing {domain_dir}")
            clear_dir(domain_dir)

        crawler = MirrorCrawler(
            domain=domain,
            output_dir=args.output,
            root_selector=args.root,
            max_pages=args.max_pages,
            ignore_patterns=args.ignore,
            extension=MDX_EXTENSION if args.mdx else MARKDOWN_EXTENSION,
            charset='extended' if args.extended_charset else DEFAULT_CHARSET,
            class_captions=args.class_captions,
            localize_external_images=not args.keep_external_images,
            timeout=args.timeout
        )

        result = await crawler.crawl()

        if not args.quiet:
            print_summary(result)

        if result.errors:
            print_warning(f"{len(result.errors)} pages or images failed, see the log for details")

        print_success(f"Site mirrored to: {domain_dir}")

        return 0

    except KeyboardInterrupt:
        print_error("Crawl interrupted by user")
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print_error("Crawl interrupted by user")
        sys.exit(1)


if __name__ == '__main__':
    run()
