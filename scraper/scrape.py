"""
scraper/scrape.py
Scrapes the BJCP beer style guidelines: finds every style page linked from the
guidelines listing, extracts each style and writes one JSON file per guideline
version (e.g. 2021beerStyles.json).
Run: python scrape.py [--fetcher browser] [--schema structured] [-o OUTPUT_DIR]
"""
import argparse
import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path

import requests
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from parse_styles import (
    LINK_MODES,
    NAME_SOURCES,
    SCHEMAS,
    STAT_LOOKUPS,
    STYLE_URL_PREFIX,
    check_option,
    discover_style_links,
    extract_style_record,
)

LISTING_URL = 'https://www.bjcp.org/beer-styles/beer-style-guidelines/'
USER_AGENT = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
              '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36')
FETCH_TIMEOUT = 60  # seconds per page
MAX_ATTEMPTS = 3
OUTPUT_SUFFIX = 'beerStyles.json'
FETCHERS = ('http', 'browser')


class HttpFetcher:
    """GET the page and parse the server-rendered HTML."""

    def __init__(self, timeout: float = FETCH_TIMEOUT, session=None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, url: str) -> str:
        r = self.session.get(url, headers={'User-Agent': USER_AGENT}, timeout=self.timeout)
        r.raise_for_status()
        return r.text

    async def fetch(self, url: str) -> BeautifulSoup:
        html = await asyncio.to_thread(self._get, url)
        return BeautifulSoup(html, 'html.parser')


class BrowserFetcher:
    """Render the page in a Playwright page and parse the resulting DOM."""

    def __init__(self, page, timeout: float = FETCH_TIMEOUT):
        self.page = page
        self.timeout = timeout

    async def fetch(self, url: str) -> BeautifulSoup:
        await self.page.goto(url, wait_until='domcontentloaded', timeout=self.timeout * 1000)
        html = await self.page.content()
        return BeautifulSoup(html, 'html.parser')


@asynccontextmanager
async def open_fetcher(kind: str = 'http', timeout: float = FETCH_TIMEOUT):
    check_option('fetcher', kind, FETCHERS)
    if kind == 'http':
        with requests.Session() as session:
            yield HttpFetcher(timeout, session)
        return
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            yield BrowserFetcher(page, timeout)
        finally:
            await browser.close()


async def fetch_with_retries(fetcher, url: str, attempts: int = MAX_ATTEMPTS) -> BeautifulSoup:
    """Fetch url, retrying any failure; the last failure is re-raised."""
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    for attempt in range(1, attempts + 1):
        try:
            return await fetcher.fetch(url)
        except Exception as e:
            if attempt == attempts:
                raise
            print(f"  {url}: attempt {attempt}/{attempts} failed - {e}")


async def collect_styles(
    fetcher,
    groups: dict[str, list[dict]],
    skipped: list[tuple[str, str, str]],
    listing_url: str = LISTING_URL,
    *,
    prefix: str = STYLE_URL_PREFIX,
    link_mode: str = 'strict',
    default_version: str = '',
    name_source: str = 'title',
    stat_lookup: str = 'label',
    schema: str = 'textual',
    attempts: int = MAX_ATTEMPTS,
) -> None:
    """Discover style links and extract each one, appending into groups and skipped.

    Links are processed one at a time in discovery order. A version gets its
    group as soon as one of its links is discovered, so every version seen ends
    up with a file even if all of its pages fail.
    """
    try:
        listing = await fetch_with_retries(fetcher, listing_url, attempts)
    except Exception as e:
        print(f"  {listing_url}: FAILED - {e}")
        return

    links = discover_style_links(listing, prefix, link_mode, default_version)
    print(f"Fetched {len(links)} style links")

    for i, (version, url) in enumerate(links):
        records = groups.setdefault(version, [])
        try:
            page = await fetch_with_retries(fetcher, url, attempts)
        except Exception as e:
            print(f"  {url}: FAILED - {e}")
            skipped.append((version, url, str(e)))
            continue

        try:
            record = extract_style_record(
                page, version, name_source=name_source, stat_lookup=stat_lookup, schema=schema)
        except Exception as e:
            skipped.append((version, url, f"aborted: {e!r}"))
            skipped.extend((v, u, 'not processed') for v, u in links[i + 1:])
            raise
        if record is None:
            print(f"  {url}: data not found, skipping")
            skipped.append((version, url, 'data not found'))
            continue

        records.append(record)
        print(f"  {version} {record['name']}")


def output_path(version: str, out_dir='.') -> Path:
    return Path(out_dir) / f"{version}{OUTPUT_SUFFIX}"


def write_outputs(groups: dict[str, list[dict]], out_dir='.') -> list[Path]:
    """Write one <version>beerStyles.json per group, replacing any earlier file."""
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    paths = []
    for version, records in groups.items():
        path = output_path(version, out_dir)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        print(f"Wrote {len(records)} beer styles for version {version} to {path}")
        paths.append(path)
    return paths


def print_summary(groups: dict[str, list[dict]], skipped: list[tuple[str, str, str]]) -> None:
    total = sum(len(records) for records in groups.values())
    print(f"\nDone. {total} styles across {len(groups)} versions, {len(skipped)} skipped.")
    for version, url, reason in skipped:
        print(f"  skipped [{version}] {url}: {reason}")


async def run(
    fetcher,
    out_dir='.',
    listing_url: str = LISTING_URL,
    *,
    prefix: str = STYLE_URL_PREFIX,
    link_mode: str = 'strict',
    default_version: str = '',
    name_source: str = 'title',
    stat_lookup: str = 'label',
    schema: str = 'textual',
    attempts: int = MAX_ATTEMPTS,
) -> tuple[dict[str, list[dict]], list[tuple[str, str, str]]]:
    """Scrape everything, write the per-version files and return (groups, skipped).

    An unexpected error part way through is reported and whatever was
    collected until then is still written.
    """
    check_option('link_mode', link_mode, LINK_MODES)
    check_option('name_source', name_source, NAME_SOURCES)
    check_option('stat_lookup', stat_lookup, STAT_LOOKUPS)
    check_option('schema', schema, SCHEMAS)
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    groups: dict[str, list[dict]] = {}
    skipped: list[tuple[str, str, str]] = []
    try:
        await collect_styles(
            fetcher, groups, skipped, listing_url,
            prefix=prefix, link_mode=link_mode, default_version=default_version,
            name_source=name_source, stat_lookup=stat_lookup, schema=schema,
            attempts=attempts,
        )
    except Exception as e:
        print(f"An error occurred during the scrape, saving what was collected: {e!r}")

    write_outputs(groups, out_dir)
    print_summary(groups, skipped)
    return groups, skipped


async def main_async(args: argparse.Namespace) -> None:
    async with open_fetcher(args.fetcher, args.timeout) as fetcher:
        await run(
            fetcher, args.output_dir, args.listing_url,
            link_mode=args.link_mode, name_source=args.name_source,
            stat_lookup=args.stat_lookup, schema=args.schema, attempts=args.attempts,
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Scrape the BJCP beer style guidelines to JSON")
    parser.add_argument("--listing-url", default=LISTING_URL, help="Guidelines page linking every style")
    parser.add_argument("--output-dir", "-o", default=".", help="Where <version>beerStyles.json files go")
    parser.add_argument("--fetcher", choices=FETCHERS, default="http",
                        help="Plain HTTP GET or a headless Chromium render")
    parser.add_argument("--link-mode", choices=LINK_MODES, default="strict",
                        help="strict: versioned style URLs only; loose: anything under the style prefix")
    parser.add_argument("--name-source", choices=NAME_SOURCES, default="title",
                        help="Read the style name from the heading link's title attribute or its text")
    parser.add_argument("--stat-lookup", choices=STAT_LOOKUPS, default="label",
                        help="Find vital statistics by row label or by row position")
    parser.add_argument("--schema", choices=SCHEMAS, default="textual",
                        help="textual: raw strings; structured: ids and min/max statistics")
    parser.add_argument("--attempts", type=int, default=MAX_ATTEMPTS, help="Fetch attempts per page")
    parser.add_argument("--timeout", type=float, default=FETCH_TIMEOUT, help="Seconds to wait per page")

    args = parser.parse_args()
    print("Scraping BJCP style pages...")
    asyncio.run(main_async(args))


if __name__ == '__main__':
    main()
