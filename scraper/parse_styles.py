"""
scraper/parse_styles.py
Turns BJCP guideline pages (already parsed with BeautifulSoup) into style links
and style records. Nothing here touches the network.
"""
import math
import re

from bs4 import BeautifulSoup, Tag

STYLE_URL_PREFIX = 'https://www.bjcp.org/style/'

# /style/<version>/<category>/<style id>/
STRICT_LINK_RE = re.compile(r'/style/(\d{4})/(\d+)/(\d+[A-Za-z])/')

CATEGORY_ID_RE = re.compile(r'^(\d+)')
STYLE_ID_RE = re.compile(r'^(\d+[A-Za-z])')
NUMBER_PREFIX_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')

LINK_SELECTOR = '.entry-content a'
TITLE_SELECTOR = 'h1.entry-title'
VITAL_ROW_SELECTOR = '.vital-statistics .row'

# Narrative sections printed before the vital statistics, in output order.
SECTIONS = [
    ('overallImpression',                  '.overall-impression p'),
    ('appearance',                         '.appearance p'),
    ('aroma',                              '.aroma p'),
    ('flavor',                             '.flavor p'),
    ('mouthfeel',                          '.mouthfeel p'),
    ('history',                            '.history p'),
    ('characteristicIngredients',          '.ingredients p'),
    ('styleComparisonAndVitalStatistics',  '.style-comparison p'),
]

# (field, row label); the order doubles as the row index for index lookup.
VITAL_STATISTICS = [
    ('ibu', 'IBU'),
    ('srm', 'SRM'),
    ('og',  'OG'),
    ('fg',  'FG'),
    ('abv', 'ABV'),
]

TRAILING_SECTIONS = [
    ('commercialExamples', '.commercial-examples'),
    ('styleAttributes',    '.style-attributes'),
]

# Textual key -> structured key, where they differ.
STRUCTURED_KEYS = {
    'overallImpression':                 'overall_impression',
    'characteristicIngredients':         'characteristic_ingredients',
    'styleComparisonAndVitalStatistics': 'style_comparison',
    'commercialExamples':                'commercial_examples',
    'styleAttributes':                   'style_attributes',
}

LINK_MODES = ('strict', 'loose')
NAME_SOURCES = ('title', 'text')
STAT_LOOKUPS = ('label', 'index')
SCHEMAS = ('textual', 'structured')


def check_option(name: str, value: str, allowed: tuple) -> None:
    if value not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}, got {value!r}")


def select_text(root, selector: str) -> str:
    """Joined text of every element matching selector, trimmed. '' when nothing matches."""
    return ''.join(el.get_text() for el in root.select(selector)).strip()


# --- link discovery ---

def discover_style_links(
    soup: BeautifulSoup,
    prefix: str = STYLE_URL_PREFIX,
    mode: str = 'strict',
    default_version: str = '',
) -> list[tuple[str, str]]:
    """Collect (version, url) pairs for every style page linked from a listing page.

    strict: only hrefs shaped like /style/<version>/<category>/<style id>/.
    loose:  every href under prefix, all filed under default_version.
    Anchors that don't qualify are skipped. Duplicates are kept in page order.
    """
    check_option('link_mode', mode, LINK_MODES)
    links = []
    for anchor in soup.select(LINK_SELECTOR):
        href = anchor.get('href')
        if not href or not href.startswith(prefix):
            continue
        if mode == 'strict':
            m = STRICT_LINK_RE.search(href)
            if not m:
                continue
            version = m.group(1)
        else:
            version = default_version
        links.append((version, href))
    return links


# --- field helpers ---

def parse_number(text: str):
    """Leading number of text as a float, or None. '5.3%' -> 5.3"""
    m = NUMBER_PREFIX_RE.match(text.strip())
    if not m:
        return None
    value = float(m.group())
    return value if math.isfinite(value) else None


def parse_range(text: str) -> tuple:
    """Split a '<min> - <max>' statistic into floats. Never raises.

    >>> parse_range('1.030 - 1.090')
    (1.03, 1.09)
    """
    if not isinstance(text, str) or not text.strip():
        return None, None
    parts = text.split(' - ')
    low = parse_number(parts[0])
    high = parse_number(parts[1]) if len(parts) > 1 else None
    return low, high


def parse_title_ids(title: str) -> tuple[str, str]:
    """'1A. American Light Lager' -> ('1', '1A')"""
    category_id = CATEGORY_ID_RE.match(title)
    style_id = STYLE_ID_RE.match(title)
    return (category_id.group(1) if category_id else '',
            style_id.group(1) if style_id else '')


def style_name(heading, name_source: str = 'title') -> str:
    """Display name from the anchor inside the page heading."""
    if heading is None:
        return ''
    anchor = heading.find('a')
    if not isinstance(anchor, Tag):
        return ''
    if name_source == 'title':
        name = (anchor.get('title') or '').strip()
        if name:
            return name
    return anchor.get_text().strip()


def vital_statistic_rows(soup: BeautifulSoup) -> list[tuple[str, str]]:
    """(first cell text, second cell text) for each row of the vital statistics table."""
    rows = []
    for row in soup.select(VITAL_ROW_SELECTOR):
        cells = row.select('.cell')
        label = cells[0].get_text().strip() if cells else ''
        value = select_text(cells[1], 'p') if len(cells) > 1 else ''
        rows.append((label, value))
    return rows


def lookup_stat(rows: list[tuple[str, str]], label: str) -> str:
    for row_label, value in rows:
        if label in row_label:
            return value
    return ''


def lookup_stat_by_index(rows: list[tuple[str, str]], index: int) -> str:
    # Only valid while the table keeps IBU, SRM, OG, FG, ABV order.
    return rows[index][1] if index < len(rows) else ''


# --- record extraction ---

def extract_style_record(
    soup: BeautifulSoup,
    version: str,
    *,
    name_source: str = 'title',
    stat_lookup: str = 'label',
    schema: str = 'textual',
):
    """Build one style record from a style page, or None when the page has no style name.

    Missing sections come back as ''. The structured schema adds the guideline
    version and the ids from the heading, and turns each vital statistic into
    {'min': float|None, 'max': float|None}.
    """
    check_option('name_source', name_source, NAME_SOURCES)
    check_option('stat_lookup', stat_lookup, STAT_LOOKUPS)
    check_option('schema', schema, SCHEMAS)

    heading = soup.select_one(TITLE_SELECTOR)
    name = style_name(heading, name_source)
    if not name:
        return None
    category = select_text(soup, TITLE_SELECTOR)

    rows = vital_statistic_rows(soup)
    if stat_lookup == 'label':
        stats = {field: lookup_stat(rows, label) for field, label in VITAL_STATISTICS}
    else:
        stats = {field: lookup_stat_by_index(rows, i)
                 for i, (field, _) in enumerate(VITAL_STATISTICS)}

    fields = {'category': category, 'name': name}
    fields.update((key, select_text(soup, sel)) for key, sel in SECTIONS)
    fields.update(stats)
    fields.update((key, select_text(soup, sel)) for key, sel in TRAILING_SECTIONS)

    if schema == 'textual':
        return fields

    category_id, style_id = parse_title_ids(category)
    record = {'style_guide': version, 'category_id': category_id, 'style_id': style_id}
    for key, value in fields.items():
        if key in stats:
            low, high = parse_range(value)
            value = {'min': low, 'max': high}
        record[STRUCTURED_KEYS.get(key, key)] = value
    return record
