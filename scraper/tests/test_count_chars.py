import json

from count_chars import count_characters, load_styles

STYLES = [
    {
        'category': '1A. American Light Lager',
        'name': 'American Light Lager',
        'overallImpression': 'Very light.',
        'ibu': '8 - 12',
        'commercialExamples': '',
    },
    {
        'category': '21A. American IPA',
        'name': 'American IPA',
        'overallImpression': 'Hoppy.',
        'ibu': '40 - 70',
        'commercialExamples': 'Bell’s Two-Hearted',
    },
]

STRUCTURED = [
    {
        'style_guide': '2021',
        'category_id': '1',
        'style_id': '1A',
        'name': 'American Light Lager',
        'aroma': 'Low malt.',
        'og': {'min': 1.028, 'max': 1.04},
    },
]


def test_count_characters_sums_every_string_field():
    expected = sum(len(v) for style in STYLES for v in style.values())
    assert count_characters(STYLES) == expected


def test_count_characters_translatable_only_skips_names_and_stats():
    assert count_characters(STYLES, translatable_only=True) == len('Very light.') + len('Hoppy.') + len('Bell’s Two-Hearted')


def test_count_characters_ignores_range_objects():
    assert count_characters(STRUCTURED) == len('2021') + len('1') + len('1A') + len('American Light Lager') + len('Low malt.')
    assert count_characters(STRUCTURED, translatable_only=True) == len('Low malt.')


def test_count_characters_empty():
    assert count_characters([]) == 0


def test_load_styles_reads_written_file(tmp_path):
    path = tmp_path / '2021beerStyles.json'
    path.write_text(json.dumps(STYLES, indent=2, ensure_ascii=False), encoding='utf-8')
    assert load_styles(path) == STYLES
