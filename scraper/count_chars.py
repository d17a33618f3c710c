"""
scraper/count_chars.py
Counts the characters in a written styles file, to size a translation job.
Run: python count_chars.py 2021beerStyles.json
"""
import json
import sys
from pathlib import Path

# Names, ids and vital statistics stay as they are when translating.
UNTRANSLATED_FIELDS = {
    'category', 'name', 'ibu', 'srm', 'og', 'fg', 'abv',
    'style_guide', 'category_id', 'style_id',
}


def count_characters(styles: list[dict], translatable_only: bool = False) -> int:
    total = 0
    for style in styles:
        for key, value in style.items():
            if translatable_only and key in UNTRANSLATED_FIELDS:
                continue
            if isinstance(value, str):
                total += len(value)
    return total


def load_styles(path: Path) -> list[dict]:
    with open(path, encoding='utf-8') as f:
        return json.load(f)


if __name__ == '__main__':
    path = Path(sys.argv[1] if len(sys.argv) > 1 else '2021beerStyles.json')
    styles = load_styles(path)

    print(f"{len(styles)} styles in {path}")
    print(f"Total characters: {count_characters(styles)}")
    print(f"Characters to translate: {count_characters(styles, translatable_only=True)}")
