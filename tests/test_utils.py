from datetime import date, datetime, timezone

import pytest

from tools.blogbuild.markdown_processing import markdown_to_html, slugify_heading
from tools.blogbuild.utils import EARLIEST, date_sort_key, https_url, is_safe_slug, parse_date


@pytest.mark.parametrize("value, expected", [
    ("2022-06-01", datetime(2022, 6, 1, tzinfo=timezone.utc)),
    ("2022-06-01T10:30:00.000Z", datetime(2022, 6, 1, 10, 30, tzinfo=timezone.utc)),
    (date(2020, 2, 29), datetime(2020, 2, 29, tzinfo=timezone.utc)),
    (" '2022-06-01' ", datetime(2022, 6, 1, tzinfo=timezone.utc)),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "June first", 20220601, "2022-13-01"])
def test_unparsable_dates(value):
    assert parse_date(value) is None
    assert date_sort_key(value) == EARLIEST


def test_offsets_are_compared_in_utc():
    assert date_sort_key("2022-07-14T09:30:00+02:00") < date_sort_key("2022-07-14T08:00:00Z")


def test_https_url():
    assert https_url("//images.ctfassets.net/x.png") == "https://images.ctfassets.net/x.png"
    assert https_url("https://a/b.png") == "https://a/b.png"
    assert https_url("") == ""


def test_slugs():
    assert is_safe_slug("hello-world_2")
    assert not is_safe_slug("../etc")
    assert not is_safe_slug("a/b")
    assert not is_safe_slug(None)
    assert slugify_heading("  Getting   Started ") == "getting-started"
    assert slugify_heading("!!!") == "section"


def test_markdown_normalises_line_endings():
    html = markdown_to_html("Intro\r\n## Next\r\ntext")

    assert "<p>Intro</p>" in html
    assert '<h2 id="next">Next</h2>' in html


def test_markdown_keeps_code_fences_untouched():
    html = markdown_to_html("```\nline\n\n\n\nafter\n```")

    assert "line\n\n\n\nafter" in html


def test_markdown_duplicate_heading_ids():
    html = markdown_to_html("## Notes\n\n## Notes")

    assert 'id="notes"' in html
    assert 'id="notes_1"' in html
