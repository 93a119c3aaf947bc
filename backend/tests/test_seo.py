from datetime import datetime, timedelta

from pagetree.domain.readability import count_syllables, flesch_reading_ease, strip_tags, word_count
from pagetree.domain.seo import (
    EXEMPT_COLOR,
    GREEN,
    Recommendation,
    describe,
    rate_page,
    score_color,
)
from pagetree.application.cms.seo import get_seo_rating

NOW = datetime(2024, 6, 1, 12, 0, 0)
BODY_TEMPLATE = [
    {"id": "page_header", "type": "text"},
    {"id": "page_content", "type": "html"},
]


def test_readability_helpers():
    assert strip_tags("<p>Hello <b>world</b></p>") == "Hello world"
    assert word_count("The cat sat.") == 3
    assert count_syllables("table") == 2
    assert count_syllables("make") == 1
    assert flesch_reading_ease("") == 0.0
    assert flesch_reading_ease("The cat sat.") == 100.0


def test_exempt_templates_always_score_full_marks():
    for template in ("", "!", None):
        rating = rate_page(
            template=template,
            title="",
            meta_description="",
            content={},
            last_updated=NOW,
        )
        assert rating.score == 100
        assert rating.color == EXEMPT_COLOR
        assert rating.recommendations == {}


def test_template_without_body_fields_gets_content_points():
    rating = rate_page(
        template="landing",
        title="A Title Of Four Words",
        meta_description="Short and sweet.",
        content={},
        last_updated=NOW - timedelta(days=400),
        template_fields=[{"id": "hero", "type": "image"}],
        now=NOW,
    )

    assert rating.score == 100
    assert rating.color == GREEN
    assert rating.recommendations == {}


def test_missing_title_and_description():
    rating = rate_page(
        template="landing",
        title="",
        meta_description="",
        content={},
        last_updated=NOW,
        now=NOW,
    )

    assert rating.score == 75
    assert set(rating.recommendations) == {
        Recommendation.MISSING_TITLE,
        Recommendation.MISSING_META_DESCRIPTION,
    }


def test_short_content_without_links():
    rating = rate_page(
        template="content",
        title="A Title Of Four Words",
        meta_description="Short and sweet.",
        content={"page_header": "Hi", "page_content": "<p>The cat sat.</p>"},
        last_updated=NOW,
        template_fields=BODY_TEMPLATE,
        now=NOW,
    )

    assert rating.score == 70
    assert rating.recommendations == {
        Recommendation.SHORT_CONTENT: 3,
        Recommendation.NO_LINKS: None,
    }
    assert rating.as_list() == [
        {"code": 6, "value": 3},
        {"code": 9, "value": None},
    ]


def test_missing_heading_and_body():
    rating = rate_page(
        template="content",
        title="A Title Of Four Words",
        meta_description="Short and sweet.",
        content={"page_content": "<p> </p>"},
        last_updated=NOW,
        template_fields=BODY_TEMPLATE,
        now=NOW,
    )

    assert rating.score == 35
    assert Recommendation.MISSING_HEADING in rating.recommendations
    assert Recommendation.MISSING_CONTENT in rating.recommendations


def test_duplicate_and_long_titles_lose_points():
    rating = rate_page(
        template="landing",
        title="Home",
        meta_description="x" * 200,
        content={},
        last_updated=NOW,
        duplicate_titles=2,
        now=NOW,
    )

    assert rating.score == 85
    assert rating.recommendations[Recommendation.DUPLICATE_TITLE] == 2
    assert rating.recommendations[Recommendation.META_DESCRIPTION_LENGTH] == 200
    assert Recommendation.TITLE_LENGTH in rating.recommendations


def test_stale_content_loses_freshness_points():
    rating = rate_page(
        template="content",
        title="A Title Of Four Words",
        meta_description="Short and sweet.",
        content={"page_header": "Hi", "page_content": "<p>The cat sat.</p>"},
        last_updated=NOW - timedelta(days=120),
        template_fields=BODY_TEMPLATE,
        now=NOW,
    )

    assert rating.score == 66
    assert rating.recommendations[Recommendation.STALE_CONTENT] == 4


def test_score_colors():
    assert score_color(0) == "#D32F2F"
    assert score_color(50) == "#FD9725"
    assert score_color(80) == "#00A370"
    assert score_color(81) == GREEN


def test_messages_fill_in_values():
    assert describe(Recommendation.SHORT_CONTENT, 12) == (
        "You should enter at least 300 words of page content. You currently have 12 word(s)."
    )
    assert "at least 3" in describe(Recommendation.LINK_DENSITY, [1, 3])


def test_rating_counts_pages_with_the_same_title(make_page):
    first = make_page("Services", title="Our Services")
    make_page("More Services", title="Our Services")

    rating = get_seo_rating(first.id, "landing", "Our Services", "", {}, NOW)
    assert rating.recommendations[Recommendation.DUPLICATE_TITLE] == 1

    rating = get_seo_rating(None, "landing", "Our Services", "", {}, NOW)
    assert rating.recommendations[Recommendation.DUPLICATE_TITLE] == 2
