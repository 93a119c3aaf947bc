"""
Content quality scoring for pages.

Score breakdown (100 points):

- title present: 5
- title unique among other pages: 5
- title has 4+ words and is at most 72 characters: 5
- meta description present: 5
- meta description at most 165 characters: 5
- heading field populated: 10
- body content present: 5
- body of 300+ words: 15
- at least one link: 5
- one link per 120 words: 5
- an external link: 5
- readability (Flesch reading ease, 90+ earns everything): up to 20
- freshness (full marks for two months, then -2 per month): up to 10

Templates without designated body fields get the 65 content points outright.
Pages without a template (or with the "!" redirect template) always score 100.
"""
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .readability import flesch_reading_ease, strip_tags, word_count

EXEMPT_TEMPLATE = "!"

TITLE_MAX_LENGTH = 72
TITLE_MIN_WORDS = 4
META_DESCRIPTION_MAX_LENGTH = 165
CONTENT_MIN_WORDS = 300
WORDS_PER_LINK = 120
READABILITY_TARGET = 90
FRESH_FOR = timedelta(days=60)
MONTH = timedelta(days=30)

_LINK_RE = re.compile(r"<a\s", re.IGNORECASE)
_EXTERNAL_LINK_RE = re.compile(r"""href=["']https?://""", re.IGNORECASE)

GREEN = "#008000"
EXEMPT_COLOR = "#00CC00"


class Recommendation(IntEnum):
    DUPLICATE_TITLE = 0
    TITLE_LENGTH = 1
    MISSING_TITLE = 2
    META_DESCRIPTION_LENGTH = 3
    MISSING_META_DESCRIPTION = 4
    MISSING_HEADING = 5
    SHORT_CONTENT = 6
    LINK_DENSITY = 7
    NO_EXTERNAL_LINK = 8
    NO_LINKS = 9
    READABILITY = 10
    MISSING_CONTENT = 11
    STALE_CONTENT = 12


MESSAGES = {
    Recommendation.DUPLICATE_TITLE: "Your page title should be unique. {count} other page(s) have the same title.",
    Recommendation.TITLE_LENGTH: "Your page title should be no more than 72 characters and should contain at least 4 words.",
    Recommendation.MISSING_TITLE: "You should enter a page title.",
    Recommendation.META_DESCRIPTION_LENGTH: "Your meta description should be no more than 165 characters. It is currently {count} characters.",
    Recommendation.MISSING_META_DESCRIPTION: "You should enter a meta description.",
    Recommendation.MISSING_HEADING: "You should enter a page header.",
    Recommendation.SHORT_CONTENT: "You should enter at least 300 words of page content. You currently have {count} word(s).",
    Recommendation.LINK_DENSITY: "You should have at least one link for every 120 words of page content. You currently have {count} link(s). You should have at least {count2}.",
    Recommendation.NO_EXTERNAL_LINK: "Having an external link helps build Page Rank.",
    Recommendation.NO_LINKS: "You should have at least one link in your content.",
    Recommendation.READABILITY: "Your readability score is {count}%. Using shorter sentences and words with fewer syllables will make your site easier to read by search engines and users.",
    Recommendation.MISSING_CONTENT: "You should enter page content.",
    Recommendation.STALE_CONTENT: "Your content is around {count} months old. Updating your page more frequently will make it rank higher.",
}


def describe(code: int, value: Any = None) -> str:
    code = Recommendation(code)
    if isinstance(value, (list, tuple)):
        count, count2 = (list(value) + [None, None])[:2]
    else:
        count, count2 = value, None
    return MESSAGES[code].format(count=count, count2=count2)


@dataclass
class SEORating:
    score: int
    recommendations: Dict[Recommendation, Any] = field(default_factory=dict)
    color: str = GREEN

    def as_list(self) -> List[Dict[str, Any]]:
        """Storage form: [{"code": 6, "value": 120}, ...] ordered by code."""
        return [
            {"code": int(code), "value": value}
            for code, value in sorted(self.recommendations.items())
        ]

    def messages(self) -> List[str]:
        return [describe(code, value) for code, value in sorted(self.recommendations.items())]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "recommendations": self.as_list(),
            "messages": self.messages(),
            "color": self.color,
        }


def seo_fields(template_fields: Iterable[Mapping[str, Any]]):
    """Pick the heading field and body fields out of a template definition."""
    heading_field = None
    body_fields = []
    known = set()

    for item in template_fields:
        known.add(item["id"])
        if item.get("seo_body"):
            body_fields.append(item["id"])
        if item.get("seo_h1"):
            heading_field = item["id"]

    if not heading_field and "page_header" in known:
        heading_field = "page_header"
    if not body_fields and "page_content" in known:
        body_fields.append("page_content")

    return heading_field, body_fields


def rate_page(
    *,
    template: Optional[str],
    title: Optional[str],
    meta_description: Optional[str],
    content: Optional[Mapping[str, Any]],
    last_updated: Optional[datetime],
    template_fields: Iterable[Mapping[str, Any]] = (),
    duplicate_titles: int = 0,
    now: Optional[datetime] = None,
) -> SEORating:
    if not template or template == EXEMPT_TEMPLATE:
        return SEORating(score=100, recommendations={}, color=EXEMPT_COLOR)

    heading_field, body_fields = seo_fields(template_fields)
    content = content if isinstance(content, Mapping) else {}
    recommendations: Dict[Recommendation, Any] = {}
    score = 0

    if title:
        score += 5

        if not duplicate_titles:
            score += 5
        else:
            recommendations[Recommendation.DUPLICATE_TITLE] = duplicate_titles

        if word_count(title) >= TITLE_MIN_WORDS and len(title) <= TITLE_MAX_LENGTH:
            score += 5
        else:
            recommendations[Recommendation.TITLE_LENGTH] = None
    else:
        recommendations[Recommendation.MISSING_TITLE] = None

    if meta_description:
        score += 5

        if len(meta_description) <= META_DESCRIPTION_MAX_LENGTH:
            score += 5
        else:
            recommendations[Recommendation.META_DESCRIPTION_LENGTH] = len(meta_description)
    else:
        recommendations[Recommendation.MISSING_META_DESCRIPTION] = None

    if not heading_field or content.get(heading_field):
        score += 10
    else:
        recommendations[Recommendation.MISSING_HEADING] = None

    if not body_fields:
        # Nothing to measure, give the template the benefit of the doubt
        score += 65
    else:
        score += _score_body(content, body_fields, recommendations)
        score += _score_freshness(last_updated, now, recommendations)

    score = max(0, min(100, score))
    return SEORating(score=score, recommendations=recommendations, color=score_color(score))


def _score_body(content, body_fields, recommendations) -> int:
    regular_text = ""
    stripped_text = ""

    for field_id in body_fields:
        value = content.get(field_id)
        if value is None or isinstance(value, (list, dict)):
            continue
        regular_text += f"{value} "
        stripped_text += f"{strip_tags(str(value))} "

    if not stripped_text.strip():
        recommendations[Recommendation.MISSING_CONTENT] = None
        return 0

    score = 5
    words = word_count(stripped_text)
    readability = flesch_reading_ease(stripped_text)
    links = len(_LINK_RE.findall(regular_text))
    external_links = len(_EXTERNAL_LINK_RE.findall(regular_text))

    if words >= CONTENT_MIN_WORDS:
        score += 15
    else:
        recommendations[Recommendation.SHORT_CONTENT] = words

    if links:
        score += 5

        expected_links = words // WORDS_PER_LINK
        if expected_links <= links:
            score += 5
        else:
            recommendations[Recommendation.LINK_DENSITY] = [links, expected_links]

        if external_links:
            score += 5
        else:
            recommendations[Recommendation.NO_EXTERNAL_LINK] = None
    else:
        recommendations[Recommendation.NO_LINKS] = None

    if readability >= READABILITY_TARGET:
        score += 20
    else:
        ratio = round(readability / READABILITY_TARGET, 2)
        recommendations[Recommendation.READABILITY] = int(round(ratio * 100))
        score += math.ceil(ratio * 20)

    return score


def _score_freshness(last_updated, now, recommendations) -> int:
    if last_updated is None:
        return 10

    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    overdue = now - last_updated - FRESH_FOR
    if overdue <= timedelta(0):
        return 10

    months_overdue = overdue / MONTH
    recommendations[Recommendation.STALE_CONTENT] = math.ceil(2 + months_overdue)
    return max(0, 10 - math.floor(2 * months_overdue))


def score_color(score: int) -> str:
    """Red to orange up to 50, orange to green up to 80, green above."""
    if score <= 50:
        return _mesh("#FD9725", "#D32F2F", 100 - (100 * score / 50))
    if score <= 80:
        return _mesh("#00A370", "#FD9725", 100 - (100 * (score - 50) / 30))
    return GREEN


def _mesh(first: str, second: str, percent: float) -> str:
    """Blend ``percent`` of the way from ``first`` to ``second``."""
    percent = max(0.0, min(100.0, percent)) / 100
    start = [int(first[i:i + 2], 16) for i in (1, 3, 5)]
    end = [int(second[i:i + 2], 16) for i in (1, 3, 5)]
    blended = [round(a + (b - a) * percent) for a, b in zip(start, end)]
    return "#" + "".join(f"{channel:02X}" for channel in blended)
