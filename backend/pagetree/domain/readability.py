"""
Plain-text statistics for the SEO scorer.

Syllables use the vowel-group heuristic; reading ease is the Flesch formula.
"""
import re
from html.parser import HTMLParser
from typing import List

_WORD_RE = re.compile(r"[A-Za-z0-9'’-]+")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
_VOWELS = set("aeiouy")


class _TextExtractor(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: List[str] = []

    def handle_data(self, data):
        self.parts.append(data)


def strip_tags(html: str) -> str:
    extractor = _TextExtractor()
    extractor.feed(html or "")
    extractor.close()
    return " ".join("".join(extractor.parts).split())


def words(text: str) -> List[str]:
    return _WORD_RE.findall(text or "")


def word_count(text: str) -> int:
    return len(words(text))


def sentence_count(text: str) -> int:
    return len([s for s in _SENTENCE_RE.split((text or "").strip()) if s.strip()])


def count_syllables(word: str) -> int:
    word = re.sub(r"[^a-z]", "", word.lower())
    if not word:
        return 0

    count = 0
    prev_vowel = False
    for char in word:
        is_vowel = char in _VOWELS
        if is_vowel and not prev_vowel:
            count += 1
        prev_vowel = is_vowel

    # silent e, except consonant + "le" as in "table"
    if word.endswith("e") and len(word) > 2 and not word.endswith("le"):
        count -= 1

    return max(1, count)


def flesch_reading_ease(text: str) -> float:
    """
    206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)

    Clamped to 0..100. Empty text scores 0.
    """
    tokens = words(text)
    sentences = sentence_count(text)
    if not tokens or not sentences:
        return 0.0

    syllables = sum(count_syllables(token) for token in tokens)
    ease = 206.835 - 1.015 * (len(tokens) / sentences) - 84.6 * (syllables / len(tokens))
    return max(0.0, min(100.0, ease))
