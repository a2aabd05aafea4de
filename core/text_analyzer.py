"""
CaptionGenie — Quick Text Analysis (local, no LLM)

Two independent heuristics over the post idea:
  1. Emotional power: weighted lexicon with intensifier/negation handling
     and an exclamation bonus, normalized per token and bucketed Low/Medium/High
  2. Length quality: word count bucketed "Too short" / "Good" / "Great!"

Pure functions: no I/O, no shared state, never raise for str input.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict

from core.lexicon import INTENSIFIERS, LEXICON, NEGATIONS, NEGATION_MULTIPLIER
from core.models import EmotionalLevel

# Stripped from token ends for lexicon lookup only
LOOKUP_PUNCTUATION = ".,!?:;()\"'"

EXCLAMATION_BONUS = 0.5
HIGH_THRESHOLD = 20.0
MEDIUM_THRESHOLD = 8.0

# (exclusive upper word count, score, label)
LENGTH_BUCKETS = [
    (10, 25, "Too short"),
    (30, 60, "Good"),
]
LENGTH_TOP = (90, "Great!")


@dataclass(frozen=True)
class EmotionalScore:
    token_count: int
    raw_score: float
    normalized_score: float
    level: EmotionalLevel


@dataclass(frozen=True)
class ScoredText:
    """Everything the quick-analysis panel shows for one input."""
    token_count: int
    word_count: int
    char_count: int
    raw_emotional_score: float
    normalized_emotional_score: float
    emotional_level: EmotionalLevel
    length_score: int
    length_label: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["emotional_level"] = self.emotional_level.value
        return data


def tokenize(text: str) -> list[str]:
    """Whitespace tokens, lower-cased. Empty input → []."""
    return [tok.lower() for tok in text.split()]


def lookup_form(token: str) -> str:
    return token.strip(LOOKUP_PUNCTUATION)


def _bucket(normalized: float) -> EmotionalLevel:
    if normalized > HIGH_THRESHOLD:
        return EmotionalLevel.HIGH
    if normalized > MEDIUM_THRESHOLD:
        return EmotionalLevel.MEDIUM
    return EmotionalLevel.LOW


def score(text: str) -> EmotionalScore:
    """
    Estimate the emotional power of text.

    Each lexicon hit contributes abs(weight), scaled by the preceding token:
    an intensifier multiplies it, a negation multiplies it by -0.5
    (intensifier wins if a token were in both tables). Every "!" in the
    original text adds 0.5. The sum is normalized to a percentage of the
    token count: > 20 High, > 8 Medium, else Low.
    """
    tokens = tokenize(text)
    if not tokens:
        return EmotionalScore(0, 0.0, 0.0, EmotionalLevel.LOW)

    raw = 0.0
    for i, token in enumerate(tokens):
        weight = LEXICON.get(lookup_form(token))
        if weight is None:
            continue
        adjusted = float(weight)
        if i >= 1:
            prev = tokens[i - 1]
            if prev in INTENSIFIERS:
                adjusted *= INTENSIFIERS[prev]
            elif prev in NEGATIONS:
                adjusted *= NEGATION_MULTIPLIER
        raw += abs(adjusted)

    raw += text.count("!") * EXCLAMATION_BONUS

    # Multiply before dividing so bucket boundaries land exactly
    normalized = raw * 100 / len(tokens)
    return EmotionalScore(len(tokens), raw, normalized, _bucket(normalized))


def count_words(text: str) -> int:
    return len(text.strip().split())


def char_count(text: str) -> int:
    # Code points, so an emoji counts as 1 (a browser would count 2)
    return len(text)


def length_label(word_count: int) -> tuple[int, str]:
    """Map a word count to (bar score, label)."""
    for upper, bucket_score, label in LENGTH_BUCKETS:
        if word_count < upper:
            return bucket_score, label
    return LENGTH_TOP


def analyze(text: str) -> ScoredText:
    emotional = score(text)
    words = count_words(text)
    bar, label = length_label(words)
    return ScoredText(
        token_count=emotional.token_count,
        word_count=words,
        char_count=char_count(text),
        raw_emotional_score=emotional.raw_score,
        normalized_emotional_score=emotional.normalized_score,
        emotional_level=emotional.level,
        length_score=bar,
        length_label=label,
    )
