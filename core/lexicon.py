"""
CaptionGenie — Emotional Lexicon

Static tables used by the emotional power scorer:
  - LEXICON       word → signed weight (-3..3). Sign is polarity, magnitude
                  is intensity. Only magnitude reaches the final score.
  - INTENSIFIERS  word → multiplier (> 1) for the next token's weight
  - NEGATIONS     words that flip and halve the next token's weight

All keys are lowercase. Lookups use the punctuation-stripped token.
"""

from __future__ import annotations

NEGATION_MULTIPLIER = -0.5

LEXICON: dict[str, int] = {
    # ── Strong positive ──
    "love": 3, "loved": 3, "amazing": 3, "awesome": 3, "incredible": 3,
    "fantastic": 3, "outstanding": 3, "revolutionary": 3, "unbelievable": 3,
    "perfect": 3, "brilliant": 3, "stunning": 3, "epic": 3, "thrilled": 3,
    # ── Moderate positive ──
    "excited": 2, "exciting": 2, "great": 2, "beautiful": 2, "happy": 2,
    "delicious": 2, "powerful": 2, "inspiring": 2, "fun": 2, "wonderful": 2,
    "proud": 2, "exclusive": 2, "free": 2, "new": 1, "best": 2,
    "win": 2, "secret": 2, "unique": 2, "transform": 2, "boost": 2,
    # ── Mild positive ──
    "good": 1, "nice": 1, "like": 1, "enjoy": 1, "easy": 1, "fresh": 1,
    "cool": 1, "glad": 1, "useful": 1, "helpful": 1, "fine": 1,
    # ── Mild negative ──
    "bad": -1, "boring": -1, "meh": -1, "tired": -1, "slow": -1,
    "problem": -1, "difficult": -1, "confusing": -1,
    # ── Moderate negative ──
    "sad": -2, "angry": -2, "worried": -2, "annoying": -2, "disappointed": -2,
    "fail": -2, "failed": -2, "mistake": -2, "painful": -2, "ugly": -2,
    "worst": -2,
    # ── Strong negative ──
    "hate": -3, "terrible": -3, "awful": -3, "horrible": -3, "disaster": -3,
    "furious": -3, "devastating": -3, "disgusting": -3, "nightmare": -3,
}

INTENSIFIERS: dict[str, float] = {
    "very": 1.5,
    "really": 1.5,
    "so": 1.3,
    "super": 1.5,
    "totally": 1.5,
    "truly": 1.4,
    "highly": 1.4,
    "extremely": 2.0,
    "incredibly": 2.0,
    "absolutely": 1.8,
}

NEGATIONS: frozenset[str] = frozenset({
    "not", "no", "never", "nobody", "nothing", "neither", "nor", "without",
    "don't", "doesn't", "didn't", "isn't", "aren't", "wasn't", "weren't",
    "can't", "cannot", "couldn't", "won't", "wouldn't", "shouldn't", "hasn't",
    "haven't",
    "dont", "doesnt", "didnt", "isnt", "arent", "wasnt", "werent", "cant",
    "couldnt", "wont", "wouldnt", "shouldnt", "hasnt", "havent",
})
