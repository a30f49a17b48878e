"""
Sentence-level helpers shared by verification and the web-evidence stage.

`extract_key_fragments` bounds the number of outbound search calls regardless
of content length: it never returns more than `limit` queries.
"""

import re

from aicheck.verification.constants import STOPWORDS

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
DECLARATIVE_RE = re.compile(r"[^.!?]+\.")
WORD_RE = re.compile(r"[\w'-]+")


def split_sentences(text: str, min_chars: int = 10) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT_RE.split(text) if len(s.strip()) > min_chars]


def keywords(text: str, min_len: int = 4) -> list[str]:
    """Lowercase content words, order preserved, stopwords removed."""
    return [
        w for w in (m.group(0).lower() for m in WORD_RE.finditer(text))
        if len(w) >= min_len and w not in STOPWORDS
    ]


def extract_key_fragments(text: str, limit: int = 3, max_keywords: int = 6) -> list[str]:
    sentences = sorted(split_sentences(text), key=len, reverse=True)[:5]

    fragments = []
    for sentence in sentences:
        if len(sentence.split()) < 5:
            continue
        words = keywords(sentence)
        if len(words) >= 3:
            fragments.append(" ".join(words[:max_keywords]))
        if len(fragments) >= limit:
            break
    return fragments


def extract_claims(text: str, limit: int = 3) -> list[str]:
    """First `limit` declarative (full-stop terminated) sentences."""
    claims = []
    for match in DECLARATIVE_RE.finditer(text):
        sentence = match.group(0).strip().rstrip(".").strip()
        if len(sentence) > 10:
            claims.append(sentence)
        if len(claims) >= limit:
            break
    return claims
