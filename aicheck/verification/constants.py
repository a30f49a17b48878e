"""
Word and domain lists used by the verification analysis.

Domain allow-list entries match a hostname exactly or as a dotted suffix
("bbc.com" matches "www.bbc.com"). TLD entries (".edu", ".gov") match any host under them.
"""

CREDIBLE_DOMAINS = (
    "wikipedia.org",
    "britannica.com",
    "bbc.com",
    "bbc.co.uk",
    "reuters.com",
    "apnews.com",
    "ap.org",
    "npr.org",
    "nytimes.com",
    "theguardian.com",
    "nature.com",
    "science.org",
    "sciencedirect.com",
    "who.int",
    "un.org",
    "harvard.edu",
    "mit.edu",
    "stanford.edu",
    "ox.ac.uk",
    "cam.ac.uk",
)

CREDIBLE_TLDS = (
    ".edu",
    ".gov",
    ".mil",
    ".int",
    ".ac.uk",
    ".gov.uk",
)

# A hit that covers a claim but carries one of these reads as disagreement.
DEBUNK_MARKERS = (
    "false",
    "fake",
    "hoax",
    "debunked",
    "myth",
    "misleading",
    "not true",
    "no evidence",
)

# Dropped from keyword queries and claim keywords.
STOPWORDS = frozenset({
    "the", "and", "that", "this", "with", "from", "have", "has", "had", "were",
    "was", "are", "for", "not", "but", "their", "there", "they", "them", "then",
    "than", "which", "what", "when", "where", "while", "would", "could", "should",
    "about", "into", "over", "under", "between", "after", "before", "also", "been",
    "being", "such", "some", "more", "most", "very", "just", "only", "other",
    "these", "those", "will", "your", "yours", "because", "through", "during",
})
