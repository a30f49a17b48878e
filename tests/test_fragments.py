"""Pure unit tests for aicheck/verification/fragments.py."""

from aicheck.verification.fragments import extract_claims, extract_key_fragments, keywords, split_sentences

LONG_TEXT = (
    "Photosynthesis converts sunlight into chemical energy inside plant chloroplasts. "
    "Researchers measured oxygen output across several greenhouse experiments during summer. "
    "Short one. "
    "Modern agriculture depends heavily on understanding crop metabolism and nutrient cycles. "
    "Climate scientists monitor forest carbon uptake using satellite observations worldwide. "
    "Is this a question? "
)


def test_split_sentences_drops_short_fragments():
    sentences = split_sentences("Hi. This sentence is long enough. Ok!")
    assert sentences == ["This sentence is long enough"]


def test_keywords_filters_stopwords_and_short_words():
    assert keywords("The cat and their enormous telescope") == ["enormous", "telescope"]


def test_key_fragments_are_bounded():
    fragments = extract_key_fragments(LONG_TEXT, limit=3)
    assert 1 <= len(fragments) <= 3
    for fragment in fragments:
        assert 3 <= len(fragment.split()) <= 6


def test_key_fragments_prefer_longest_sentences():
    fragments = extract_key_fragments(LONG_TEXT, limit=1)
    assert fragments[0] == "modern agriculture depends heavily understanding crop"


def test_key_fragments_empty_for_trivial_text():
    assert extract_key_fragments("Too short. Also short.") == []


def test_extract_claims_only_declarative_sentences():
    claims = extract_claims("Water boils at one hundred degrees. Does it freeze? Ice is lighter than water.")
    assert claims == ["Water boils at one hundred degrees", "Ice is lighter than water"]


def test_extract_claims_limit():
    text = " ".join(f"Statement number {i} is a plain fact." for i in range(10))
    assert len(extract_claims(text, limit=3)) == 3
