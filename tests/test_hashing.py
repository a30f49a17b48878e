"""Pure unit tests for aicheck/detection/hashing.py."""

from aicheck.detection.hashing import cache_key, fingerprint, rolling_hash
from aicheck.schemas.analysis import BinaryBlob, ContentKind


def test_rolling_hash_known_values():
    assert rolling_hash("") == 0
    assert rolling_hash("a") == 97
    assert rolling_hash("ab") == 97 * 31 + 98


def test_rolling_hash_stays_32_bit():
    assert 0 <= rolling_hash("x" * 10_000) <= 0xFFFFFFFF


def test_fingerprint_is_eight_hex_chars():
    fp = fingerprint("hello world")
    assert len(fp) == 8
    int(fp, 16)


def test_fingerprint_only_reads_prefix():
    base = "a" * 1000
    assert fingerprint(base + "tail one") == fingerprint(base + "tail two")
    assert fingerprint("b" + base) != fingerprint(base)


def test_fingerprint_custom_prefix():
    assert fingerprint("abcdef", prefix_chars=3) == fingerprint("abcxyz", prefix_chars=3)


def test_binary_fingerprint_uses_filename_and_size():
    a = BinaryBlob(filename="photo.jpg", data=b"1234")
    b = BinaryBlob(filename="photo.jpg", data=b"abcd")
    c = BinaryBlob(filename="photo.jpg", data=b"12345")
    assert fingerprint(a) == fingerprint(b)
    assert fingerprint(a) != fingerprint(c)


def test_cache_key_includes_kind():
    text = "same content"
    assert cache_key(text, ContentKind.TEXT) == f"{fingerprint(text)}:text"
    assert cache_key(text, ContentKind.TEXT) != cache_key(text, ContentKind.DOCUMENT)
