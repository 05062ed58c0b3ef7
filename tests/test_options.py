from __future__ import annotations

import hashlib

import pytest
from blake3 import blake3

from hashets.options import (
    HashAlgorithm,
    Options,
    default_naming_func,
    ignore_globs,
    ignore_nothing,
    ignore_prefix,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("foo.txt", "foo_1234.txt"),
        ("archive.tar.gz", "archive_1234.tar.gz"),
        ("foo", "foo_1234"),
        (".env", "_1234.env"),
        ("bee movie.txt", "bee movie_1234.txt"),
    ],
)
def test_default_naming_func(name, expected):
    assert default_naming_func(name, "1234") == expected


def test_ignore_prefix():
    ignore = ignore_prefix("folder", "static/vendor")

    assert ignore("folder")
    assert ignore("folder/img.png")
    assert ignore("static/vendor/lib.js")
    assert not ignore("static/app.js")
    assert not ignore("foo.txt")


def test_ignore_nothing():
    assert not ignore_nothing("")
    assert not ignore_nothing("anything/at/all")


def test_ignore_globs_ignore_only():
    ignore = ignore_globs(ignore=["**/*.map", "drafts"])

    assert ignore("js/app.js.map")
    assert ignore("app.js.map")
    assert ignore("drafts")
    assert not ignore("js/app.js")
    assert not ignore("js")


def test_ignore_globs_globstar_matches_zero_directories():
    ignore = ignore_globs(ignore=["static/**/*.css", "vendor/**"])

    assert ignore("static/site.css")
    assert ignore("static/css/site.css")
    assert ignore("static/a/b/site.css")
    assert ignore("vendor")
    assert ignore("vendor/lib.js")
    assert not ignore("site.css")
    assert not ignore("static/site.js")


def test_ignore_globs_include_globstar_at_root():
    ignore = ignore_globs(include=["**/*.txt"])

    assert not ignore("foo.txt")
    assert not ignore("docs/readme.txt")
    assert ignore("image.png")


def test_ignore_globs_include():
    ignore = ignore_globs(ignore=["secret.txt"], include=["*.txt"])

    assert not ignore("foo.txt")
    assert not ignore("docs/readme.txt")
    assert ignore("secret.txt")
    assert ignore("image.png")


def test_ignore_globs_empty():
    assert not ignore_globs()("foo.txt")


@pytest.mark.parametrize(
    ("algorithm", "reference"),
    [
        (HashAlgorithm.SHA256, hashlib.sha256),
        (HashAlgorithm.SHA512, hashlib.sha512),
        (HashAlgorithm.MD5, hashlib.md5),
        (HashAlgorithm.BLAKE3, blake3),
    ],
)
def test_hash_algorithm_new(algorithm, reference):
    hasher = algorithm.new()
    hasher.update(b"hello")

    assert hasher.digest() == reference(b"hello").digest()


def test_hash_algorithm_new_is_fresh():
    first = HashAlgorithm.SHA256.new()
    first.update(b"contamination")

    assert HashAlgorithm.SHA256.new().digest() == hashlib.sha256().digest()


@pytest.mark.parametrize("name", ["sha256", "SHA512", "md5", "blake3"])
def test_hash_algorithm_parse(name):
    assert HashAlgorithm.parse(name).value == name.lower()


def test_hash_algorithm_parse_invalid():
    with pytest.raises(ValueError, match="invalid hashing algorithm: sha1"):
        HashAlgorithm.parse("sha1")


def test_options_defaults():
    options = Options()

    assert options.hash is HashAlgorithm.SHA256
    assert options.naming_func is default_naming_func
    assert options.hash_to_text(b"\x00\xff") == "00ff"
    assert not options.ignore("foo.txt")


def test_options_hash_factory():
    options = Options(hash=hashlib.sha1)

    hasher = options.new_hasher()
    hasher.update(b"hello")

    assert hasher.digest() == hashlib.sha1(b"hello").digest()


def test_options_frozen():
    with pytest.raises(AttributeError):
        Options().hash = HashAlgorithm.MD5  # type: ignore[misc]
