"""Corpus loading (fail fast) and atomic persistence."""

import json
import os

import pytest

from shortbench.corpus import Corpus, CorpusError, load_corpus, write_corpus


def test_load_corpus(corpus_file):
    corpus = load_corpus(corpus_file)

    assert list(corpus) == ["abc123", "def456"]
    assert len(corpus) == 2
    assert corpus[1] == "def456"
    assert corpus.source == str(corpus_file)


def test_corpus_is_read_only(corpus):
    with pytest.raises(TypeError):
        corpus[0] = "zzz"
    assert not hasattr(corpus, "append")


def test_corpus_snapshot_is_independent_of_input():
    codes = ["a1", "b2"]
    corpus = Corpus(codes)
    codes.append("c3")
    assert len(corpus) == 2


def test_missing_file(tmp_path):
    with pytest.raises(CorpusError, match="not found"):
        load_corpus(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "content,message",
    [
        ("", "not valid JSON"),
        ("{not json", "not valid JSON"),
        ('{"codes": ["abc"]}', "must hold a JSON array"),
        ("[]", "is empty"),
        ('["abc", 42]', "invalid entry at index 1"),
        ('["abc", ""]', "invalid entry at index 1"),
        ('[null]', "invalid entry at index 0"),
        (b'["\xff\xfe"]', "not valid UTF-8 JSON"),
    ],
)
def test_malformed_file(tmp_path, content, message):
    path = tmp_path / "codes.json"
    path.write_bytes(content if isinstance(content, bytes) else content.encode("utf-8"))

    with pytest.raises(CorpusError, match=message):
        load_corpus(path)


def test_corpus_error_is_value_error():
    assert issubclass(CorpusError, ValueError)


def test_write_then_load(tmp_path):
    path = write_corpus(tmp_path / "out" / "codes.json", ["x1", "y2", "z3"])

    assert json.loads(path.read_text(encoding="utf-8")) == ["x1", "y2", "z3"]
    assert list(load_corpus(path)) == ["x1", "y2", "z3"]


def test_write_overwrites_previous_content(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps(["old1", "old2", "old3"]), encoding="utf-8")

    write_corpus(path, ["new1"])

    assert json.loads(path.read_text(encoding="utf-8")) == ["new1"]
    assert sorted(os.listdir(tmp_path)) == ["codes.json"]


def test_write_failure_keeps_previous_content(tmp_path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps(["old"]), encoding="utf-8")

    with pytest.raises(TypeError):
        write_corpus(path, [object()])

    assert json.loads(path.read_text(encoding="utf-8")) == ["old"]
    assert sorted(os.listdir(tmp_path)) == ["codes.json"]
