"""Word counting, term frequency index and probabilistic idf scoring."""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Sequence

from .models import Document

TermFrequencyIndex = dict[str, dict[str, int]]
TfIdf = dict[str, dict[str, float]]

_WORD_SPLITTER = re.compile(r"[^a-zA-Z0-9]+")


@dataclass
class WordData:
    """A word, the number of documents holding it, and its idf."""

    word: str
    frequency: int
    idf: float


def load_stopwords(path: str, custom_stopwords: Iterable[str] = ()) -> set[str]:
    """Read one stopword per line from ``path`` and add ``custom_stopwords``."""
    with open(path, encoding="utf-8") as handle:
        stopwords = {line.strip() for line in handle}
    stopwords.update(custom_stopwords)
    return stopwords


def split_words(text: str) -> list[str]:
    """Lower-case ``text`` and split it on runs of non-alphanumeric characters."""
    return _WORD_SPLITTER.split(text.lower())


def _candidate_words(text: str, stopwords: Iterable[str] | set[str]) -> Iterator[str]:
    for word in split_words(text):
        if word and not word[0].isdigit() and len(word) > 2 and word not in stopwords:
            yield word


def probabilistic_idf(word: str, document_count: int, index: Mapping[str, Mapping[str, int]]) -> float:
    """Return log((N - nt) / nt) with integer division; -inf when undefined."""
    holding = len(index.get(word, {}))
    if document_count == 0 or holding == 0:
        return -math.inf
    ratio = int((document_count - holding) / holding)
    if ratio == 0:
        return -math.inf
    if ratio < 0:
        return math.nan
    return math.log(ratio)


def word_frequency_across_files(documents: Iterable[Document], stopwords: set[str]) -> Counter[str]:
    """Count each candidate word over all documents."""
    counts: Counter[str] = Counter()
    for document in documents:
        counts.update(_candidate_words(document.content, stopwords))
    return counts


def word_frequency_per_file(
    documents: Iterable[Document],
    stopwords: set[str],
    frequencies: Mapping[str, int],
) -> TermFrequencyIndex:
    """Map each word seen more than once overall to its count in each document path."""
    index: TermFrequencyIndex = {}
    for document in documents:
        for word in _candidate_words(document.content, stopwords):
            if frequencies.get(word, 0) > 1:
                per_path = index.setdefault(word, {})
                per_path[document.path] = per_path.get(document.path, 0) + 1
    return index


def create_term_frequency_index(
    documents: Sequence[Document], stopwords: set[str]
) -> tuple[TermFrequencyIndex, list[WordData]]:
    """Build the term frequency index and the idf data of every indexed word."""
    frequencies = word_frequency_across_files(documents, stopwords)
    index = word_frequency_per_file(documents, stopwords, frequencies)
    word_data = [
        WordData(
            word=word,
            frequency=len(paths),
            idf=probabilistic_idf(word, len(documents), index),
        )
        for word, paths in index.items()
    ]
    return index, word_data


def tfidf_scores(index: Mapping[str, Mapping[str, int]], word_data: Iterable[WordData]) -> TfIdf:
    """Score every word of every document path as term count times idf."""
    idf_by_word: dict[str, float] = {}
    for entry in word_data:
        idf_by_word.setdefault(entry.word, entry.idf)

    result: TfIdf = {}
    for word, paths in index.items():
        if word not in idf_by_word:
            continue
        idf = idf_by_word[word]
        for path, count in paths.items():
            result.setdefault(path, {})[word] = count * idf
    return result