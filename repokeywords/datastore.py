"""Building the keyword data set and writing it to the JSON data file."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

from .fileutil import clone_repository, document_details, walk_and_filter
from .models import Document, Settings, WordScore
from .wordindex import create_term_frequency_index, load_stopwords, tfidf_scores

_URL_PREFIX_LENGTH = len("https://github.com/KiranMahn")
_MAX_KEYWORD_LENGTH = 40
_MIN_CONTENT_LENGTH = 200

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _escape_html(text: str) -> str:
    """Escape the characters that a safe JSON encoder never writes raw."""
    for raw, escaped in _HTML_ESCAPES.items():
        text = text.replace(raw, escaped)
    return text


def write_json_file(documents: Sequence[Document], filename: str) -> str:
    """Write ``documents`` as indented JSON to ``filename`` and return its absolute path."""
    records = [document.to_dict() for document in documents] or None
    text = _escape_html(json.dumps(records, indent=4, ensure_ascii=False)) + "\n"
    with open(filename, "w", encoding="utf-8") as handle:
        handle.write(text)
    absolute = os.path.abspath(filename)
    print("File created at:", absolute)
    return absolute


def assign_keywords(
    documents: Iterable[Document],
    scores: Mapping[str, Mapping[str, float]],
    num_keywords: int,
) -> None:
    """Give each scored document its ``num_keywords`` highest-scoring words."""
    for document in documents:
        word_scores = scores.get(document.path)
        if word_scores is None:
            continue
        ranked = sorted(
            (
                WordScore(word=word, score=score)
                for word, score in word_scores.items()
                if len(word) < _MAX_KEYWORD_LENGTH
            ),
            key=lambda entry: entry.score,
            reverse=True,
        )
        document.keywords = [entry.word for entry in ranked[: max(num_keywords, 0)]]
        print("topKeywords for path: ", document.path, ": ", document.keywords)


def _markdown_filter(settings: Settings):
    def accept(path: str, info: os.stat_result) -> bool:
        modified = datetime.fromtimestamp(info.st_mtime, tz=timezone.utc)
        return (
            os.path.basename(path).endswith(".md")
            and settings.start_date < modified < settings.end_date
        )

    return accept


def _collect_documents(settings: Settings) -> list[Document]:
    documents: list[Document] = []
    accept = _markdown_filter(settings)
    for repo_url in settings.repo_urls:
        clone_repository(repo_url, settings.clone_dir)
        local_dir = os.path.normpath(settings.clone_dir + repo_url[_URL_PREFIX_LENGTH:])
        for path in walk_and_filter(local_dir, accept):
            try:
                document = document_details(path, settings.data_file, settings.num_keywords)
            except (OSError, ValueError) as exc:
                print("Error:", exc)
                continue
            if document.content_length > _MIN_CONTENT_LENGTH:
                documents.append(document)
    return documents


def build_dataset(settings: Settings) -> list[Document]:
    """Clone every repository, index its markdown files and write the data file."""
    documents = _collect_documents(settings)

    try:
        stopwords = load_stopwords(settings.stopwords_file, settings.custom_stopwords)
    except OSError as exc:
        print("Error loading stopwords:", exc)
        stopwords = set()

    index, word_data = create_term_frequency_index(documents, stopwords)
    assign_keywords(documents, tfidf_scores(index, word_data), settings.num_keywords)

    write_json_file(documents, settings.data_file)
    print("Data has been successfully written to", settings.data_file)
    return documents