# repokeywords

repokeywords clones git repositories, collects their markdown documents,
picks keywords for each document with a term-frequency / probabilistic
inverse-document-frequency score, writes the results to a JSON data file and
serves that file over HTTP.

`git` must be on the `PATH`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```
repokeywords [REPO_URL ...] [--host HOST] [--port PORT]
             [--data-file PATH] [--stopwords-file PATH]
             [--num-keywords N] [--serve-only]
```

Without `--serve-only`, the command first builds the data file from the
repositories given as arguments, then serves it. Defaults come from
`repokeywords.models.Settings`:

| option             | default                  |
|--------------------|--------------------------|
| `--port`           | `8081`                   |
| `--data-file`      | `./data/file_data.json`  |
| `--stopwords-file` | `./data/stopwords.txt`   |
| `--num-keywords`   | `5`                      |

The directory holding the data file must already exist. If building fails
with a file or value error, the message is printed and the server still
starts.

### Building the data set

For each repository URL (`repokeywords.datastore.build_dataset`):

1. The repository is cloned afresh into `repository` followed by the URL with
   its first 28 characters removed; an existing directory at that place is
   deleted first.
2. Every `.md` file whose modification time lies strictly between
   `Settings.start_date` (2023-01-01) and `Settings.end_date` (2026-12-31
   23:59:59, UTC) is read. The record kept for it holds the file name, the
   title (the first line starting with `#`, or `title:`, otherwise `none`),
   the path, the date of its latest commit, the author time from `git blame`
   of its first lines, the second component of its path as organisation,
   the file type from its extension, an orphan flag, votes and comments.
   A record already present in the data file for the same path is refreshed,
   so its votes, comments and creation date are kept.
3. Documents longer than 200 bytes are indexed. Text is lower-cased and split
   on runs of non-alphanumeric characters; words are dropped when empty,
   starting with a digit, two characters or shorter, in the stopword list
   (one word per line, plus `org`, `company`, `inc`, `llc`), or seen only
   once across all documents. A missing stopword file is reported and no
   stopwords are used.
4. Each word's idf is `log((N - nt) / nt)`, where `N` is the number of
   documents, `nt` the number holding the word, and the division is integer
   division; it is `-inf` when that quotient is zero. A word's score in a
   document is its count there times its idf.
5. Each scored document keeps its `--num-keywords` highest-scoring words
   shorter than 40 characters as its keywords.
6. The documents are written as JSON indented by four spaces.

### Serving

`repokeywords.server.serve` answers every path and every method with the
data file, re-encoded compactly as `application/json`. When the file holds
`null` the answer is `{"Message":"wompedy womp"}`; when it cannot be read or
parsed the answer is a 500 with a plain-text message. Requests carrying an
`Origin` header get `Access-Control-Allow-Origin: *` for `GET`, `POST` and
`HEAD`, and CORS preflight requests are answered with `204`.

## Library use

```python
from repokeywords.models import Document
from repokeywords.wordindex import create_term_frequency_index, tfidf_scores
from repokeywords.datastore import assign_keywords

documents = [
    Document(name="a.md", path="docs/a.md", content="release notes for the parser release"),
    Document(name="b.md", path="docs/b.md", content="parser design and release planning"),
]
index, word_data = create_term_frequency_index(documents, stopwords={"the", "and", "for"})
scores = tfidf_scores(index, word_data)
assign_keywords(documents, scores, 5)
```

- `repokeywords.models` — `Settings`, `Document` (with `to_dict` and
  `from_dict` for the data file layout), `WordScore`, `UpdateRequest`,
  `UpdateComment`, `UpdateDesignDoc`.
- `repokeywords.wordindex` — `load_stopwords`, `split_words`,
  `probabilistic_idf`, `word_frequency_across_files`,
  `word_frequency_per_file`, `create_term_frequency_index`, `tfidf_scores`.
- `repokeywords.fileutil` — reading files, `find_title`, `file_type`,
  `is_orphan`, `walk_and_filter`, `load_existing`, `document_details`,
  `clone_repository`, `clone_repository_branches`.
- `repokeywords.gitutil` — `last_modified`, `creation_date`, `git_blame`,
  `parent_repo`; failures raise `GitError`.
- `repokeywords.datastore` — `build_dataset`, `assign_keywords`,
  `write_json_file`.
- `repokeywords.server` — `render_response`, `make_handler`, `serve`, `main`.

## What it does not do

The server only hands out the data file. Although documents carry upvotes,
downvotes and comments, and `UpdateRequest`, `UpdateComment` and
`UpdateDesignDoc` describe such changes, no endpoint accepts them and nothing
in the package changes those fields. `clone_repository_branches` is available
for cloning unmerged branches but is not part of building the data set.