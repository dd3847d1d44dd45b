"""Record reader shared by all Bookshelf parsers.

A record is one non-blank line split on whitespace, with comments (from
'#' to end of line) removed. Colons are split into tokens of their own, so
"NumNodes: 3", "NumNodes :3" and "NumNodes : 3" all read the same.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Union
import logging

from ...errors import BookshelfIOError, EncodingError

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"


@dataclass(frozen=True)
class Record:
    """One meaningful line of a Bookshelf file."""
    source: str
    line: int
    fields: List[str]

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, i):
        return self.fields[i]

    def keyword(self) -> str:
        return self.fields[0].lower() if self.fields else ""


def tokenize(text: str) -> List[str]:
    """Split one line into fields, dropping any comment."""
    comment = text.find(COMMENT_MARKER)
    if comment >= 0:
        text = text[:comment]
    return text.replace(":", " : ").split()


def iter_lines(lines: Iterable[str], source: str = "<string>") -> Iterator[Record]:
    """Turn raw lines into records, skipping blank and comment-only lines."""
    for line_no, text in enumerate(lines, start=1):
        fields = tokenize(text)
        if fields:
            yield Record(source=source, line=line_no, fields=fields)


def read_records(path: Union[str, Path], encoding: str = "utf-8") -> Iterator[Record]:
    """Lazily read records from a file.

    The file stays open only while the iterator is being consumed; it is
    closed when the iterator is exhausted, closed or garbage collected.

    Raises:
        BookshelfIOError: File cannot be opened or read
        EncodingError: File content is not valid text
    """
    source = str(path)
    try:
        f = open(path, "rb")
    except OSError as e:
        raise BookshelfIOError(source, e.strerror or str(e)) from e

    logger.debug(f"Opened {source}")
    with f:
        line_no = 0
        while True:
            try:
                raw = f.readline()
            except OSError as e:
                raise BookshelfIOError(source, e.strerror or str(e)) from e
            if not raw:
                break
            line_no += 1
            # decoded per line so errors point at the offending line
            try:
                text = raw.decode(encoding)
            except UnicodeDecodeError as e:
                raise EncodingError(source, line_no, e.reason) from e
            fields = tokenize(text)
            if fields:
                yield Record(source=source, line=line_no, fields=fields)


def records_from_string(text: str, source: str = "<string>") -> List[Record]:
    """Records of an in-memory document (used by tests and tools)."""
    return list(iter_lines(text.splitlines(), source))
