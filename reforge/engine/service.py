"""Identifier-based reference finding over host snapshots.

Python sources are tokenized with the stdlib tokenizer so that strings,
comments and keywords never match. Everything else goes through a small
lexical scanner that understands the common comment, string and number
forms.
"""

import io
import keyword
import posixpath
import re
import tokenize
from dataclasses import dataclass
from typing import Optional

from reforge.engine.host import AnalysisHost
from reforge.logging import get_logger
from reforge.models import TextSpan, line_starts

log = get_logger(__name__)

PYTHON_EXTENSIONS = {".py", ".pyi"}

# JavaScript family: no `#` comments, `#name` is a private class member.
SCRIPT_EXTENSIONS = {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"}

SOFT_KEYWORD_STATEMENTS = {"match", "case", "type"}

# Tokens that may open a match subject or case pattern.
PATTERN_OPENERS = {"(", "[", "{", "-", "*"}

# Keywords that continue an expression after a plain name.
INFIX_KEYWORDS = {"and", "or", "in", "is", "if"}

_STRING = r"""(?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|`(?:\\.|[^`\\])*`)"""
_NUMBER = r"(?P<number>\d[\w.]*)"


def _lexer(comment: str, name: str) -> re.Pattern:
    return re.compile(
        rf"(?P<comment>{comment})|{_STRING}|{_NUMBER}|(?P<name>{name})", re.DOTALL
    )


LEXICAL_TOKEN = _lexer(r"\#[^\n]*|//[^\n]*|/\*.*?\*/", r"(?:[^\W\d]|\$)[\w$]*")
SCRIPT_TOKEN = _lexer(r"//[^\n]*|/\*.*?\*/", r"\#?(?:[^\W\d]|\$)[\w$]*")


@dataclass(frozen=True)
class Identifier:
    name: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.name)


@dataclass(frozen=True)
class RenameLocation:
    """Raw location reported by the engine."""

    file_name: str
    text_span: TextSpan


class FileIndex:
    """Identifier tokens of one file at one version."""

    def __init__(self, identifiers: list[Identifier]):
        self.identifiers = identifiers
        self._by_name: dict[str, list[Identifier]] = {}
        for ident in identifiers:
            self._by_name.setdefault(ident.name, []).append(ident)

    def identifier_at(self, position: int) -> Optional[Identifier]:
        for ident in self.identifiers:
            if ident.start <= position < ident.end:
                return ident
            if ident.start > position:
                break
        return None

    def named(self, name: str) -> list[Identifier]:
        return self._by_name.get(name, [])


def scan_lexical(text: str, pattern: re.Pattern = LEXICAL_TOKEN) -> list[Identifier]:
    return [
        Identifier(match.group("name"), match.start())
        for match in pattern.finditer(text)
        if match.lastgroup == "name"
    ]


def _logical_lines(tokens):
    """Group significant tokens into logical lines."""
    line = []
    for tok in tokens:
        if tok.type in (tokenize.NEWLINE, tokenize.ENDMARKER):
            if line:
                yield line
            line = []
        elif tok.type not in (tokenize.NL, tokenize.COMMENT, tokenize.INDENT, tokenize.DEDENT):
            line.append(tok)
    if line:
        yield line


def _top_level(line, strings: set[str]) -> Optional[int]:
    """Index of the first bracket-depth-zero token spelled as one of strings."""
    depth = 0
    for index, tok in enumerate(line):
        if tok.type == tokenize.OP and tok.string in ("(", "[", "{"):
            depth += 1
        elif tok.type == tokenize.OP and tok.string in (")", "]", "}"):
            depth -= 1
        elif depth == 0 and tok.string in strings:
            return index
    return None


def _soft_keywords(line) -> set[int]:
    """Indices of tokens in a logical line that act as soft keywords.

    ``match``, ``case`` and ``type`` are keywords only when they open their
    statement; anywhere else they are ordinary names. ``_`` is a keyword
    inside a case pattern.
    """
    head = line[0]
    if head.type != tokenize.NAME or head.string not in SOFT_KEYWORD_STATEMENTS:
        return set()
    if len(line) < 2:
        return set()

    following = line[1]
    colon = _top_level(line, {":"})
    if head.string == "type":
        opens = following.type == tokenize.NAME and not keyword.iskeyword(following.string)
    elif following.type == tokenize.OP:
        # `match (x):` opens a block; `match[x]: int = 1` is an annotation
        opens = following.string in PATTERN_OPENERS and colon is not None and (
            head.string == "case" or colon == len(line) - 1
        )
    elif following.type == tokenize.NAME and following.string in INFIX_KEYWORDS:
        opens = False
    else:
        opens = colon is not None

    if not opens:
        return set()

    skipped = {0}
    if head.string == "case":
        end = _top_level(line, {":", "if"})
        for index in range(1, end):
            if line[index].type == tokenize.NAME and line[index].string == "_":
                skipped.add(index)
    return skipped


def scan_python(text: str) -> list[Identifier]:
    starts = line_starts(text)
    identifiers = []
    for line in _logical_lines(tokenize.generate_tokens(io.StringIO(text).readline)):
        skipped = _soft_keywords(line)
        for index, tok in enumerate(line):
            if tok.type != tokenize.NAME or index in skipped:
                continue
            if keyword.iskeyword(tok.string):
                continue
            row, col = tok.start
            identifiers.append(Identifier(tok.string, starts[row - 1] + col))
    return identifiers


class AnalysisEngine:
    """Finds every location sharing the spelling of an identifier."""

    def __init__(self, host: AnalysisHost):
        self.host = host
        self._cache: dict[str, tuple[str, FileIndex]] = {}

    def find_rename_locations(
        self, file_name: str, position: int
    ) -> Optional[list[RenameLocation]]:
        """Locations to rename for the identifier at position.

        Returns:
            Locations across all tracked files, or None if no identifier
            covers position
        """
        target = self._index(file_name).identifier_at(position)
        if target is None:
            log.debug("no_identifier_at_position", file=file_name, position=position)
            return None

        locations = []
        for path in self.host.list_tracked_files():
            for ident in self._index(path).named(target.name):
                locations.append(
                    RenameLocation(path, TextSpan(ident.start, len(ident.name)))
                )
        return locations

    def get_identifier_at(self, file_name: str, position: int) -> Optional[Identifier]:
        return self._index(file_name).identifier_at(position)

    def _index(self, path: str) -> FileIndex:
        token = self.host.get_version_token(path)
        if token is None:
            self._cache.pop(path, None)
            return FileIndex([])

        cached = self._cache.get(path)
        if cached is not None and cached[0] == token:
            return cached[1]

        snapshot = self.host.get_snapshot(path)
        if snapshot is None:
            return FileIndex([])

        index = FileIndex(self._scan(path, snapshot.text))
        self._cache[path] = (token, index)
        log.debug("file_indexed", path=path, version=token, identifiers=len(index.identifiers))
        return index

    def _scan(self, path: str, text: str) -> list[Identifier]:
        extension = posixpath.splitext(path)[1].lower()
        if extension in SCRIPT_EXTENSIONS:
            return scan_lexical(text, SCRIPT_TOKEN)
        if extension not in PYTHON_EXTENSIONS:
            return scan_lexical(text)
        try:
            return scan_python(text)
        except (tokenize.TokenError, SyntaxError) as e:
            log.warning("tokenize_failed", path=path, error=str(e), fallback="lexical")
            return scan_lexical(text)
