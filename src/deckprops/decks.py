"""
Reading keyword records from deck text.

A deck is a sequence of keywords, each followed by zero or more records of
items terminated by '/'. Comments start with '--'. Repeat counts are written
as `N*value`, and a bare `N*` stands for `N` defaulted items.

Example:
```
GRID
PERMX
 1000*1 /
BOX
 1 2  1 2  1 2 /
EQUALS
 'PORO' 0.25 /
/
ENDBOX
```
"""

import logging
from os import PathLike
from pathlib import Path
import re
import typing

from deckprops.config import Config
from deckprops.errors import DeckSyntaxError, RecordError
from deckprops.grids.extent import GridExtent
from deckprops.grids.properties import GridProperties
from deckprops.keywords import KeywordLayout, is_property_keyword, layout_of
from deckprops.operators import OPERATOR_BUILDERS, build_instruction
from deckprops.processor import KeywordProcessor
from deckprops.records import DEFAULT, Item, Record

__all__ = [
    "read_deck",
    "read_deck_file",
    "find_extent",
    "referenced_properties",
    "load_properties",
    "load_properties_file",
]

logger = logging.getLogger(__name__)

# one token per match: a comment swallows the rest of the line, quoted
# strings may contain spaces and slashes, anything else runs up to the next
# blank, slash or quote
_TOKEN = re.compile(
    r"""\s*(?:(?P<comment>--.*)|(?P<string>'[^']*'|"[^"]*")|(?P<slash>/)|(?P<word>[^\s/'"]+))"""
)
_KEYWORD = re.compile(r"^[A-Za-z][A-Za-z0-9_+-]{0,7}$")
_INTEGER = re.compile(r"^[-+]?\d+$")
_FLOAT = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eEdD][-+]?\d+)?$")
_REPEAT = re.compile(r"^(\d+)\*(.*)$")


class _Token(typing.NamedTuple):
    kind: str
    """One of 'word', 'string' or 'slash'."""
    text: str
    line: int
    first: bool
    """Whether the token is the first one on its line."""


def _tokenize(text: str, line: int) -> typing.Iterator[_Token]:
    position = 0
    first = True
    while position < len(text):
        if not text[position:].strip():
            return
        match = _TOKEN.match(text, position)
        if match is None:
            raise DeckSyntaxError(
                f"Unterminated quoted string: {text[position:].strip()!r}", line
            )
        position = match.end()
        if match.group("comment") is not None:
            return
        if match.group("slash") is not None:
            yield _Token("slash", "/", line, first)
            # anything after the record terminator is a comment
            return
        if match.group("string") is not None:
            yield _Token("string", match.group("string")[1:-1], line, first)
        else:
            yield _Token("word", match.group("word"), line, first)
        first = False


class _Lexer:
    """View deck text as a stream of tokens."""

    def __init__(self, text: str) -> None:
        self.lines = text.splitlines()
        self.lineno = 0
        self._pending: typing.List[_Token] = []

    def _fill(self) -> None:
        while not self._pending and self.lineno < len(self.lines):
            self.lineno += 1
            self._pending = list(_tokenize(self.lines[self.lineno - 1], self.lineno))

    def peek(self) -> typing.Optional[_Token]:
        self._fill()
        return self._pending[0] if self._pending else None

    def next(self) -> typing.Optional[_Token]:
        self._fill()
        return self._pending.pop(0) if self._pending else None

    def next_line(self) -> typing.Optional[str]:
        """Return the next raw line, dropping what is left of the current one."""
        self._pending = []
        if self.lineno >= len(self.lines):
            return None
        self.lineno += 1
        return self.lines[self.lineno - 1]


def _parse_scalar(text: str) -> Item:
    if _INTEGER.match(text):
        return int(text)
    if _FLOAT.match(text):
        return float(text.replace("d", "e").replace("D", "e"))
    return text


def _expand(token: _Token) -> typing.List[Item]:
    if token.kind == "string":
        return [token.text]
    match = _REPEAT.match(token.text)
    if match is None:
        return [_parse_scalar(token.text)]

    count = int(match.group(1))
    if count < 1:
        raise DeckSyntaxError(f"Invalid repeat count in {token.text!r}", token.line)
    if not match.group(2):
        return [DEFAULT] * count
    value = _parse_scalar(match.group(2))
    if isinstance(value, str):
        raise DeckSyntaxError(f"Cannot repeat non-numeric value {token.text!r}", token.line)
    return [value] * count


def _is_keyword(token: typing.Optional[_Token]) -> bool:
    return (
        token is not None
        and token.kind == "word"
        and token.first
        and _KEYWORD.match(token.text) is not None
    )


def _read_items(lexer: _Lexer, keyword: str) -> typing.List[Item]:
    items: typing.List[Item] = []
    while True:
        token = lexer.next()
        if token is None:
            raise DeckSyntaxError(
                f"Record of keyword {keyword} is not terminated by '/'", lexer.lineno
            )
        if token.kind == "slash":
            return items
        items.extend(_expand(token))


def _read_keyword(lexer: _Lexer, token: _Token) -> typing.List[Record]:
    keyword = token.text.upper()
    layout = layout_of(keyword)

    if layout is KeywordLayout.NONE:
        return [Record(keyword, (), token.line)]

    if layout is KeywordLayout.TEXT:
        text = lexer.next_line()
        return [Record(keyword, (text.strip(),) if text else (), token.line)]

    if layout is KeywordLayout.RECORD:
        line = lexer.peek().line if lexer.peek() is not None else token.line
        return [Record(keyword, _read_items(lexer, keyword), line)]

    records = []
    while True:
        upcoming = lexer.peek()
        if layout is KeywordLayout.RECORDS:
            if upcoming is None:
                raise DeckSyntaxError(
                    f"Keyword {keyword} is not closed by an empty record '/'", lexer.lineno
                )
        elif upcoming is None or _is_keyword(upcoming):
            # unregistered keyword: its records run up to the next keyword
            return records or [Record(keyword, (), token.line)]

        if upcoming.kind == "slash":
            lexer.next()
            if layout is KeywordLayout.RECORDS:
                return records
            continue
        records.append(Record(keyword, _read_items(lexer, keyword), upcoming.line))


def read_deck(text: str) -> typing.List[Record]:
    """
    Split deck text into keyword records.

    Keywords with several records produce one `Record` per record. Keywords
    that are not registered are kept, with their records read up to the
    next keyword, so the processor can decide what to do with them.

    :param text: Deck text
    :return: Records in deck order
    :raises DeckSyntaxError: If the text is not a valid deck.
    """
    lexer = _Lexer(text)
    records: typing.List[Record] = []
    while True:
        token = lexer.next()
        if token is None:
            break
        if token.kind != "word" or _KEYWORD.match(token.text) is None:
            raise DeckSyntaxError(f"Expected a keyword, got {token.text!r}", token.line)
        records.extend(_read_keyword(lexer, token))

    logger.debug(f"Read {len(records)} records from {len(lexer.lines)} deck lines")
    return records


def read_deck_file(
    path: typing.Union[str, PathLike], encoding: str = "utf-8"
) -> typing.List[Record]:
    """
    Read keyword records from a deck file.

    :param path: Path to the deck file
    :param encoding: Text encoding of the file
    :return: Records in deck order
    """
    path = Path(path)
    logger.debug(f"Reading deck {path}")
    return read_deck(path.read_text(encoding=encoding))


def find_extent(records: typing.Iterable[Record]) -> GridExtent:
    """
    Return the grid extent declared by the `DIMENS` record.

    :raises RecordError: If there is no valid `DIMENS` record.
    """
    for record in records:
        if record.keyword == "DIMENS":
            if len(record) != 3:
                raise RecordError(f"DIMENS takes three items, got {len(record)}")
            nx, ny, nz = (
                record.get_int(position, name)
                for position, name in enumerate(("NX", "NY", "NZ"))
            )
            if min(nx, ny, nz) < 1:
                raise RecordError(f"DIMENS must be positive, got {nx} {ny} {nz}")
            return GridExtent(nx, ny, nz)
    raise RecordError("Deck has no DIMENS keyword")


def referenced_properties(records: typing.Iterable[Record]) -> typing.List[str]:
    """
    Names of registered properties a deck assigns or edits, in order of first use.

    Records that cannot be resolved are skipped here; processing reports them.
    """
    names: typing.Dict[str, None] = {}
    for record in records:
        if is_property_keyword(record.keyword):
            names[record.keyword] = None
        elif record.keyword in OPERATOR_BUILDERS:
            try:
                instruction = build_instruction(record)
            except RecordError:
                continue
            for name in (instruction.target, instruction.source):
                if name is not None and is_property_keyword(name):
                    names[name] = None
    return list(names)


def load_properties(
    deck: typing.Union[str, typing.Iterable[Record]],
    config: typing.Optional[Config] = None,
) -> GridProperties:
    """
    Build grid properties from a deck.

    Creates every registered property the deck mentions with its default
    value, then applies all records in one pass.

    :param deck: Deck text, or records already read from one
    :param config: Processing configuration
    :return: The resulting properties
    :raises KeywordError: If a record cannot be applied.
    """
    records = read_deck(deck) if isinstance(deck, str) else list(deck)
    extent = find_extent(records)
    properties = GridProperties.from_keywords(extent, referenced_properties(records))
    KeywordProcessor(properties, config=config).process(records)
    return properties


def load_properties_file(
    path: typing.Union[str, PathLike],
    config: typing.Optional[Config] = None,
    encoding: str = "utf-8",
) -> GridProperties:
    """Build grid properties from a deck file. See `load_properties`."""
    return load_properties(read_deck_file(path, encoding=encoding), config=config)
