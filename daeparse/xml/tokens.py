"""Forward-only XML token stream.

The parser only needs a handful of operations from its XML source: advance,
the kind and name of the current node, attribute lookup and text retrieval.
``TokenSource`` spells that contract out; ``ExpatTokenSource`` implements it
on top of the expat parser that also backs ``xml.etree``.
"""

from __future__ import annotations

import io
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Protocol
from xml.parsers import expat

from ..core.errors import MalformedDocumentError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Kind of the token the source is positioned on."""

    NONE = "none"
    ELEMENT = "element"
    ELEMENT_END = "element_end"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    """A single event of the XML stream."""

    type: TokenType
    name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    line: int | None = None


class TokenSource(Protocol):
    """Sequential XML token stream consumed by ``ElementReader``."""

    file_name: str

    def read(self) -> bool:
        """Advance to the next token. Returns False at end of input."""
        ...

    @property
    def node_type(self) -> TokenType: ...

    @property
    def node_name(self) -> str: ...

    @property
    def text(self) -> str: ...

    @property
    def line_number(self) -> int | None: ...

    def get_attribute(self, name: str) -> str | None: ...


_END = Token(TokenType.NONE)


class ExpatTokenSource:
    """Token source backed by ``xml.parsers.expat``.

    Input is fed in chunks so large documents never need to be held in memory
    as a whole. Consecutive character data is merged into one text token and
    whitespace-only text is dropped. Self-closing elements produce both an
    ELEMENT and an ELEMENT_END token.
    """

    def __init__(
        self,
        stream: IO[bytes] | IO[str],
        file_name: str = "<stream>",
        chunk_size: int = 64 * 1024,
    ):
        self.file_name = file_name
        self._stream = stream
        self._chunk_size = chunk_size
        self._queue: deque[Token] = deque()
        self._current = _END
        self._finished = False

        self._pending_text: list[str] = []
        self._pending_line: int | None = None

        self._parser = expat.ParserCreate()
        self._parser.StartElementHandler = self._on_start
        self._parser.EndElementHandler = self._on_end
        self._parser.CharacterDataHandler = self._on_text

    @classmethod
    def from_string(
        cls,
        text: str | bytes,
        file_name: str = "<string>",
        chunk_size: int = 64 * 1024,
    ) -> ExpatTokenSource:
        """Create a token source over an in-memory document."""
        if isinstance(text, str):
            text = text.encode("utf-8")
        return cls(io.BytesIO(text), file_name=file_name, chunk_size=chunk_size)

    # -- expat callbacks -------------------------------------------------

    def _line(self) -> int:
        return self._parser.CurrentLineNumber

    def _flush_text(self) -> None:
        if not self._pending_text:
            return
        text = "".join(self._pending_text)
        if text.strip():
            self._queue.append(
                Token(TokenType.TEXT, text=text, line=self._pending_line)
            )
        self._pending_text = []
        self._pending_line = None

    def _on_start(self, name: str, attributes: dict[str, str]) -> None:
        self._flush_text()
        self._queue.append(
            Token(TokenType.ELEMENT, name=name, attributes=attributes, line=self._line())
        )

    def _on_end(self, name: str) -> None:
        self._flush_text()
        self._queue.append(Token(TokenType.ELEMENT_END, name=name, line=self._line()))

    def _on_text(self, data: str) -> None:
        if not self._pending_text:
            self._pending_line = self._line()
        self._pending_text.append(data)

    # -- TokenSource -----------------------------------------------------

    def _feed(self) -> None:
        data = self._stream.read(self._chunk_size)
        final = not data
        try:
            self._parser.Parse(data, final)
        except expat.ExpatError as e:
            raise MalformedDocumentError(
                expat.ErrorString(e.code), self.file_name, e.lineno
            ) from e
        if final:
            self._flush_text()
            self._finished = True
            logger.debug("Reached end of %s", self.file_name)

    def read(self) -> bool:
        while not self._queue:
            if self._finished:
                self._current = _END
                return False
            self._feed()
        self._current = self._queue.popleft()
        return True

    @property
    def node_type(self) -> TokenType:
        return self._current.type

    @property
    def node_name(self) -> str:
        return self._current.name

    @property
    def text(self) -> str:
        return self._current.text

    @property
    def line_number(self) -> int | None:
        if self._current.line is not None:
            return self._current.line
        return self._parser.CurrentLineNumber

    def get_attribute(self, name: str) -> str | None:
        return self._current.attributes.get(name)

    def __repr__(self) -> str:
        return f"ExpatTokenSource({self.file_name}, at={self._current.type.value})"
