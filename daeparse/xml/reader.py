"""Element-level reading primitives shared by every COLLADA section reader.

``ElementReader`` wraps a ``TokenSource`` and provides attribute lookup,
text extraction, closing-tag verification and unknown-element skipping.
Each section reader is entered positioned on its opening tag and must
return positioned on the matching closing tag.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, TypeVar

import numpy as np
from numpy.typing import NDArray

from ..core.errors import (
    ColladaError,
    MalformedDocumentError,
    MissingAttributeError,
    MissingContentError,
    NumericFormatError,
)
from .tokens import TokenSource, TokenType

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=ColladaError)

_SEPARATORS = re.compile(r"[\s,]+")


class ElementReader:
    """Primitive reader over a forward-only token stream."""

    def __init__(self, source: TokenSource):
        self.source = source

    @property
    def file_name(self) -> str:
        return self.source.file_name

    @property
    def name(self) -> str:
        """Name of the element the reader is positioned on."""
        return self.source.node_name

    def error(self, cls: type[E], message: str) -> E:
        """Build an error carrying the current file name and line."""
        return cls(message, self.source.file_name, self.source.line_number)

    def read(self) -> bool:
        """Advance to the next token."""
        return self.source.read()

    def is_element(self, name: str | None = None) -> bool:
        """Check whether the current token opens an element (optionally ``name``)."""
        if self.source.node_type is not TokenType.ELEMENT:
            return False
        return name is None or self.source.node_name == name

    def is_element_end(self, name: str | None = None) -> bool:
        """Check whether the current token closes an element (optionally ``name``)."""
        if self.source.node_type is not TokenType.ELEMENT_END:
            return False
        return name is None or self.source.node_name == name

    def require_attribute(self, name: str) -> str:
        """Return the value of a required attribute of the current element.

        Raises:
            MissingAttributeError: If the attribute is absent
        """
        value = self.source.get_attribute(name)
        if value is None:
            raise self.error(
                MissingAttributeError,
                f'Expected attribute "{name}" on <{self.source.node_name}> element',
            )
        return value

    def optional_attribute(self, name: str, default: str | None = None) -> str | None:
        """Return the value of an optional attribute, or ``default``."""
        value = self.source.get_attribute(name)
        return default if value is None else value

    def int_attribute(self, name: str, default: int | None = None) -> int:
        """Read an integer attribute; required when no default is given."""
        if default is None:
            raw = self.require_attribute(name)
        else:
            raw = self.optional_attribute(name)
            if raw is None:
                return default
        try:
            return int(raw)
        except ValueError:
            raise self.error(
                NumericFormatError,
                f'Attribute "{name}" of <{self.source.node_name}> is not an integer: {raw!r}',
            ) from None

    def text_content(self) -> str:
        """Return the text content of the current element.

        The reader must be positioned on the opening tag. Afterwards it is
        positioned on the text token; call ``verify_closing`` next.

        Raises:
            MissingContentError: If the element has no text
        """
        element = self.source.node_name
        if self.source.node_type is not TokenType.ELEMENT:
            raise self.error(MalformedDocumentError, "Expected opening element")
        if not self.source.read():
            raise self.error(
                MalformedDocumentError,
                f"Unexpected end of file while reading <{element}> contents",
            )
        if self.source.node_type is not TokenType.TEXT:
            raise self.error(
                MissingContentError, f"Expected text content in <{element}> element"
            )
        return self.source.text.lstrip()

    def optional_text_content(self) -> str | None:
        """Like ``text_content`` but returns None for an empty element.

        When None is returned the reader is already on the closing tag.
        """
        element = self.source.node_name
        if self.source.node_type is not TokenType.ELEMENT:
            raise self.error(MalformedDocumentError, "Expected opening element")
        if not self.source.read():
            raise self.error(
                MalformedDocumentError,
                f"Unexpected end of file while reading <{element}> contents",
            )
        if self.source.node_type is TokenType.TEXT:
            return self.source.text.lstrip()
        if self.is_element_end(element):
            return None
        raise self.error(
            MalformedDocumentError,
            f"Unexpected <{self.source.node_name}> inside <{element}> element",
        )

    def read_floats(
        self,
        arity: int | None = None,
        allow_empty: bool = False,
    ) -> NDArray[np.float64]:
        """Read the current element's text as whitespace/comma separated floats.

        Args:
            arity: Exact number of values expected, or None for any count
            allow_empty: Return an empty array for an element without text

        Raises:
            NumericFormatError: On a non-numeric token or a wrong value count
        """
        element = self.source.node_name
        if allow_empty:
            text = self.optional_text_content()
            if text is None:
                return np.empty(0, dtype=np.float64)
        else:
            text = self.text_content()

        tokens = [t for t in _SEPARATORS.split(text) if t]
        try:
            values = np.array([float(t) for t in tokens], dtype=np.float64)
        except ValueError as e:
            raise self.error(
                NumericFormatError, f"Invalid number in <{element}>: {e}"
            ) from None
        if arity is not None and len(values) != arity:
            raise self.error(
                NumericFormatError,
                f"<{element}> expects {arity} values, got {len(values)}",
            )
        return values

    def verify_closing(self, name: str) -> None:
        """Consume tokens up to the closing tag of ``name``.

        Only a single text token may precede the closing tag; anything else
        means the element boundary is not where it should be.

        Raises:
            MalformedDocumentError: If the next structural token is not </name>
        """
        if self.source.node_type is TokenType.ELEMENT_END:
            if self.source.node_name == name:
                return
            raise self.error(MalformedDocumentError, f"Expected end of <{name}> element")

        if not self.source.read():
            raise self.error(
                MalformedDocumentError,
                f"Unexpected end of file while reading end of <{name}> element",
            )
        if self.source.node_type is TokenType.TEXT:
            if not self.source.read():
                raise self.error(
                    MalformedDocumentError,
                    f"Unexpected end of file while reading end of <{name}> element",
                )

        if not self.is_element_end(name):
            raise self.error(MalformedDocumentError, f"Expected end of <{name}> element")

    def children(self, name: str) -> Iterator[str]:
        """Iterate over the child elements of the current element ``name``.

        Yields the name of each child while the reader is positioned on its
        opening tag. The consumer must leave the reader on that child's
        closing tag before asking for the next one. Iteration stops once
        ``</name>`` is reached.

        Raises:
            MalformedDocumentError: On end of file or a mismatched closing tag
        """
        while self.source.read():
            if self.source.node_type is TokenType.ELEMENT:
                yield self.source.node_name
            elif self.source.node_type is TokenType.ELEMENT_END:
                self.verify_closing(name)
                return

        raise self.error(
            MalformedDocumentError,
            f"Unexpected end of file inside <{name}> element",
        )

    def skip_element(self) -> None:
        """Discard the current element and everything nested inside it.

        Leaves the reader on the element's closing tag. Nesting is tracked
        with a counter, so depth is unbounded.
        """
        element = self.source.node_name
        logger.debug("Skipping <%s> at line %s", element, self.source.line_number)

        depth = 1
        while self.source.read():
            if self.source.node_type is TokenType.ELEMENT:
                depth += 1
            elif self.source.node_type is TokenType.ELEMENT_END:
                depth -= 1
                if depth == 0:
                    return

        raise self.error(
            MalformedDocumentError,
            f"Unexpected end of file while skipping <{element}> element",
        )
