"""XML token access for daeparse."""

from .reader import ElementReader
from .tokens import ExpatTokenSource, Token, TokenSource, TokenType

__all__ = [
    "ElementReader",
    "ExpatTokenSource",
    "Token",
    "TokenSource",
    "TokenType",
]
