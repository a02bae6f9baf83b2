"""Configuration for the COLLADA structural parser.

Configuration can be loaded from JSON files or constructed programmatically.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field


class ParserConfig(BaseModel):
    """Parser limits and strictness switches."""

    max_depth: int = Field(
        default=256,
        ge=1,
        le=900,
        description="Deepest <node> nesting accepted before aborting",
    )
    strict_array_count: bool = Field(
        default=False,
        description="Treat a float_array count mismatch as an error instead of a warning",
    )
    chunk_size: int = Field(
        default=64 * 1024,
        ge=1,
        description="Bytes fed to the XML tokenizer per read",
    )

    @classmethod
    def from_file(cls, path: Path | str) -> ParserConfig:
        """Load configuration from a JSON file."""
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def default(cls) -> ParserConfig:
        """Create a default configuration."""
        return cls()
