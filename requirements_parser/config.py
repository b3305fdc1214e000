"""Configuration classes for requirements parser."""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_COLUMN_DELIMITER = r"\s{2,}|\t"


@dataclass
class ExtractorConfig:
    """Configuration for text acquisition and heuristic extraction.

    Examples:
        >>> # Default configuration
        >>> config = ExtractorConfig()

        >>> # Stricter density check, markdown output from the text layer
        >>> config = ExtractorConfig(japanese_char_threshold=200, native_format="markdown")
    """

    japanese_char_threshold: int = 50
    """Minimum number of Japanese-script characters in the native text layer
    for the native result to be accepted. Below this, the vision fallback runs.

    This is a raw count, not a ratio: a long document with little Japanese text
    still passes once it contains this many characters anywhere.
    """

    column_delimiter: str = DEFAULT_COLUMN_DELIMITER
    """Regular expression separating cells of appendix table rows.
    Default: two or more whitespace characters, or a tab."""

    max_workers: int = 3
    """Number of documents extracted in parallel by ``extract_many``."""

    native_format: str = "text"
    """Native extraction output format.

    - "text": plain text layer via PyMuPDF (default)
    - "markdown": pymupdf4llm markdown, keeps table layout as markdown tables
    """

    table_strategy: str = "lines_strict"
    """pymupdf4llm table detection strategy (markdown format only)."""

    fontsize_limit: int = 3
    """Ignore text smaller than this point size (markdown format only)."""

    force_text: bool = True
    """Extract text even over images (markdown format only)."""


@dataclass
class GeminiConfig:
    """Configuration for the hosted Gemini model."""

    api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    vision_model: Optional[str] = None
    """Model used for the vision fallback. If None, ``model`` is used."""
    temperature: float = 0.0

    @property
    def effective_vision_model(self) -> str:
        return self.vision_model or self.model

    @classmethod
    def from_env(cls) -> "GeminiConfig":
        """Build configuration from ``GEMINI_API_KEY``/``GOOGLE_API_KEY`` and ``GEMINI_MODEL``."""
        api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        model = os.environ.get("GEMINI_MODEL") or cls.model
        return cls(
            api_key=api_key,
            model=model,
            vision_model=os.environ.get("GEMINI_VISION_MODEL") or None,
        )


@dataclass
class WorkbookOptions:
    """Which optional sheets the workbook writer emits."""

    include_formulas: bool = True
    include_tables: bool = True
    include_notes: bool = True
    creator: str = "RD-System"
