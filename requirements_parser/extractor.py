"""PyMuPDF-based native text-layer extractor."""

from typing import Optional

import fitz  # PyMuPDF
import pymupdf4llm

from requirements_parser.config import ExtractorConfig
from requirements_parser.exceptions import ExtractionError
from requirements_parser.logger import Timer, get_logger
from requirements_parser.models import NativeExtractionResult

logger = get_logger(__name__)

# Pages are joined the way common PDF text-layer tools join them
PAGE_JOINER = "\n\n"


class PyMuPDFTextExtractor:
    """Reads the embedded text layer of a PDF.

    No OCR happens here: a scanned PDF yields little or no text, which is what
    the orchestrator's density check relies on.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()

        if self.config.native_format not in ("text", "markdown"):
            raise ValueError(f"Unsupported native_format: {self.config.native_format}")

    def extract(self, file_bytes: bytes, file_name: str = "unknown.pdf") -> NativeExtractionResult:
        """Extract text, page count and metadata.

        Args:
            file_bytes: Raw PDF bytes
            file_name: Original filename, for logging

        Returns:
            NativeExtractionResult

        Raises:
            ExtractionError: If the PDF is corrupt, encrypted or unreadable
        """
        logger.debug(
            "Starting native text extraction",
            extra_data={
                "file_name": file_name,
                "file_size_bytes": len(file_bytes),
                "native_format": self.config.native_format,
            },
        )

        try:
            with Timer("pdf_native_extraction") as timer:
                with fitz.open(stream=file_bytes, filetype="pdf") as pdf_document:
                    if pdf_document.needs_pass:
                        raise ExtractionError("PDF is encrypted and cannot be read")

                    if self.config.native_format == "markdown":
                        text = self._extract_markdown(pdf_document)
                    else:
                        text = PAGE_JOINER.join(page.get_text("text") for page in pdf_document)

                    metadata = pdf_document.metadata or {}
                    result = NativeExtractionResult(
                        text=text,
                        page_count=pdf_document.page_count,
                        title=metadata.get("title") or None,
                        author=metadata.get("author") or None,
                    )
        except ExtractionError:
            logger.error(
                "Native extraction refused encrypted PDF",
                extra_data={"file_name": file_name},
            )
            raise
        except Exception as exc:
            logger.error(
                "Native extraction failed",
                extra_data={
                    "file_name": file_name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )
            raise ExtractionError(f"Failed to extract PDF text: {exc}") from exc

        logger.debug(
            "Native text extraction completed",
            extra_data={
                "file_name": file_name,
                "characters_extracted": len(result.text),
                "page_count": result.page_count,
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return result

    def _extract_markdown(self, pdf_document: "fitz.Document") -> str:
        # Table layout survives as markdown tables
        return pymupdf4llm.to_markdown(
            pdf_document,
            table_strategy=self.config.table_strategy,
            force_text=self.config.force_text,
            write_images=False,
            ignore_images=True,
            fontsize_limit=self.config.fontsize_limit,
        )
