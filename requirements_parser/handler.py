"""Extraction orchestration: native text layer first, vision model as fallback."""

import contextvars
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Sequence

from requirements_parser.config import ExtractorConfig
from requirements_parser.detector import DocumentDetector
from requirements_parser.exceptions import FallbackUnavailableError
from requirements_parser.extractor import PyMuPDFTextExtractor
from requirements_parser.logger import Timer, document_context, get_logger
from requirements_parser.models import (
    DocumentMetadata,
    ExtractionMethod,
    NativeExtractionResult,
    ParsedDocument,
)
from requirements_parser.prompts import PAGE_BREAK_MARKER
from requirements_parser.text import count_japanese_chars
from requirements_parser.vision import GeminiVisionExtractor

logger = get_logger(__name__)

# "- 12 -" page footers left in the text layer, padded with ASCII or full-width spaces
NATIVE_PAGE_BREAK_PATTERN = re.compile(r"\n\s*-\s*[0-9]+\s*-\s*\n")


def split_native_pages(text: str) -> list[str]:
    return [page for page in NATIVE_PAGE_BREAK_PATTERN.split(text) if page.strip()]


def split_vision_pages(text: str) -> list[str]:
    return [page for page in text.split(PAGE_BREAK_MARKER) if page.strip()]


def select_method(japanese_char_count: int, threshold: int) -> ExtractionMethod:
    """Decide which path owns the document, given the native pass's density."""
    if japanese_char_count >= threshold:
        return ExtractionMethod.NATIVE
    return ExtractionMethod.VISION_FALLBACK


class ExtractionOrchestrator:
    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        detector: Optional[DocumentDetector] = None,
        native_extractor: Optional[PyMuPDFTextExtractor] = None,
        vision_extractor: Optional[GeminiVisionExtractor] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Extraction configuration. If None, uses defaults.
            detector: PDF signature check. If None, creates default.
            native_extractor: Text-layer extractor. If None, creates default with config.
            vision_extractor: Fallback transcriber. If None, documents that need
                the fallback raise FallbackUnavailableError.
        """
        self.config = config or ExtractorConfig()
        self.detector = detector or DocumentDetector()
        self.native_extractor = native_extractor or PyMuPDFTextExtractor(config=self.config)
        self.vision_extractor = vision_extractor

    def extract(self, file_bytes: bytes, file_name: str = "unknown.pdf") -> ParsedDocument:
        """Extract one PDF into a ParsedDocument.

        Raises:
            UnsupportedTypeError: If the bytes are not a PDF
            ExtractionError: If the text layer cannot be read
            FallbackUnavailableError: If the fallback is needed but not configured
            ModelCallError: If the vision fallback call fails
        """
        with document_context(file_name):
            return self._extract(file_bytes, file_name)

    def _extract(self, file_bytes: bytes, file_name: str) -> ParsedDocument:
        self.detector.detect(file_bytes, file_name)

        with Timer("document_extraction") as timer:
            native = self.native_extractor.extract(file_bytes, file_name)
            japanese_chars = count_japanese_chars(native.text)
            method = select_method(japanese_chars, self.config.japanese_char_threshold)

            logger.info(
                "Native text density measured",
                extra_data={
                    "file_name": file_name,
                    "japanese_chars": japanese_chars,
                    "threshold": self.config.japanese_char_threshold,
                    "selected_method": method.value,
                },
            )

            if method is ExtractionMethod.NATIVE:
                document = self._accept_native(native, file_name, japanese_chars)
            else:
                document = self._run_fallback(file_bytes, native, file_name, japanese_chars)

        logger.info(
            "Document extraction completed",
            extra_data={
                "file_name": file_name,
                "extraction_method": document.extraction_method.value,
                "page_count": document.metadata.page_count,
                "pages_split": len(document.pages),
                "character_count": len(document.raw_text),
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return document

    def extract_many(self, documents: Sequence[tuple[str, bytes]]) -> list[ParsedDocument]:
        """Extract several PDFs in parallel.

        Args:
            documents: ``(file_name, file_bytes)`` pairs

        Returns:
            ParsedDocuments in the order of ``documents``, once all have finished.
            The first failure is re-raised.
        """
        if not documents:
            return []

        logger.debug(
            "Starting parallel document extraction",
            extra_data={
                "document_count": len(documents),
                "max_workers": self.config.max_workers,
            },
        )

        results: dict[int, ParsedDocument] = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            # Workers run in a copy of the caller's context (request ID)
            future_to_index = {
                executor.submit(
                    contextvars.copy_context().run, self.extract, file_bytes, file_name
                ): index
                for index, (file_name, file_bytes) in enumerate(documents)
            }
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()

        return [results[index] for index in range(len(documents))]

    def _accept_native(
        self, native: NativeExtractionResult, file_name: str, japanese_chars: int
    ) -> ParsedDocument:
        return ParsedDocument(
            raw_text=native.text,
            pages=split_native_pages(native.text),
            metadata=DocumentMetadata(
                page_count=native.page_count, title=native.title, author=native.author
            ),
            extraction_method=ExtractionMethod.NATIVE,
            file_name=file_name,
            japanese_char_count=japanese_chars,
        )

    def _run_fallback(
        self,
        file_bytes: bytes,
        native: NativeExtractionResult,
        file_name: str,
        japanese_chars: int,
    ) -> ParsedDocument:
        if self.vision_extractor is None:
            logger.error(
                "Vision fallback required but not configured",
                extra_data={"file_name": file_name, "japanese_chars": japanese_chars},
            )
            raise FallbackUnavailableError(
                f"{file_name}: text layer has too little Japanese text "
                f"({japanese_chars} characters) and no vision extractor is configured"
            )

        logger.info(
            "Triggering vision fallback for PDF",
            extra_data={
                "file_name": file_name,
                "native_characters": len(native.text),
                "page_count": native.page_count,
            },
        )

        text = self.vision_extractor.transcribe(file_bytes, file_name)

        # The model does not report page counts reliably; the native pass does
        return ParsedDocument(
            raw_text=text,
            pages=split_vision_pages(text),
            metadata=DocumentMetadata(
                page_count=native.page_count, title=native.title, author=native.author
            ),
            extraction_method=ExtractionMethod.VISION_FALLBACK,
            file_name=file_name,
            japanese_char_count=japanese_chars,
        )
