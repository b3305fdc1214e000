"""High-level API for requirements extraction."""

from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from requirements_parser.ai_extractor import AIRequirementsExtractor
from requirements_parser.client import GeminiClient
from requirements_parser.config import ExtractorConfig, GeminiConfig, WorkbookOptions
from requirements_parser.handler import ExtractionOrchestrator
from requirements_parser.heuristics import combine_requirements
from requirements_parser.heuristics import extract_requirements as extract_heuristic_requirements
from requirements_parser.logger import get_logger, set_request_id
from requirements_parser.models import AIExtractedRequirements, ExtractedRequirements, ParsedDocument
from requirements_parser.vision import GeminiVisionExtractor
from requirements_parser.workbook import RequirementsWorkbookWriter

logger = get_logger(__name__)


def _load(
    file_path: Optional[str], file_bytes: Optional[bytes], file_name: Optional[str]
) -> tuple[str, bytes]:
    if file_path and file_bytes:
        raise ValueError("Provide either file_path or file_bytes, not both")

    if not file_path and not file_bytes:
        raise ValueError("Must provide either file_path or file_bytes")

    if file_path:
        path = Path(file_path)
        if not path.exists():
            raise ValueError(f"File not found: {file_path}")
        return path.name, path.read_bytes()

    if not file_name:
        raise ValueError("file_name is required when using file_bytes")
    return file_name, file_bytes


def parse_pdf(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    config: Optional[ExtractorConfig] = None,
    client: Optional[GeminiClient] = None,
) -> ParsedDocument:
    """Extract the text of a PDF.

    Accepts either a file path or raw bytes. Without a ``client``, documents
    that need the vision fallback raise FallbackUnavailableError.

    Args:
        file_path: Path to PDF file (alternative to file_bytes)
        file_bytes: Raw PDF bytes (alternative to file_path)
        file_name: Original filename (required if using file_bytes)
        config: Extraction configuration (optional)
        client: Gemini client used for the vision fallback (optional)

    Returns:
        ParsedDocument with text, pages, metadata and extraction method

    Raises:
        ValueError: If the inputs are inconsistent
        UnsupportedTypeError: If the file is not a PDF
        ExtractionError: If text extraction fails
        ModelCallError: If the vision fallback call fails

    Examples:
        >>> document = parse_pdf(file_path="社宅規程.pdf")
        >>> document.extraction_method
        <ExtractionMethod.NATIVE: 'native'>
    """
    name, data = _load(file_path, file_bytes, file_name)
    set_request_id()

    vision = GeminiVisionExtractor(client) if client else None
    orchestrator = ExtractionOrchestrator(config=config, vision_extractor=vision)
    return orchestrator.extract(data, name)


def extract_requirements(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    config: Optional[ExtractorConfig] = None,
    client: Optional[GeminiClient] = None,
) -> ExtractedRequirements:
    """Extract a PDF and run the heuristic pattern scans over its text."""
    document = parse_pdf(
        file_path=file_path,
        file_bytes=file_bytes,
        file_name=file_name,
        config=config,
        client=client,
    )
    return extract_heuristic_requirements(document.raw_text, config=config)


def preview_requirements(
    documents: Sequence[tuple[str, bytes]],
    client: Optional[GeminiClient] = None,
    gemini_config: Optional[GeminiConfig] = None,
    config: Optional[ExtractorConfig] = None,
) -> AIExtractedRequirements:
    """Extract the structured requirements model of one or more PDFs.

    Args:
        documents: ``(file_name, file_bytes)`` pairs
        client: Gemini client. If None, one is built from ``gemini_config``
            (or the environment); a missing API key fails here, before any work.
        gemini_config: Used only when ``client`` is None
        config: Extraction configuration (optional)

    Raises:
        ValueError: If no documents are given
        ConfigurationError: If no API key is configured
        ModelCallError: If a model call fails
        ResponseParseError: If the model reply is not valid JSON
    """
    if not documents:
        raise ValueError("At least one PDF document is required")

    client = client or GeminiClient(gemini_config)
    set_request_id()

    logger.info("Processing PDF documents", extra_data={"document_count": len(documents)})

    orchestrator = ExtractionOrchestrator(
        config=config, vision_extractor=GeminiVisionExtractor(client)
    )
    parsed = orchestrator.extract_many(documents)

    return AIRequirementsExtractor(client).extract_many(parsed)


def generate_requirements_workbook(
    documents: Sequence[tuple[str, bytes]],
    client: Optional[GeminiClient] = None,
    gemini_config: Optional[GeminiConfig] = None,
    config: Optional[ExtractorConfig] = None,
    options: Optional[WorkbookOptions] = None,
    today: Optional[date] = None,
) -> bytes:
    """Extract requirements from PDFs and render them as an .xlsx workbook.

    Returns:
        Workbook bytes; see ``default_workbook_name`` for a download name.
    """
    requirements = preview_requirements(
        documents, client=client, gemini_config=gemini_config, config=config
    )
    return RequirementsWorkbookWriter(options).render(requirements, today=today)


def generate_heuristic_workbook(
    documents: Sequence[tuple[str, bytes]],
    config: Optional[ExtractorConfig] = None,
    options: Optional[WorkbookOptions] = None,
    client: Optional[GeminiClient] = None,
    today: Optional[date] = None,
) -> bytes:
    """Render a workbook from the heuristic scans alone, without the structured model call."""
    if not documents:
        raise ValueError("At least one PDF document is required")

    set_request_id()
    vision = GeminiVisionExtractor(client) if client else None
    orchestrator = ExtractionOrchestrator(config=config, vision_extractor=vision)
    parsed = orchestrator.extract_many(documents)

    # Scanned one document at a time so no appendix runs into the next file
    requirements = combine_requirements(
        [extract_heuristic_requirements(document.raw_text, config=config) for document in parsed]
    )
    return RequirementsWorkbookWriter(options).render(requirements.to_structured(), today=today)
