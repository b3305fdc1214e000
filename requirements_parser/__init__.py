"""Requirements extraction from Japanese regulation PDFs."""

from requirements_parser.ai_extractor import AIRequirementsExtractor
from requirements_parser.client import GeminiClient, classify_model_error
from requirements_parser.config import ExtractorConfig, GeminiConfig, WorkbookOptions
from requirements_parser.detector import DocumentDetector
from requirements_parser.exceptions import (
    ConfigurationError,
    ErrorKind,
    ExtractionError,
    FallbackUnavailableError,
    ModelCallError,
    RequirementsParserError,
    ResponseParseError,
    UnsupportedTypeError,
)
from requirements_parser.extractor import PyMuPDFTextExtractor
from requirements_parser.formula import extract_variables, translate_formula
from requirements_parser.handler import ExtractionOrchestrator
from requirements_parser.heuristics import (
    extract_definitions,
    extract_fees,
    extract_formulas,
    extract_tables,
)
from requirements_parser.logger import set_request_id, setup_logging
from requirements_parser.models import (
    AIExtractedRequirements,
    CalculationFormula,
    DocumentMetadata,
    ExtractedRequirements,
    ExtractionMethod,
    FeeItem,
    ParsedDocument,
    RequirementItem,
    TableData,
)
from requirements_parser.parser import (
    extract_requirements,
    generate_heuristic_workbook,
    generate_requirements_workbook,
    parse_pdf,
    preview_requirements,
)
from requirements_parser.text import count_japanese_chars
from requirements_parser.vision import GeminiVisionExtractor
from requirements_parser.workbook import XLSX_MIME_TYPE, RequirementsWorkbookWriter, default_workbook_name

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "parse_pdf",
    "extract_requirements",
    "preview_requirements",
    "generate_requirements_workbook",
    "generate_heuristic_workbook",
    "default_workbook_name",
    "XLSX_MIME_TYPE",
    "setup_logging",
    "set_request_id",
    # Core classes
    "ExtractionOrchestrator",
    "PyMuPDFTextExtractor",
    "GeminiVisionExtractor",
    "GeminiClient",
    "AIRequirementsExtractor",
    "RequirementsWorkbookWriter",
    "DocumentDetector",
    # Heuristics
    "extract_definitions",
    "extract_formulas",
    "extract_fees",
    "extract_tables",
    "translate_formula",
    "extract_variables",
    "count_japanese_chars",
    "classify_model_error",
    # Data models
    "ParsedDocument",
    "DocumentMetadata",
    "ExtractionMethod",
    "RequirementItem",
    "CalculationFormula",
    "FeeItem",
    "TableData",
    "ExtractedRequirements",
    "AIExtractedRequirements",
    # Configuration
    "ExtractorConfig",
    "GeminiConfig",
    "WorkbookOptions",
    # Exceptions
    "RequirementsParserError",
    "UnsupportedTypeError",
    "ExtractionError",
    "FallbackUnavailableError",
    "ConfigurationError",
    "ModelCallError",
    "ErrorKind",
    "ResponseParseError",
]
