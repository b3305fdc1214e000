"""Custom exceptions for requirements parser."""

from enum import Enum
from typing import Optional


class RequirementsParserError(Exception):
    """Base exception for requirements parser errors."""

    pass


class UnsupportedTypeError(RequirementsParserError):
    """Raised when the input is not a PDF document."""

    pass


class ExtractionError(RequirementsParserError):
    """Raised when text extraction fails."""

    pass


class FallbackUnavailableError(ExtractionError):
    """Raised when the vision fallback is required but no vision extractor is configured."""

    pass


class ConfigurationError(RequirementsParserError):
    """Raised when required configuration (e.g. API credentials) is missing."""

    pass


class ResponseParseError(RequirementsParserError):
    """Raised when a model response cannot be parsed as JSON."""

    pass


class ErrorKind(str, Enum):
    """Classification of hosted model call failures."""

    CONNECTIVITY = "connectivity"
    TIMEOUT = "timeout"
    TLS = "tls"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    UNCLASSIFIED = "unclassified"


class ModelCallError(RequirementsParserError):
    """Raised when a hosted model call fails.

    The message is a multi-line diagnostic meant for operators; ``kind``
    tells which remediation applies.
    """

    def __init__(
        self,
        kind: ErrorKind,
        diagnostic: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        raw_message: str = "",
    ):
        super().__init__(diagnostic)
        self.kind = kind
        self.diagnostic = diagnostic
        self.status = status
        self.code = code
        self.raw_message = raw_message
