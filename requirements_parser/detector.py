"""PDF signature validation."""

from requirements_parser.exceptions import UnsupportedTypeError
from requirements_parser.logger import get_logger

logger = get_logger(__name__)

PDF_SIGNATURE = b"%PDF"
PDF_MIME_TYPE = "application/pdf"

# Some producers emit a BOM or whitespace before the header
SIGNATURE_SEARCH_WINDOW = 1024


class DocumentDetector:
    """Checks that uploaded bytes are a PDF before any extraction runs."""

    def detect(self, file_bytes: bytes, file_name: str) -> str:
        """Return the MIME type of ``file_bytes``.

        Raises:
            UnsupportedTypeError: If the bytes are empty or carry no PDF signature
        """
        if not file_bytes:
            logger.warning("Empty document received", extra_data={"file_name": file_name})
            raise UnsupportedTypeError(f"Empty file: {file_name}")

        if PDF_SIGNATURE not in file_bytes[:SIGNATURE_SEARCH_WINDOW]:
            logger.warning(
                "Document is not a PDF",
                extra_data={
                    "file_name": file_name,
                    "file_size_bytes": len(file_bytes),
                    "leading_bytes": file_bytes[:8].hex(),
                },
            )
            raise UnsupportedTypeError(f"Unsupported mime type for {file_name}: only PDF is accepted")

        logger.debug(
            "Document type detected",
            extra_data={"file_name": file_name, "mime_type": PDF_MIME_TYPE},
        )
        return PDF_MIME_TYPE
