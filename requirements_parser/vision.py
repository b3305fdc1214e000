"""Vision-model transcription for PDFs without a usable text layer."""

from requirements_parser.client import GeminiClient
from requirements_parser.logger import Timer, get_logger
from requirements_parser.prompts import VISION_TRANSCRIPTION_PROMPT

logger = get_logger(__name__)


class GeminiVisionExtractor:
    """Transcribes a whole PDF with a multimodal model.

    The reply marks page boundaries with ``PAGE_BREAK_MARKER``; splitting is
    left to the orchestrator. Failures surface as classified ``ModelCallError``.
    """

    def __init__(self, client: GeminiClient, instruction: str = VISION_TRANSCRIPTION_PROMPT):
        self.client = client
        self.instruction = instruction

    def transcribe(self, file_bytes: bytes, file_name: str = "unknown.pdf") -> str:
        logger.info(
            "Sending PDF to vision model",
            extra_data={"file_name": file_name, "file_size_bytes": len(file_bytes)},
        )

        with Timer("vision_transcription") as timer:
            text = self.client.generate_from_pdf(file_bytes, self.instruction)

        logger.info(
            "Vision transcription completed",
            extra_data={
                "file_name": file_name,
                "characters_extracted": len(text),
                "transcription_time_ms": timer.get_elapsed_ms(),
            },
        )
        return text
