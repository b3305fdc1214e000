"""Structured requirements extraction through the hosted model."""

import json
import re
from typing import Iterator, Optional, Sequence

from requirements_parser.client import GeminiClient
from requirements_parser.exceptions import ResponseParseError
from requirements_parser.logger import Timer, get_logger
from requirements_parser.models import AIExtractedRequirements, ParsedDocument
from requirements_parser.prompts import build_extraction_prompt

logger = get_logger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def combine_documents(documents: Sequence[tuple[str, str]]) -> str:
    """Join ``(file_name, text)`` pairs into one text with a header per file."""
    return "\n".join(f"\n\n=== {file_name} ===\n\n{text}" for file_name, text in documents)


def _matching_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escape = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escape:
                escape = False
            elif char == "\\":
                escape = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _candidate_objects(text: str) -> Iterator[str]:
    """Yield each balanced ``{...}`` span, scanning from every opening brace."""
    start = text.find("{")
    while start != -1:
        end = _matching_brace(text, start)
        if end is not None:
            yield text[start : end + 1]
        start = text.find("{", start + 1)


def parse_requirements_response(reply: str) -> AIExtractedRequirements:
    """Pull the first JSON object out of a model reply.

    Fenced code blocks are searched before the whole reply, and every balanced
    ``{...}`` span is tried in order until one decodes to an object.

    Raises:
        ResponseParseError: If the reply holds no JSON object or none is valid
    """
    sources = [match.group(1) for match in CODE_BLOCK_PATTERN.finditer(reply)] + [reply]

    last_error: Optional[json.JSONDecodeError] = None
    for source in sources:
        for candidate in _candidate_objects(source):
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError as exc:
                last_error = exc
                continue
            if isinstance(data, dict):
                return AIExtractedRequirements.from_dict(data)

    if last_error is not None:
        raise ResponseParseError(f"JSON解析エラー: {last_error}") from last_error
    raise ResponseParseError("AIからの応答をJSONとして解析できませんでした")


class AIRequirementsExtractor:
    """Asks the model for the full requirements model of one or more documents."""

    def __init__(self, client: GeminiClient):
        self.client = client

    def extract(self, text: str) -> AIExtractedRequirements:
        """Extract requirements from document text.

        Raises:
            ModelCallError: If the model call fails
            ResponseParseError: If the reply is not valid JSON
        """
        with Timer("ai_extraction") as timer:
            reply = self.client.generate_text(build_extraction_prompt(text))

        try:
            requirements = parse_requirements_response(reply)
        except ResponseParseError:
            logger.error(
                "Model reply could not be parsed",
                extra_data={"reply_characters": len(reply), "reply_head": reply[:80]},
            )
            raise

        logger.info(
            "AI extraction completed",
            extra_data={
                "input_characters": len(text),
                "input_categories": len(requirements.input_items),
                "calculation_rules": len(requirements.calculation_rules),
                "fee_categories": len(requirements.fee_structure),
                "tables": len(requirements.tables),
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return requirements

    def extract_many(self, documents: Sequence[ParsedDocument]) -> AIExtractedRequirements:
        """Extract requirements from several documents with a single model call."""
        if len(documents) == 1:
            return self.extract(documents[0].raw_text)

        combined = combine_documents([(doc.file_name, doc.raw_text) for doc in documents])
        logger.debug(
            "Combined documents for extraction",
            extra_data={"document_count": len(documents), "character_count": len(combined)},
        )
        return self.extract(combined)
