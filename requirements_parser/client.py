"""Gemini client wrapper with failure classification."""

import socket
import ssl
from typing import Any, Iterator, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from requirements_parser.config import GeminiConfig
from requirements_parser.exceptions import ConfigurationError, ErrorKind, ModelCallError
from requirements_parser.logger import Timer, get_logger

logger = get_logger(__name__)

GEMINI_DOMAIN = "generativelanguage.googleapis.com"

MISSING_KEY_MESSAGE = "GEMINI_API_KEY または GOOGLE_API_KEY 環境変数を設定してください"

# Matched against the lower-cased message
TIMEOUT_MARKERS = ("timeout", "timed out", "deadline", "etimedout", "aborterror")
TLS_MARKERS = ("SSL", "TLS", "CERT_")
CONNECTIVITY_MARKERS = (
    "ECONNREFUSED",
    "ENOTFOUND",
    "getaddrinfo",
    "Name or service not known",
    "nodename nor servname",
    "Connection refused",
    "fetch failed",
)
RATE_LIMIT_MARKERS = ("quota", "RESOURCE_EXHAUSTED", "rate limit", "Rate limit")


class GeminiClient:
    """Hosted model client, constructed once and passed to whoever needs it.

    Construction fails immediately when no API key is configured, so a
    misconfigured deployment is caught at startup rather than on the first
    upload.
    """

    def __init__(self, config: Optional[GeminiConfig] = None, client: Any = None):
        """Initialize the client.

        Args:
            config: Gemini configuration. If None, read from the environment.
            client: Pre-built ``genai.Client`` (or compatible object). If None, one is created.

        Raises:
            ConfigurationError: If no API key is available
        """
        self.config = config or GeminiConfig.from_env()
        if not self.config.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        self._client = client or genai.Client(api_key=self.config.api_key)

        logger.info(
            "Initialized Gemini client",
            extra_data={
                "model": self.config.model,
                "vision_model": self.config.effective_vision_model,
            },
        )

    def generate_text(self, prompt: str, model: Optional[str] = None) -> str:
        """Send a text prompt and return the reply text."""
        return self._generate([prompt], model or self.config.model, operation="generate_text")

    def generate_from_pdf(self, pdf_bytes: bytes, instruction: str, model: Optional[str] = None) -> str:
        """Send a PDF as inline data together with ``instruction``.

        The SDK transmits the inline bytes base64-encoded.
        """
        contents = [
            types.Part.from_bytes(data=pdf_bytes, mime_type="application/pdf"),
            instruction,
        ]
        return self._generate(
            contents, model or self.config.effective_vision_model, operation="generate_from_pdf"
        )

    def _generate(self, contents: list[Any], model: str, operation: str) -> str:
        try:
            with Timer(operation) as timer:
                response = self._client.models.generate_content(
                    model=model,
                    contents=contents,
                    config=types.GenerateContentConfig(temperature=self.config.temperature),
                )
        except Exception as exc:
            error = classify_model_error(exc)
            logger.error(
                "Gemini API call failed",
                extra_data={
                    "operation": operation,
                    "model": model,
                    "error_kind": error.kind.value,
                    "status": error.status,
                    "error_type": type(exc).__name__,
                },
            )
            raise error from exc

        text = response.text or ""
        logger.debug(
            "Gemini API call completed",
            extra_data={
                "operation": operation,
                "model": model,
                "characters_returned": len(text),
                "call_time_ms": timer.get_elapsed_ms(),
            },
        )
        return text


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _status_of(exc: BaseException) -> Optional[int]:
    if isinstance(exc, genai_errors.APIError):
        return exc.code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _code_of(exc: BaseException) -> Optional[str]:
    if isinstance(exc, genai_errors.APIError):
        return exc.status
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code
    errno = getattr(exc, "errno", None)
    if errno is not None:
        return str(errno)
    return None


def _contains(message: str, markers: tuple[str, ...]) -> bool:
    return any(marker in message for marker in markers)


def classify_model_error(exc: BaseException) -> ModelCallError:
    """Map a failed model call onto an ErrorKind with an operator-facing diagnostic.

    Timeouts are checked before TLS and TLS before connectivity: httpx reports
    certificate failures as connect errors.
    """
    chain = list(_exception_chain(exc))
    message = str(exc) or type(exc).__name__
    status = next((s for s in map(_status_of, chain) if s is not None), None)
    code = next((c for c in map(_code_of, chain) if c is not None), None)

    if any(isinstance(e, (httpx.TimeoutException, TimeoutError)) for e in chain) or _contains(
        message.lower(), TIMEOUT_MARKERS
    ):
        kind = ErrorKind.TIMEOUT
    elif (
        any(isinstance(e, ssl.SSLError) for e in chain)
        or "certificate" in message.lower()
        or _contains(message, TLS_MARKERS)
    ):
        kind = ErrorKind.TLS
    elif any(
        isinstance(e, (httpx.ConnectError, ConnectionError, socket.gaierror)) for e in chain
    ) or _contains(message, CONNECTIVITY_MARKERS):
        kind = ErrorKind.CONNECTIVITY
    elif status in (401, 403) or "API key" in message or "API_KEY" in message:
        kind = ErrorKind.AUTHENTICATION
    elif status == 429 or _contains(message, RATE_LIMIT_MARKERS):
        kind = ErrorKind.RATE_LIMIT
    elif status is not None and status >= 500:
        kind = ErrorKind.SERVER
    else:
        kind = ErrorKind.UNCLASSIFIED

    return ModelCallError(
        kind=kind,
        diagnostic=build_diagnostic(kind, message, status, code),
        status=status,
        code=code,
        raw_message=message,
    )


def build_diagnostic(
    kind: ErrorKind, message: str, status: Optional[int] = None, code: Optional[str] = None
) -> str:
    """Render the multi-line help-desk message for a classified failure."""
    status_text = str(status) if status is not None else "N/A"

    if kind is ErrorKind.CONNECTIVITY:
        lines = [
            "[Gemini API接続エラー] サーバーに接続できません。",
            "原因: ネットワーク制限またはファイアウォールでAPIアクセスがブロックされている可能性があります。",
            f"対象ドメイン: {GEMINI_DOMAIN}",
        ]
    elif kind is ErrorKind.TIMEOUT:
        lines = [
            "[Gemini API タイムアウト] APIリクエストがタイムアウトしました。",
            "原因: ネットワーク遅延またはプロキシ設定の問題の可能性があります。",
            f"対象ドメイン: {GEMINI_DOMAIN}",
        ]
    elif kind is ErrorKind.TLS:
        lines = [
            "[Gemini API SSL/TLSエラー] セキュリティ証明書の問題が発生しました。",
            "原因: 企業プロキシによるSSLインスペクションの可能性があります。",
            f"対象ドメイン: {GEMINI_DOMAIN}",
        ]
    elif kind is ErrorKind.AUTHENTICATION:
        lines = [
            "[Gemini API 認証エラー] APIキーが無効または権限がありません。",
            "原因: APIキーが未設定、誤り、または失効している可能性があります。",
            f"ステータス: {status_text}",
        ]
    elif kind is ErrorKind.RATE_LIMIT:
        lines = [
            "[Gemini API レート制限] APIの使用制限に達しました。",
            "しばらく待ってから再試行してください。",
            f"ステータス: {status_text}",
        ]
    elif kind is ErrorKind.SERVER:
        lines = [
            "[Gemini API サーバーエラー] Googleサーバー側でエラーが発生しました。",
            "原因: 提供元の障害です。利用者側での対処はできません。",
            f"ステータス: {status_text}",
        ]
    else:
        lines = [
            "[Gemini API エラー] AI処理中にエラーが発生しました。",
            f"コード: {code or 'N/A'}, ステータス: {status_text}",
        ]

    lines.append(f"詳細: {message}")
    return "\n".join(lines)
