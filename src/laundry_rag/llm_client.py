"""Completion client: asks the laundry-master persona via Ollama and
classifies every failure into the errors of :mod:`laundry_rag.errors`."""

import logging

import httpx
import ollama

from laundry_rag.config import LLMConfig
from laundry_rag.errors import (
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    RateLimitError,
    UpstreamError,
)
from laundry_rag.models import CompletionResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "너는 30년 경력의 세탁 장인이다. 세탁, 얼룩 제거, 의류 소재 관리에 "
    "대해 전문가로서 솔직하게 답한다.\n\n"
    "## 응답 규칙\n"
    "1. 집에서 해결할 수 있는 것과 없는 것을 분명히 나눠서 말해라.\n"
    "2. 성공 확률을 숫자로 밝혀라 (예: \"이 경우 성공률은 30~40% 정도입니다\").\n"
    "3. 집에서 시도할 때의 위험을 반드시 경고해라.\n"
    "4. 책임을 피하지 말고 현실적으로 조언해라.\n"
    "5. 100% 성공을 보장하는 표현은 절대 쓰지 마라.\n\n"
    "## 전문 세탁소 추천 기준\n"
    "다음 중 하나라도 해당하면 전문 세탁소를 권해라:\n"
    "- 성공 확률이 60% 미만일 때\n"
    "- 실크, 캐시미어, 가죽, 울, 린넨 같은 고급 소재일 때\n"
    "- 얼룩이 생긴 지 48시간이 넘었을 때\n"
    "- 고객이 \"맡기면 나을까요?\"처럼 직접 물을 때\n\n"
    "## 응답 형식\n"
    "답변 맨 끝에 아래 JSON 블록을 반드시 붙여라:\n"
    "```json\n"
    "{\n"
    '  "success_rate": "예상 성공률 (예: 30~40%)",\n'
    '  "risk_level": "low|medium|high",\n'
    '  "recommend_shop": true|false\n'
    "}\n"
    "```\n\n"
    "## 말투\n"
    "- 친근하지만 전문가다운 말투를 써라.\n"
    "- \"이건 집에서 건드리면 거의 망가집니다\"처럼 직설적으로 말해라."
)

_CONTEXT_HEADER = "## 관련 세탁 지식 (검색 결과):"

_AUTH_STATUSES = {401, 402, 403}


def build_system_prompt(context: str | None = None) -> str:
    """Return the persona prompt, followed by retrieved knowledge if any."""
    if not context:
        return SYSTEM_PROMPT
    return f"{SYSTEM_PROMPT}\n\n{_CONTEXT_HEADER}\n{context}"


def _get_client(config: LLMConfig) -> ollama.Client:
    """Create an authenticated client, failing before any network I/O.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    if config.api_key is None or not config.api_key.get_secret_value():
        raise ConfigurationError("LLM_API_KEY is not configured")
    return ollama.Client(
        host=config.host,
        timeout=config.timeout,
        headers={"Authorization": f"Bearer {config.api_key.get_secret_value()}"},
    )


def _classify(exc: ollama.ResponseError) -> Exception:
    """Map a non-success response from the service onto the error taxonomy."""
    status = exc.status_code
    detail = exc.error
    if status in _AUTH_STATUSES:
        return AuthenticationError(
            f"Completion service rejected the credential ({status}): {detail}",
            status_code=status,
            detail=detail,
        )
    if status == 429:
        return RateLimitError(
            "Completion service rate limit exceeded", status_code=status, detail=detail
        )
    if status == 400:
        return BadRequestError(
            f"Completion service rejected the request: {detail}",
            status_code=status,
            detail=detail,
        )
    return UpstreamError(
        f"Completion service error ({status})", status_code=status, detail=detail
    )


def complete(
    message: str,
    context: str | None = None,
    config: LLMConfig | None = None,
) -> CompletionResult:
    """Send one completion request and return the raw answer text.

    The system turn is the laundry-master persona, extended with
    ``context`` when it is non-empty; the user turn is ``message``.
    No retries are attempted.

    Args:
        message: The user's question.
        context: Pre-formatted knowledge context, or None.
        config: Completion service settings. Uses defaults if not provided.

    Returns:
        The model's raw text, including any trailing JSON block.

    Raises:
        ConfigurationError: No API key is configured.
        AuthenticationError: The service answered 401, 402 or 403.
        RateLimitError: The service answered 429.
        BadRequestError: The service answered 400 or the client refused
            to build the request.
        UpstreamError: Any other status, a transport failure, or a
            response without message content.
    """
    cfg = config or LLMConfig()
    client = _get_client(cfg)

    try:
        with client:
            response = client.chat(
                model=cfg.model,
                messages=[
                    {"role": "system", "content": build_system_prompt(context)},
                    {"role": "user", "content": message},
                ],
                options={"temperature": cfg.temperature, "num_predict": cfg.max_tokens},
            )
    except ollama.ResponseError as exc:
        error = _classify(exc)
        logger.error("Completion request failed: %s", error)
        raise error from exc
    except ollama.RequestError as exc:
        logger.error("Completion request rejected locally: %s", exc.error)
        raise BadRequestError(str(exc.error), detail=exc.error) from exc
    except (ConnectionError, httpx.HTTPError) as exc:
        logger.error("Completion transport failure: %s", exc)
        raise UpstreamError(f"Completion service unreachable: {exc}", detail=str(exc)) from exc

    try:
        content = response["message"]["content"]
    except (KeyError, TypeError) as exc:
        raise UpstreamError("Completion service returned no message") from exc

    logger.debug("Completion returned %d characters.", len(content or ""))
    return CompletionResult(text=content or "", model=cfg.model)


def ping(config: LLMConfig | None = None) -> bool:
    """Return True if the completion service answers with the configured key."""
    try:
        client = _get_client(config or LLMConfig())
        with client:
            client.list()
    except Exception as exc:
        logger.debug("Completion service ping failed: %s", exc)
        return False
    return True
