"""Classification and rendering of agent responses.

The host writes whatever the agent produced to the response file.  Two JSON
shapes are understood:

* OpenAI-shaped: ``{"choices": [{"message": {"content": ...}}], "usage": {...}, "model": ...}``
* native: ``{"response": ..., "time_taken": ..., "tokens_per_second": ..., "total_tokens_generated": ...}``

Anything else, including text that is not JSON at all, is passed through as
opaque content.  :func:`parse_response` never raises.
"""

from __future__ import annotations

import json
import math
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict
from rich.markup import escape

RESPONSE_PREFIX = "A:\n"


class _BaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str

    @property
    def is_openai(self) -> bool:
        return False

    def metrics(self) -> dict[str, float]:
        """Numeric performance fields that were present in the response."""
        return {}


class OpenAIResponse(_BaseResponse):
    """Response following the ``choices[].message.content`` convention."""

    kind: Literal["openai"] = "openai"
    model: str | None = None
    time_taken: float | None = None
    total_tokens: float | None = None
    prompt_tokens: float | None = None
    completion_tokens: float | None = None

    @property
    def is_openai(self) -> bool:
        return True

    def metrics(self) -> dict[str, float]:
        return _present(
            total_tokens=self.total_tokens,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            time_taken=self.time_taken,
        )


class NativeResponse(_BaseResponse):
    """Response following the ``response``/``time_taken`` convention."""

    kind: Literal["native"] = "native"
    time_taken: float | None = None
    tokens_per_second: float | None = None
    total_tokens: float | None = None

    def metrics(self) -> dict[str, float]:
        return _present(
            time_taken=self.time_taken,
            tokens_per_second=self.tokens_per_second,
            total_tokens=self.total_tokens,
        )


class OpaqueResponse(_BaseResponse):
    """Text that matched neither known shape."""

    kind: Literal["opaque"] = "opaque"


ParsedResponse = Union[OpenAIResponse, NativeResponse, OpaqueResponse]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def parse_response(raw: str) -> ParsedResponse:
    """Classify *raw* response text and extract its content and metrics.

    The OpenAI shape is checked before the native one, so an object carrying
    both ``choices`` and ``response`` is treated as OpenAI-shaped.
    """
    text = raw[len(RESPONSE_PREFIX):] if raw.startswith(RESPONSE_PREFIX) else raw

    try:
        data = json.loads(text)
    except ValueError:
        return OpaqueResponse(content=text)

    if not isinstance(data, dict):
        return OpaqueResponse(content=text)

    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        return _parse_openai(data, choices[0])

    if "response" in data:
        return NativeResponse(
            content=_as_text(data["response"]),
            time_taken=_number(data.get("time_taken")),
            tokens_per_second=_number(data.get("tokens_per_second")),
            total_tokens=_number(data.get("total_tokens_generated")),
        )

    return OpaqueResponse(content=text)


def _parse_openai(data: dict[str, Any], choice: Any) -> OpenAIResponse:
    content: Any = None
    if isinstance(choice, dict):
        message = choice.get("message")
        if isinstance(message, dict):
            content = message.get("content")
        if content is None:
            content = choice.get("text")

    usage = data.get("usage")
    if not isinstance(usage, dict):
        usage = {}
    model = data.get("model")

    return OpenAIResponse(
        content=_as_text(content),
        model=model if isinstance(model, str) else None,
        time_taken=_number(usage.get("total_time")),
        total_tokens=_number(usage.get("total_tokens")),
        prompt_tokens=_number(usage.get("prompt_tokens")),
        completion_tokens=_number(usage.get("completion_tokens")),
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _number(value: Any) -> float | None:
    # bool is an int subclass but never a metric
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # json accepts NaN, Infinity, 1e400 and integers too large for a float
    try:
        finite = math.isfinite(float(value))
    except OverflowError:
        return None
    return value if finite else None


def _present(**fields: float | None) -> dict[str, float]:
    return {name: value for name, value in fields.items() if value is not None}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _fmt_count(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_response(parsed: ParsedResponse) -> str:
    """Render a parsed response as Rich markup for the console."""
    lines = ["", "[green]Assistant:[/green]", escape(parsed.content)]

    details: list[str] = []
    if isinstance(parsed, OpenAIResponse):
        if parsed.model:
            details.append(f"- Model: {escape(parsed.model)}")
        if parsed.total_tokens is not None:
            details.append(f"- Total tokens: {_fmt_count(parsed.total_tokens)}")
        if parsed.prompt_tokens is not None:
            details.append(f"- Prompt tokens: {_fmt_count(parsed.prompt_tokens)}")
        if parsed.completion_tokens is not None:
            details.append(f"- Completion tokens: {_fmt_count(parsed.completion_tokens)}")
        if parsed.time_taken is not None:
            details.append(f"- Time taken: {parsed.time_taken:.2f}s")
    elif isinstance(parsed, NativeResponse):
        if parsed.time_taken is not None:
            details.append(f"- Time taken: {parsed.time_taken:.2f}s")
        if parsed.tokens_per_second is not None:
            details.append(f"- Tokens/second: {round(parsed.tokens_per_second)}")
        if parsed.total_tokens is not None:
            details.append(f"- Total tokens: {_fmt_count(parsed.total_tokens)}")

    if details:
        lines.append("")
        lines.append("[cyan]Performance Metrics:[/cyan]")
        lines.extend(details)

    return "\n".join(lines)
