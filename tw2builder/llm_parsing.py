from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from tw2builder.errors import MalformedResponseError
from tw2builder.models import ConversionResult

_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


def _strip_fence(text: str) -> str:
    m = _FENCE_RE.match(text)
    if m:
        return m.group(1)
    return text


def parse_conversion_result(text: Optional[str]) -> ConversionResult:
    """Parse the model's answer into a ConversionResult or raise MalformedResponseError.

    Strategy:
    - Trim whitespace and unwrap a single ```json fence if the model added one.
    - json.loads the rest; it must be an object.
    - Validate the three fields with the pydantic model (strict string types).
    Nothing is salvaged from a half-valid payload.
    """
    t = _strip_fence((text or "").strip())
    if not t:
        raise MalformedResponseError()
    try:
        data = json.loads(t)
    except ValueError as exc:
        raise MalformedResponseError() from exc
    if not isinstance(data, dict):
        raise MalformedResponseError()
    try:
        return ConversionResult.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError() from exc


def extract_gemini_text(payload: Dict[str, Any]) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates") or []
    # Only the first candidate is the answer; later ones are alternates
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    for part in parts:
        if not isinstance(part, dict):
            continue
        txt = part.get("text")
        if isinstance(txt, str) and txt.strip():
            return txt
    return None


def extract_service_error(payload: Any) -> Optional[str]:
    """Pull the human message out of a Google API error body, if there is one."""
    if not isinstance(payload, dict):
        return None
    err = payload.get("error")
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    if isinstance(err, str) and err.strip():
        return err.strip()
    return None
