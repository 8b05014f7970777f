from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import requests

from tw2builder.errors import MalformedResponseError, ServiceError
from tw2builder.llm_parsing import extract_gemini_text, extract_service_error, parse_conversion_result
from tw2builder.llm_prompts import response_schema, system_instruction, user_prompt
from tw2builder.models import BuilderType, ConversionOptions, ConversionResult, OutputFormat

log = logging.getLogger(__name__)

GEMINI_API_KEY = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview").strip()
GEMINI_ENDPOINT = f"https://generativelanguage.googleapis.com/v1beta/models/{GEMINI_MODEL}:generateContent"
TRANSPORT_FAILURE_MESSAGE = "Could not reach the conversion service."

# No local timeout unless configured; the transport decides otherwise
_timeout_raw = os.getenv("LLM_TIMEOUT_SECS", "").strip()
try:
    LLM_TIMEOUT_SECS: Optional[float] = float(_timeout_raw) if _timeout_raw else None
except ValueError:
    LLM_TIMEOUT_SECS = None
if LLM_TIMEOUT_SECS is not None and LLM_TIMEOUT_SECS <= 0:
    LLM_TIMEOUT_SECS = None


def status() -> Dict[str, Any]:
    return {
        "provider": "gemini",
        "model": GEMINI_MODEL,
        "has_token": bool(GEMINI_API_KEY),
        "using": "gemini" if GEMINI_API_KEY else "none",
    }


def probe() -> Dict[str, Any]:
    if not GEMINI_API_KEY:
        return {"ok": False, "using": "none", "error": "GEMINI_API_KEY not configured"}
    return {"ok": True, "using": "gemini", "model": GEMINI_MODEL}


def build_request_body(input_text: str, options: ConversionOptions) -> Dict[str, Any]:
    return {
        "systemInstruction": {"parts": [{"text": system_instruction(options)}]},
        "contents": [{"role": "user", "parts": [{"text": user_prompt(input_text)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": response_schema(),
        },
    }


def convert(
    input_text: str,
    builder: BuilderType = BuilderType.ELEMENTOR,
    fmt: OutputFormat = OutputFormat.STANDARD,
    compact: bool = False,
) -> ConversionResult:
    """Run one conversion against Gemini and return the parsed result.

    Raises ServiceError when the call itself fails (no key, transport error,
    non-200) and MalformedResponseError when the answer is not the three-field
    JSON object. There is no retry; every failure is terminal for the call.
    """
    options = ConversionOptions(builder=builder, format=fmt, compact=compact)
    if not GEMINI_API_KEY:
        raise ServiceError("Missing Gemini API key. Set GEMINI_API_KEY.")

    body = build_request_body(input_text, options)
    log.info(
        "convert: model=%s builder=%s format=%s compact=%s input_chars=%d",
        GEMINI_MODEL,
        options.builder.value,
        options.format.value,
        options.compact,
        len(input_text or ""),
    )
    try:
        resp = requests.post(
            GEMINI_ENDPOINT,
            headers={"x-goog-api-key": GEMINI_API_KEY},
            json=body,
            timeout=LLM_TIMEOUT_SECS,
        )
    except requests.RequestException as e:
        # The exception text can embed the request URL; log the type only
        log.warning("Gemini request error: %s", type(e).__name__)
        raise ServiceError(TRANSPORT_FAILURE_MESSAGE) from e

    if resp.status_code != 200:
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        msg = extract_service_error(payload)
        log.warning("Gemini HTTP %s: %s", resp.status_code, (msg or resp.text or "")[:400])
        raise ServiceError(msg or "", status_code=resp.status_code)

    try:
        data = resp.json()
    except ValueError as e:
        log.warning("Gemini: non-JSON body")
        raise MalformedResponseError() from e

    text = extract_gemini_text(data)
    if not text:
        log.warning("Gemini: empty response text")
        raise MalformedResponseError()

    try:
        result = parse_conversion_result(text)
    except MalformedResponseError:
        log.warning("Gemini: unparsable conversion payload: %s", text[:200])
        raise
    log.info("convert: ok css_chars=%d notes=%d", len(result.css), len(result.notes))
    return result
