from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Tuple

from tw2builder.errors import EMPTY_INPUT_MESSAGE, GENERIC_FAILURE_MESSAGE, ConversionError
from tw2builder.models import BuilderType, ConversionResult, OutputFormat, OutputTheme, UIState

log = logging.getLogger(__name__)

COPY_VARIANTS = ("css", "style")
OPTION_AXES = ("builder", "format", "theme", "compact")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def initial_state() -> UIState:
    return UIState()


def with_input(state: UIState, text: str) -> UIState:
    return state.model_copy(update={"input_text": text or "", "error": None})


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def with_option(state: UIState, axis: str, value: Any) -> UIState:
    """Change one option axis. Never touches the current result."""
    if axis == "builder":
        options = state.options.model_copy(update={"builder": BuilderType(value)})
        return state.model_copy(update={"options": options})
    if axis == "format":
        options = state.options.model_copy(update={"format": OutputFormat(value)})
        return state.model_copy(update={"options": options})
    if axis == "compact":
        options = state.options.model_copy(update={"compact": _coerce_bool(value)})
        return state.model_copy(update={"options": options})
    if axis == "theme":
        return state.model_copy(update={"theme": OutputTheme(value)})
    raise ValueError(f"unknown option axis: {axis!r}")


def cleared(state: UIState) -> UIState:
    return state.model_copy(update={"input_text": "", "result": None, "error": None})


def begin_submit(state: UIState) -> Tuple[UIState, Optional[int]]:
    """Start a submission.

    Returns the new state and the token the caller must hand back on completion,
    or None when the input is blank (error set, nothing to call).
    """
    if not state.input_text.strip():
        return state.model_copy(update={"error": EMPTY_INPUT_MESSAGE}), None
    token = state.last_token + 1
    return state.model_copy(update={"busy": True, "error": None, "last_token": token}), token


def complete_success(state: UIState, token: int, result: ConversionResult) -> UIState:
    if token != state.last_token:
        log.debug("dropping stale success token=%d latest=%d", token, state.last_token)
        return state
    return state.model_copy(update={"result": result, "error": None, "busy": False})


def complete_failure(state: UIState, token: int, message: str) -> UIState:
    if token != state.last_token:
        log.debug("dropping stale failure token=%d latest=%d", token, state.last_token)
        return state
    return state.model_copy(
        update={"result": None, "error": message or GENERIC_FAILURE_MESSAGE, "busy": False}
    )


def clipboard_text(result: ConversionResult, variant: str = "css") -> str:
    if variant == "css":
        return result.css
    if variant == "style":
        return f"<style>\n{result.css}\n</style>"
    raise ValueError(f"unknown copy variant: {variant!r}")


ConvertFn = Callable[[str, BuilderType, OutputFormat, bool], ConversionResult]


class ConverterController:
    """Owns the page state and wires handlers to the conversion call.

    `convert` is any blocking callable with the llm_client.convert signature;
    submit() runs it in a worker thread so the event loop stays free while the
    request is in flight. Overlapping submits are allowed; only the most
    recently issued one may write its outcome.
    """

    def __init__(self, convert: Optional[ConvertFn] = None, state: Optional[UIState] = None):
        if convert is None:
            from tw2builder import llm_client

            convert = llm_client.convert
        self._convert = convert
        self.state = state or initial_state()

    def on_input_change(self, text: str) -> UIState:
        self.state = with_input(self.state, text)
        return self.state

    def on_option_change(self, axis: str, value: Any) -> UIState:
        self.state = with_option(self.state, axis, value)
        return self.state

    def on_clear(self) -> UIState:
        self.state = cleared(self.state)
        return self.state

    async def submit(self) -> UIState:
        self.state, token = begin_submit(self.state)
        if token is None:
            return self.state
        snapshot = self.state
        opts = snapshot.options
        try:
            result = await asyncio.to_thread(
                self._convert, snapshot.input_text, opts.builder, opts.format, opts.compact
            )
        except ConversionError as exc:
            log.info("submit: token=%d failed kind=%s", token, exc.kind)
            self.state = complete_failure(self.state, token, exc.message)
        except Exception:
            log.exception("submit: token=%d unexpected error", token)
            self.state = complete_failure(self.state, token, GENERIC_FAILURE_MESSAGE)
        else:
            self.state = complete_success(self.state, token, result)
        return self.state

    def copy(self, variant: str = "css") -> Optional[str]:
        if self.state.result is None:
            return None
        return clipboard_text(self.state.result, variant)
