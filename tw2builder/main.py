import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, ValidationError

from tw2builder import llm_client
from tw2builder.errors import ConversionError, EmptyInputError, GENERIC_FAILURE_MESSAGE
from tw2builder.models import BuilderType, ConversionResult, OutputFormat, UIState
from tw2builder.render import render_page_html
from tw2builder.state import ConverterController, initial_state, with_input, with_option

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

app = FastAPI(title="Tailwind2Builder")

allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=str(static_dir), html=False), name="static")


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = str(uuid.uuid4())
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid,
            request.method,
            request.url.path,
            getattr(response, "status_code", "?"),
            dur_ms,
        )


class ConvertRequest(BaseModel):
    input: str = Field("", description="Markup with Tailwind utility classes")
    builder: BuilderType = Field(BuilderType.ELEMENTOR, description="Target page builder")
    format: OutputFormat = Field(OutputFormat.STANDARD, description="Class naming convention")
    compact: bool = Field(False, description="Minified output when true")


_ERROR_STATUS = {
    "empty_input": 400,
    "service": 502,
    "malformed_response": 502,
}


def _error_response(exc: ConversionError) -> JSONResponse:
    return JSONResponse(
        status_code=_ERROR_STATUS.get(exc.kind, 500),
        content={"error": exc.message, "kind": exc.kind},
    )


def _carried_result(raw: str) -> Optional[ConversionResult]:
    # The page round-trips the last result in a hidden field so option changes keep it
    if not raw:
        return None
    try:
        return ConversionResult.model_validate_json(raw)
    except ValidationError:
        log.warning("form: ignoring unreadable carried result")
        return None


def _state_from_form(
    input_text: str,
    builder: str,
    fmt: str,
    theme: str,
    compact: Optional[str],
    result_json: str,
) -> UIState:
    state = with_input(initial_state(), input_text)
    state = with_option(state, "builder", builder)
    state = with_option(state, "format", fmt)
    state = with_option(state, "theme", theme)
    state = with_option(state, "compact", compact or "")
    return state.model_copy(update={"result": _carried_result(result_json)})


@app.get("/", response_class=HTMLResponse)
def root() -> str:
    return render_page_html(initial_state())


@app.post("/", response_class=HTMLResponse)
async def submit_form(
    input: str = Form(""),
    builder: str = Form(BuilderType.ELEMENTOR.value),
    format: str = Form(OutputFormat.STANDARD.value),
    theme: str = Form("deep-space"),
    compact: Optional[str] = Form(None),
    result_json: str = Form(""),
    action: str = Form("update"),
):
    """Apply one page action (convert / clear / update) and re-render."""
    try:
        state = _state_from_form(input, builder, format, theme, compact, result_json)
    except ValueError as exc:
        log.info("form: rejected option value: %s", exc)
        return HTMLResponse(
            render_page_html(initial_state().model_copy(update={"error": str(exc)})),
            status_code=400,
        )

    controller = ConverterController(llm_client.convert, state)
    if action == "convert":
        await controller.submit()
    elif action == "clear":
        controller.on_clear()
    return HTMLResponse(render_page_html(controller.state))


@app.post("/convert")
def convert_endpoint(req: ConvertRequest):
    if not req.input.strip():
        return _error_response(EmptyInputError())
    try:
        result = llm_client.convert(req.input, req.builder, req.format, req.compact)
    except ConversionError as exc:
        return _error_response(exc)
    except Exception:
        log.exception("convert: unexpected failure")
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE, "kind": "conversion"})
    return result.model_dump()


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/llm/status")
def llm_status_endpoint() -> Dict[str, Any]:
    return llm_client.status()


@app.get("/llm/probe")
def llm_probe_endpoint() -> Dict[str, Any]:
    return llm_client.probe()
