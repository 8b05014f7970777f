from __future__ import annotations
from typing import Any, Dict
import os
from jinja2 import Environment, FileSystemLoader, select_autoescape

from tw2builder.highlight import highlight_css
from tw2builder.models import BuilderType, OutputFormat, OutputTheme, UIState
from tw2builder.state import clipboard_text

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

# Jinja environment that looks in the package's templates/
_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False,
)

THEME_CLASSES: Dict[OutputTheme, str] = {
    OutputTheme.DEEP_SPACE: "theme-deep-space",
    OutputTheme.MIDNIGHT: "theme-midnight",
    OutputTheme.CYBERPUNK: "theme-cyberpunk",
}


def page_context(state: UIState) -> Dict[str, Any]:
    result = state.result
    return {
        "state": state,
        "builders": list(BuilderType),
        "formats": list(OutputFormat),
        "themes": list(OutputTheme),
        "theme_class": THEME_CLASSES[state.theme],
        "lines": highlight_css(result.css) if result else [],
        "char_count": len(result.css) if result else 0,
        "copy_css": clipboard_text(result, "css") if result else None,
        "copy_style": clipboard_text(result, "style") if result else None,
        "result_json": result.model_dump_json() if result else "",
    }


def render_page_html(state: UIState) -> str:
    """Render the converter page for one UI state snapshot."""
    return _env.get_template("index.html").render(**page_context(state))
