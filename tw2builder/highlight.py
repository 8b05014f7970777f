from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple

_PSEUDO_RE = re.compile(r"(::before|::after|:hover|:focus|:active)(?![\w-])")


@dataclass(frozen=True)
class HighlightedLine:
    kind: str  # comment | media | selector | property | plain
    segments: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(s for _, s in self.segments)


def _classify(line: str) -> str:
    trimmed = line.strip()
    if trimmed.startswith("/*"):
        return "comment"
    if trimmed.startswith("@media"):
        return "media"
    # A rule opener whose braces carry no declarations; colons before `{` are pseudo-classes
    if "{" in trimmed and ":" not in trimmed.split("{", 1)[1]:
        return "selector"
    if ":" in line:
        return "property"
    return "plain"


def highlight_line(line: str) -> HighlightedLine:
    kind = _classify(line)
    if kind == "property":
        idx = line.index(":")
        return HighlightedLine(kind, [("prop", line[:idx]), ("colon", ":"), ("value", line[idx + 1 :])])
    if kind == "selector":
        segments = []
        for part in _PSEUDO_RE.split(line):
            if not part:
                continue
            segments.append(("pseudo" if _PSEUDO_RE.fullmatch(part) else "text", part))
        return HighlightedLine(kind, segments)
    return HighlightedLine(kind, [("text", line)])


def highlight_css(css: str) -> List[HighlightedLine]:
    """Split generated CSS into display lines with coarse token kinds.

    Line-oriented on purpose: selectors with pseudo-classes and a single
    property per line are what the model produces in expanded mode. Minified
    output mostly lands in `property` and reads fine that way.
    """
    if not css:
        return []
    return [highlight_line(line) for line in css.split("\n")]
