from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class BuilderType(str, Enum):
    ELEMENTOR = "elementor"
    GENERIC = "generic"
    BRICKS = "bricks"


class OutputFormat(str, Enum):
    STANDARD = "standard"
    BEM = "bem"
    VANILLA = "vanilla"


class OutputTheme(str, Enum):
    DEEP_SPACE = "deep-space"
    MIDNIGHT = "midnight"
    CYBERPUNK = "cyberpunk"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ")


class ConversionOptions(BaseModel):
    """What the model is asked to produce. The theme is display-only and lives on UIState."""

    model_config = ConfigDict(frozen=True)

    builder: BuilderType = BuilderType.ELEMENTOR
    format: OutputFormat = OutputFormat.STANDARD
    compact: bool = False


class ConversionResult(BaseModel):
    # Strict types: a number where a string is expected means the model ignored the schema
    model_config = ConfigDict(frozen=True, extra="ignore")

    css: StrictStr = Field(..., description="The generated pure CSS code.")
    explanation: StrictStr = Field(..., description="A short summary of the conversion logic.")
    notes: List[StrictStr] = Field(..., description="Builder-specific best practices.")


class UIState(BaseModel):
    """Single immutable snapshot of the converter page.

    Transitions live in tw2builder.state and always return a new instance.
    `last_token` is the sequence number of the most recently issued submission;
    completions carrying any other token are stale and get dropped.
    """

    model_config = ConfigDict(frozen=True)

    input_text: str = ""
    options: ConversionOptions = Field(default_factory=ConversionOptions)
    theme: OutputTheme = OutputTheme.DEEP_SPACE
    result: Optional[ConversionResult] = None
    error: Optional[str] = None
    busy: bool = False
    last_token: int = 0
