from __future__ import annotations

from typing import Any, Dict

from tw2builder.models import BuilderType, ConversionOptions, OutputFormat

ELEMENTOR_PSEUDO_RULES = (
    "- IMPORTANT: For background colors, gradients, or overlays, use 'selector::before'.\n"
    "- If you use 'selector::before', the main 'selector' MUST have 'position: relative;' to anchor it.\n"
    "- 'selector::before' MUST include: content: \"\"; position: absolute; top: 0; right: 0; bottom: 0; left: 0; z-index: 0;\n"
    "- Ensure the actual content in 'selector' stays visible (e.g., use z-index: 1 or similar if needed)."
)

ELEMENTOR_BACKGROUND_EXAMPLE = (
    "- If there are background gradients or complex backgrounds, implement them using the 'selector::before' pattern requested.\n"
    "- Example for Elementor background:\n"
    "  selector { position: relative; z-index: 1; }\n"
    "  selector::before { content: \"\"; position: absolute; top: 0; right: 0; bottom: 0; left: 0; "
    "z-index: -1; background: ...; pointer-events: none; }"
)

_BUILDER_CONTEXT: Dict[BuilderType, str] = {
    BuilderType.ELEMENTOR: (
        "Target: Elementor.\n"
        "- Use 'selector' syntax for the main container.\n"
        f"{ELEMENTOR_PSEUDO_RULES}"
    ),
    BuilderType.BRICKS: "Target: Bricks Builder. Use standard CSS classes or root syntax.",
    BuilderType.GENERIC: "Target: Generic CSS.",
}

_FORMAT_CONTEXT: Dict[OutputFormat, str] = {
    OutputFormat.BEM: (
        "Use BEM (Block Element Modifier) naming convention for classes "
        "(e.g., .card, .card__header, .card__header--active)."
    ),
    OutputFormat.VANILLA: "Generate clean utility-like classes for each unique style set.",
    OutputFormat.STANDARD: "Standard: Use 'selector' for Elementor or simple class names for others.",
}


def builder_context(builder: BuilderType) -> str:
    return _BUILDER_CONTEXT[BuilderType(builder)]


def format_context(fmt: OutputFormat) -> str:
    return _FORMAT_CONTEXT[OutputFormat(fmt)]


def system_instruction(options: ConversionOptions) -> str:
    """Build the full instruction text for one conversion.

    Pure function of the options: identical options always give identical text,
    which is what lets the tests cover every builder/format/compact combination
    without touching the service.
    """
    is_elementor = options.builder == BuilderType.ELEMENTOR
    output_line = (
        "Generate MINIFIED CSS (one line per selector)."
        if options.compact
        else "Generate BEAUTIFIED/EXPANDED CSS."
    )
    formatting = [
        f"- {output_line}",
        "- Map all Tailwind utilities including responsive (sm, md, lg), state (hover, focus), and arbitrary values.",
        "- Merge duplicate properties.",
    ]
    if is_elementor:
        formatting.append("- Ensure the CSS is perfectly ready for Elementor's Advanced -> Custom CSS field.")

    sections = [
        "You are a Senior Frontend Developer specializing in high-performance CSS generation for WordPress builders.",
        "Objective: Convert Tailwind utility classes to pure CSS.",
        builder_context(options.builder),
        format_context(options.format),
        "Output Formatting:\n" + "\n".join(formatting),
    ]
    if is_elementor:
        sections.append("Visual Requirement:\n" + ELEMENTOR_BACKGROUND_EXAMPLE)
    sections.append(
        "Structure:\n"
        "1. Pure CSS code.\n"
        "2. Short explanation.\n"
        "3. Implementation notes."
    )
    sections.append("NO Tailwind CDN, NO Tailwind classes in CSS output.")
    return "\n\n".join(sections)


def user_prompt(input_text: str) -> str:
    # Input goes through untouched; the model sees exactly what was pasted
    return f"Convert the following code to CSS: \n\n {input_text}"


def response_schema() -> Dict[str, Any]:
    """Gemini responseSchema for the three-field answer."""
    return {
        "type": "OBJECT",
        "properties": {
            "css": {
                "type": "STRING",
                "description": "The generated pure CSS code.",
            },
            "explanation": {
                "type": "STRING",
                "description": "A short summary of the conversion logic.",
            },
            "notes": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "Builder-specific best practices.",
            },
        },
        "required": ["css", "explanation", "notes"],
    }
