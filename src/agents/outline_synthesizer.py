"""Outline Synthesizer Agent: cleaned source text to a styled slide outline.

The system instruction is built in layers, later layers taking precedence:

1. Base design guidance (layouts, named backgrounds, icons)
2. Named preset guidance, and/or a free-form custom design prompt
3. The active aggregated design (forces palette, typography and layout)
4. Matched exemplars, to be transcribed verbatim (hex codes, fonts, sizes).
   When an active design is also present, its colours and fonts win.
5. Output format constraints (JSON only, 5-12 slides, short bullets)

The model answer is parsed strictly and validated into an Outline.
"""

import json
import logging
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from src.backends.fallback import run_with_fallback
from src.backends.inference_client import ChatMessage, ChatRequest, ChatResponse
from src.design_engine.errors import OutlineGenerationFailed, OutlineParseError
from src.design_engine.presets import get_preset
from src.schemas.design_schema import AggregatedDesignSpec, MatchedDesign
from src.schemas.outline_schema import Outline, SlideSpec
from src.utils.text_utils import truncate

logger = logging.getLogger(__name__)

OUTLINE_MAX_TOKENS = 4000
OUTLINE_TEMPERATURE = 0.8
MAX_USER_MESSAGE_CHARS = 12000
MAX_MATCHED_IN_PROMPT = 3


BASE_DESIGN_GUIDANCE = """You are an expert presentation designer creating visually compelling, well-structured slide presentations.

Analyze the content and create a structured presentation outline with a design specification for each slide.

DESIGN PRINCIPLES:
1. Visual hierarchy: vary layouts to create interest and guide attention
2. Readability: light backgrounds take dark text, dark backgrounds take white text
3. Theme consistency: keep a coherent look while allowing slide-specific choices
4. Content balance: match layout complexity to content density

LAYOUT OPTIONS:
- title-only: opening/closing slides, quotes, single key messages
- title-and-bullets: standard content slides with 3-6 bullets (most common)
- two-column: comparisons, before/after, side-by-side concepts
- image-left: visual-heavy slides where an image supports the content
- image-right: content-first slides with supporting visuals

BACKGROUND COLORS:
- light-blue: modern purple-blue gradient (#667eea to #764ba2), friendly and modern
- dark-blue: deep blue gradient (#1e3c72 to #2a5298), authoritative and serious
- white: soft gradient (#f5f7fa to #c3cfe2), clean and minimalist
- gray: neutral gradient (#e0e0e0 to #bdbdbd), balanced and corporate
- green: teal-green gradient (#11998e to #38ef7d), growth and success

ICONS (use sparingly):
- none, book (learning), idea (concepts), warning (cautions), check (accomplishments)"""

OUTPUT_FORMAT_RULES = """OUTPUT FORMAT:
Return ONLY a JSON object with this exact structure:
{
  "slides": [
    {
      "slide_title": "Slide Title Here",
      "bullets": ["Bullet point 1", "Bullet point 2"],
      "design": {
        "background_color": "named background or #hex",
        "text_color": "black | white | #hex",
        "layout": "title-only | title-and-bullets | two-column | image-left | image-right",
        "icon": "none | book | idea | warning | check",
        "fontFamily": "optional font name",
        "fontSize": 18,
        "customColors": {"primary": "#hex", "secondary": "#hex", "accent": "#hex"}
      }
    }
  ]
}

GUIDELINES:
- Create 5-12 slides depending on content length
- Start with a title slide, end with a summary or conclusion
- Keep every bullet concise (max 15 words)
- Make slide titles compelling and clear
- No markdown, no comments, no text outside the JSON object"""


class OutlineOptions(BaseModel):
    """Optional inputs that steer the outline's style and content."""

    design_preset: Optional[str] = Field(default=None, description="business | academic | kids")
    custom_design_prompt: Optional[str] = None
    matched_designs: list[MatchedDesign] = Field(default_factory=list)
    active_design: Optional[AggregatedDesignSpec] = None
    refinement_prompt: Optional[str] = None
    existing_slides: Optional[list[SlideSpec]] = None


# ---------------------------------------------------------------------------
# Prompt layers
# ---------------------------------------------------------------------------

def _active_design_block(spec: AggregatedDesignSpec) -> str:
    ds = spec.design_spec
    colors = ", ".join(spec.color_palette) or "(none)"
    custom = ds.custom_colors
    lines = [
        "ACTIVE DESIGN SET (MANDATORY HOUSE STYLE, overrides the guidance above):",
        f"- Colour palette: {colors}",
        f"- Default background_color: {ds.background_color}; text_color: {ds.text_color}",
        f"- Fonts: {', '.join(spec.typography.fonts)}; sizes: {spec.typography.sizes}; "
        f"weights: {', '.join(spec.typography.weights)}",
        f"- Layouts to prefer: {', '.join(spec.layout_patterns)}",
        f"- Style: {', '.join(spec.style_keywords) or 'unspecified'}",
    ]
    if custom:
        lines.append(
            f"- customColors: primary {custom.primary}, secondary {custom.secondary}, accent {custom.accent}"
        )
    lines.append(
        "Every slide MUST use colours from this palette (hex codes, not named backgrounds) "
        f"and set fontFamily to {ds.font_family or spec.typography.fonts[0]}."
    )
    return "\n".join(lines)


def _matched_designs_block(matched: list[MatchedDesign], has_active: bool) -> str:
    lines = [
        "REFERENCE DESIGNS (copy these values EXACTLY, do not approximate):",
    ]
    for i, match in enumerate(matched[:MAX_MATCHED_IN_PROMPT], 1):
        d = match.extracted_design
        lines.append(
            f"{i}. colours {', '.join(d.color_palette) or '(none)'}; "
            f"fonts {', '.join(d.typography.fonts)}; sizes {d.typography.sizes}; "
            f"layout {d.layout_pattern}; style {', '.join(d.style_keywords) or 'unspecified'}"
        )
    lines.append(
        "Transcribe hex codes, font names and font sizes verbatim into each slide's design."
    )
    if has_active:
        lines.append(
            "The ACTIVE DESIGN SET colours and fonts take priority over these references; "
            "use the references for layout and emphasis only."
        )
    return "\n".join(lines)


def build_system_prompt(options: OutlineOptions) -> str:
    """Assemble the layered system instruction."""
    sections = [BASE_DESIGN_GUIDANCE]

    if options.design_preset:
        preset = get_preset(options.design_preset)
        if preset:
            sections.append(preset.prompt_guidance())
        else:
            logger.warning(f"Unknown design preset {options.design_preset!r}, ignoring")
    if options.custom_design_prompt:
        sections.append(f"CUSTOM DESIGN DIRECTION:\n{options.custom_design_prompt.strip()}")

    if options.active_design:
        sections.append(_active_design_block(options.active_design))

    if options.matched_designs:
        sections.append(_matched_designs_block(options.matched_designs, options.active_design is not None))

    sections.append(OUTPUT_FORMAT_RULES)
    return "\n\n".join(sections)


def build_user_message(cleaned_text: str, prompt: Optional[str], options: OutlineOptions) -> str:
    """User turn: refinement request or fresh outline request, capped in length."""
    if options.refinement_prompt and options.existing_slides:
        existing = json.dumps(
            [s.model_dump(by_alias=True, exclude_none=True) for s in options.existing_slides],
            indent=2,
        )
        message = (
            "Refine this presentation based on the user's feedback:\n\n"
            f"{options.refinement_prompt}\n\n"
            f"Existing slides:\n{existing}\n\n"
            f"Original content:\n{cleaned_text}"
        )
    else:
        message = f"Create a presentation outline from this content with design specifications:\n\n{cleaned_text}"
        if prompt:
            message += f"\n\nUser preference: {prompt}"
    return truncate(message, MAX_USER_MESSAGE_CHARS)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_outline(content: str, model: Optional[str] = None) -> Outline:
    """Strictly parse and validate an outline answer.

    Raises:
        OutlineParseError: not JSON, no slides list, or a slide without a
            title or design object.
    """
    if not content or not content.strip():
        raise OutlineParseError("No content returned from outline generation", raw_content=content, model=model)

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise OutlineParseError(f"Failed to parse outline: {e}", raw_content=content, model=model) from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("slides"), list):
        raise OutlineParseError("Invalid outline structure: missing slides array", raw_content=content, model=model)

    slides = []
    for index, raw in enumerate(parsed["slides"]):
        if not isinstance(raw, dict) or not raw.get("slide_title") or not isinstance(raw.get("design"), dict):
            raise OutlineParseError(f"Invalid slide structure at index {index}", raw_content=content, model=model)
        try:
            slides.append(SlideSpec.model_validate(raw))
        except ValidationError as e:
            raise OutlineParseError(
                f"Invalid slide at index {index}: {e.error_count()} validation errors",
                raw_content=content,
                model=model,
            ) from e

    return Outline(slides=slides, model=model)


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------

class OutlineSynthesizer:
    """Generates a styled outline through an ordered chain of text models."""

    def __init__(self, backend, models: list[str]):
        self.backend = backend
        self.models = list(models)

    def synthesize(
        self,
        cleaned_text: str,
        prompt: Optional[str] = None,
        options: Optional[OutlineOptions] = None,
    ) -> Outline:
        """Generate an outline.

        Raises:
            CredentialError, QuotaExhaustedError: fatal, no further models tried.
            OutlineGenerationFailed: every model failed with a retryable error.
            OutlineParseError: the answering model returned an unusable outline.
        """
        options = options or OutlineOptions()
        messages = [
            ChatMessage(role="system", content=build_system_prompt(options)),
            ChatMessage(role="user", content=build_user_message(cleaned_text, prompt, options)),
        ]

        def call(model: str) -> ChatResponse:
            return self.backend.complete(ChatRequest(
                model=model,
                messages=messages,
                max_tokens=OUTLINE_MAX_TOKENS,
                temperature=OUTLINE_TEMPERATURE,
                json_response=True,
            ))

        model, response = run_with_fallback(self.models, call, "GenerateOutline", OutlineGenerationFailed)
        outline = parse_outline(response.content, model=model)
        logger.info(f"Generated outline with {len(outline.slides)} slides via {model}")
        return outline
