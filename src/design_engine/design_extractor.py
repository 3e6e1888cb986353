"""Design Extraction Service: vision analysis of one reference slide image.

Sends the image to an ordered chain of vision-capable models and turns the
first successful answer into an ExtractedDesign. Raw model output is never
trusted: it is cleaned (code fences, comments, surrounding prose), parsed,
and every field is validated or defaulted.

Usage:
    extractor = DesignExtractor(client, config.vision_models)
    design = extractor.extract("https://example.com/slide.png", ["modern"])
"""

import base64
import logging
import mimetypes
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from src.backends.fallback import run_with_fallback
from src.backends.inference_client import ChatMessage, ChatRequest, ChatResponse
from src.design_engine.errors import ExtractionFailed, ExtractionParseError
from src.schemas.design_schema import (
    DEFAULT_BODY_FONT,
    DEFAULT_FONT_SIZES,
    DEFAULT_FONT_WEIGHTS,
    DEFAULT_LAYOUT,
    DEFAULT_MARGINS,
    DEFAULT_PADDING,
    DEFAULT_QUALITY_SCORE,
    DEFAULT_TITLE_FONT,
    DesignSpec,
    ExtractedDesign,
    SpacingSpec,
    TypographySpec,
    coerce_pixel_value,
)
from src.utils.color_utils import normalize_palette
from src.utils.json_utils import parse_lenient_json

logger = logging.getLogger(__name__)

EXTRACTION_MAX_TOKENS = 2000
EXTRACTION_TEMPERATURE = 0.3
MAX_IMAGE_DIM = 2048

VISION_SYSTEM_PROMPT = """You are an expert presentation design analyst. Analyze a slide design image and extract its design specification with EXTREME PRECISION.

Requirements:
- Give EXACT hex colour codes, estimated as accurately as possible.
- Name fonts when recognizable (Montserrat, Open Sans, Roboto, Poppins, Inter, Arial, Helvetica...). Otherwise describe them ("bold sans-serif").
- Estimate font sizes in pixels (48-72 for titles, 24-32 for subtitles, 16-20 for body text).
- This data will be used to recreate the design exactly.

Extract:
1. Color palette: backgrounds, gradient stops, text colours and accents, ordered by prominence (most used first).
2. Typography: fonts in order [title, body, accent], sizes in pixels, weights (normal, bold, 300, 700...).
3. Layout pattern: "title-only", "title-and-bullets", "two-column", "image-left", "image-right", or a precise description.
4. Spacing: margins and padding in pixels, [top, right, bottom, left].
5. Style keywords: style ("modern", "minimalist", "corporate", "bold", "elegant"...) and mood ("serious", "friendly", "calm"...).
6. Quality score 0-100: visual appeal, polish, readability, colour harmony, sophistication.

Return ONLY a valid JSON object with this exact structure:
{
  "colorPalette": ["#hex1", "#hex2"],
  "typography": {"fonts": ["FontName1", "FontName2"], "sizes": [44, 32, 18, 16], "weights": ["normal", "bold"]},
  "layoutPattern": "title-and-bullets",
  "spacing": {"margins": [40, 40, 40, 40], "padding": [20, 20, 20, 20]},
  "styleKeywords": ["modern", "professional", "clean"],
  "qualityScore": 85,
  "designSpec": {
    "background_color": "#hex or predefined name",
    "text_color": "black or white",
    "layout": "title-and-bullets",
    "icon": "none",
    "fontFamily": "FontName",
    "fontSize": 18,
    "customColors": {"primary": "#hex", "secondary": "#hex", "accent": "#hex"}
  }
}

Do NOT include comments, markdown code blocks or explanatory text. Return pure JSON only."""


def build_user_text(keywords: list[str]) -> str:
    if keywords:
        return (
            "Analyze this presentation slide design. The design is tagged with these keywords: "
            f"{', '.join(keywords)}. Extract all design specifications as requested."
        )
    return "Analyze this presentation slide design and extract all design specifications as requested."


def encode_image_reference(image_ref: str | Path, max_dim: int = MAX_IMAGE_DIM) -> str:
    """Return a URL a vision model can fetch.

    http(s) and data: URLs pass through. A local file becomes a base64
    data: URL; images larger than ``max_dim`` on their long side are
    downscaled and re-encoded as PNG first.
    """
    ref = str(image_ref)
    if ref.startswith(("http://", "https://", "data:")):
        return ref

    path = Path(ref)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")

    blob = path.read_bytes()
    try:
        with Image.open(BytesIO(blob)) as img:
            mime = Image.MIME.get(img.format or "") or mimetypes.guess_type(path.name)[0] or "image/png"
            w, h = img.size
            if max(w, h) > max_dim:
                ratio = max_dim / max(w, h)
                resized = img.convert("RGBA").resize((int(w * ratio), int(h * ratio)), Image.LANCZOS)
                buf = BytesIO()
                resized.save(buf, format="PNG", optimize=True)
                logger.info(f"Downscaled {path.name} from {w}x{h} to {resized.size[0]}x{resized.size[1]}")
                blob, mime = buf.getvalue(), "image/png"
    except UnidentifiedImageError as e:
        raise ValueError(f"Not a readable image: {path}") from e

    encoded = base64.b64encode(blob).decode("ascii")
    return f"data:{mime};base64,{encoded}"


# ---------------------------------------------------------------------------
# Parsed-output normalization
# ---------------------------------------------------------------------------

def _numeric_list(value: Any, default: list[int]) -> list[int]:
    if not isinstance(value, list):
        return list(default)
    numbers = [coerce_pixel_value(v) for v in value]
    return [n for n in numbers if n is not None]


def _string_list(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def normalize_extraction(parsed: dict[str, Any]) -> ExtractedDesign:
    """Apply defaults and sanitization to a parsed vision-model answer."""
    typography = parsed.get("typography") if isinstance(parsed.get("typography"), dict) else {}
    spacing = parsed.get("spacing") if isinstance(parsed.get("spacing"), dict) else {}

    palette = parsed.get("colorPalette")
    palette = normalize_palette(palette) if isinstance(palette, list) else []

    layout_pattern = parsed.get("layoutPattern")
    if not isinstance(layout_pattern, str) or not layout_pattern.strip():
        layout_pattern = DEFAULT_LAYOUT

    raw_quality = parsed.get("qualityScore")
    if isinstance(raw_quality, (int, float)) and not isinstance(raw_quality, bool):
        quality = max(0, min(100, int(round(raw_quality))))
    else:
        quality = DEFAULT_QUALITY_SCORE

    design_spec = None
    raw_spec = parsed.get("designSpec")
    if isinstance(raw_spec, dict) and raw_spec:
        try:
            design_spec = DesignSpec.model_validate(raw_spec)
        except ValidationError as e:
            logger.warning(f"Discarding invalid designSpec from model output ({e.error_count()} errors)")
    if design_spec is None:
        design_spec = DesignSpec(
            background_color=palette[0] if palette else "light-blue",
            text_color="black",
            layout=layout_pattern,
            icon="none",
        )

    return ExtractedDesign(
        color_palette=palette,
        typography=TypographySpec(
            fonts=_string_list(typography.get("fonts"), [DEFAULT_TITLE_FONT, DEFAULT_BODY_FONT]),
            sizes=_numeric_list(typography.get("sizes"), DEFAULT_FONT_SIZES),
            weights=_string_list(typography.get("weights"), DEFAULT_FONT_WEIGHTS),
        ),
        layout_pattern=layout_pattern.strip(),
        spacing=SpacingSpec(
            margins=_numeric_list(spacing.get("margins"), DEFAULT_MARGINS),
            padding=_numeric_list(spacing.get("padding"), DEFAULT_PADDING),
        ),
        style_keywords=_string_list(parsed.get("styleKeywords"), []),
        quality_score=quality,
        design_spec=design_spec,
    )


def parse_extraction_response(content: str, model: Optional[str] = None) -> ExtractedDesign:
    """Clean, parse and normalize raw vision-model content.

    Raises:
        ExtractionParseError: content is empty or holds no usable JSON object.
    """
    if not content or not content.strip():
        raise ExtractionParseError("No content returned from design extraction", raw_content=content, model=model)
    try:
        parsed = parse_lenient_json(content)
    except ValueError as e:
        logger.error(f"Failed to parse design extraction from {model}: {e}")
        raise ExtractionParseError(
            f"Failed to parse design extraction: {e}", raw_content=content, model=model
        ) from e
    return normalize_extraction(parsed)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class DesignExtractor:
    """Turns a reference slide image into an ExtractedDesign."""

    def __init__(self, backend, models: list[str]):
        self.backend = backend
        self.models = list(models)

    def build_messages(self, image_url: str, keywords: list[str]) -> list[ChatMessage]:
        return [
            ChatMessage(role="system", content=VISION_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=[
                    {"type": "text", "text": build_user_text(keywords)},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            ),
        ]

    def extract(self, image_ref: str | Path, keywords: Optional[list[str]] = None) -> ExtractedDesign:
        """Analyze one image.

        Raises:
            CredentialError: key missing or rejected; no further model is tried.
            QuotaExhaustedError: backend credits exhausted.
            ExtractionFailed: every model failed with a retryable error.
            ExtractionParseError: the answering model returned unusable output.
        """
        keywords = keywords or []
        messages = self.build_messages(encode_image_reference(image_ref), keywords)

        def call(model: str) -> ChatResponse:
            return self.backend.complete(ChatRequest(
                model=model,
                messages=messages,
                max_tokens=EXTRACTION_MAX_TOKENS,
                temperature=EXTRACTION_TEMPERATURE,
                json_response=True,
            ))

        model, response = run_with_fallback(self.models, call, "DesignExtractor", ExtractionFailed)
        design = parse_extraction_response(response.content, model=model)
        logger.info(
            f"Extracted design with {len(design.color_palette)} colours, "
            f"layout={design.layout_pattern}, quality={design.quality_score}"
        )
        return design
