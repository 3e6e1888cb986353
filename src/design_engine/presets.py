"""Named design presets: business, academic, kids.

A preset fixes brand colours, a title/body font pair, the background colour
each slide position gets, and which backgrounds need dark text.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from src.schemas.outline_schema import SlideSpec

logger = logging.getLogger(__name__)


class FontChoice(BaseModel):
    name: str
    size: int
    weight: int = 400


class DesignPreset(BaseModel):
    """Colour and typography rules applied slide by slide."""

    id: str
    name: str
    description: str = ""
    primary: str
    secondary: str
    accent: str
    text_light: str = "#FFFFFF"
    text_dark: str = "#000000"
    title_font: FontChoice
    body_font: FontChoice
    first_background: Optional[str] = Field(
        default=None, description="Background of slide 0; None = use the cycle from the start"
    )
    background_cycle: list[str] = Field(description="Backgrounds repeated by slide index")
    dark_text_backgrounds: list[str] = Field(
        default_factory=list, description="Backgrounds that take text_dark instead of text_light"
    )

    def background_for(self, index: int) -> str:
        if index == 0 and self.first_background:
            return self.first_background
        return self.background_cycle[index % len(self.background_cycle)]

    def text_color_for(self, background: str) -> str:
        return self.text_dark if background in self.dark_text_backgrounds else self.text_light

    def prompt_guidance(self) -> str:
        """Instruction block for the outline model."""
        return (
            f"DESIGN PRESET: {self.name.upper()}\n"
            f"{self.description}\n"
            f"- Primary colour {self.primary}, secondary {self.secondary}, accent {self.accent}\n"
            f"- Title font {self.title_font.name} ({self.title_font.size}px, weight {self.title_font.weight}); "
            f"body font {self.body_font.name} ({self.body_font.size}px)\n"
            "- Use these hex colours as background_color values instead of the named gradients\n"
            f"- Text colour: {self.text_light} on dark backgrounds, {self.text_dark} on light ones"
        )


DESIGN_PRESETS: dict[str, DesignPreset] = {
    "business": DesignPreset(
        id="business",
        name="Business",
        description="Professional, modern, and energetic. For corporate presentations and business proposals.",
        primary="#FF8A00",
        secondary="#2D3542",
        accent="#FFFFFF",
        text_dark="#000000",
        title_font=FontChoice(name="Montserrat", size=48, weight=700),
        body_font=FontChoice(name="Open Sans", size=18, weight=400),
        first_background="#FF8A00",
        background_cycle=["#2D3542", "#FFFFFF"],
        dark_text_backgrounds=["#FFFFFF"],
    ),
    "academic": DesignPreset(
        id="academic",
        name="Academic",
        description="Scholarly and structured. For research presentations, thesis defenses, and educational content.",
        primary="#1a365d",
        secondary="#2d4a5c",
        accent="#f7fafc",
        text_dark="#1a202c",
        title_font=FontChoice(name="Georgia", size=44, weight=600),
        body_font=FontChoice(name="Merriweather", size=16, weight=400),
        first_background="#1a365d",
        background_cycle=["#2d4a5c", "#f7fafc"],
        dark_text_backgrounds=["#f7fafc"],
    ),
    "kids": DesignPreset(
        id="kids",
        name="Kids",
        description="Colorful, fun, and engaging. For children's presentations with vibrant colors.",
        primary="#FF6B9D",
        secondary="#4ECDC4",
        accent="#FFE66D",
        text_dark="#2d3748",
        title_font=FontChoice(name="Comic Sans MS", size=42, weight=700),
        body_font=FontChoice(name="Nunito", size=20, weight=500),
        background_cycle=["#FF6B9D", "#4ECDC4", "#FFE66D"],
        dark_text_backgrounds=["#FFE66D"],
    ),
}


def get_preset(preset_id: str) -> Optional[DesignPreset]:
    return DESIGN_PRESETS.get(preset_id)


def apply_design_preset(slides: list[SlideSpec], preset: str | DesignPreset) -> list[SlideSpec]:
    """Return copies of ``slides`` recoloured with a preset.

    Backgrounds follow the preset's rotation; text colour follows the
    background. The title slide gets the full title size, later slides 8px less.
    """
    config = preset if isinstance(preset, DesignPreset) else get_preset(preset)
    if config is None:
        raise ValueError(f"Unknown design preset: {preset!r}. Choose from {sorted(DESIGN_PRESETS)}")

    styled = []
    for index, slide in enumerate(slides):
        background = config.background_for(index)
        size = config.title_font.size if index == 0 else config.title_font.size - 8
        design = slide.design.model_copy(update={
            "background_color": background,
            "text_color": config.text_color_for(background),
            "font_family": config.title_font.name,
            "font_size": size,
        })
        styled.append(slide.model_copy(update={"design": design}))

    logger.debug(f"Applied preset {config.id} to {len(styled)} slides")
    return styled


# Stock backgrounds the outline model falls back to; these get replaced.
_STOCK_BACKGROUND_MARKERS = ("667eea", "764ba2", "1e3c72", "blue", "purple", "gradient")


def _is_stock_background(background: Optional[str]) -> bool:
    lowered = (background or "").lower()
    return not lowered or any(marker in lowered for marker in _STOCK_BACKGROUND_MARKERS)


def normalize_presentation(slides: list[SlideSpec], preset: str | DesignPreset = "business") -> list[SlideSpec]:
    """Return copies of ``slides`` with stock styling replaced by a preset's.

    Empty, blue, purple or gradient backgrounds follow the preset's rotation
    and any remaining non-hex background becomes the primary colour. Text is
    'black' on the white background and 'white' elsewhere. Fonts the model
    already chose are kept; missing ones default to the title font at full
    size on slide 0 and 32px after.
    """
    config = preset if isinstance(preset, DesignPreset) else get_preset(preset)
    if config is None:
        raise ValueError(f"Unknown design preset: {preset!r}. Choose from {sorted(DESIGN_PRESETS)}")

    normalized = []
    for index, slide in enumerate(slides):
        design = slide.design
        background = design.background_color
        if _is_stock_background(background):
            background = config.background_for(index)
        if not background.startswith("#"):
            background = config.primary

        design = design.model_copy(update={
            "background_color": background,
            "text_color": "black" if background.upper() == "#FFFFFF" else "white",
            "font_family": design.font_family or config.title_font.name,
            "font_size": design.font_size or (config.title_font.size if index == 0 else 32),
        })
        normalized.append(slide.model_copy(update={"design": design}))

    logger.debug(f"Normalized {len(normalized)} slides to preset {config.id}")
    return normalized
