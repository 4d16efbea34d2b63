"""
Style catalog: the preset looks every batch is rendered in.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class StyleDescriptor:
    """A named preset pairing a label with a visual style instruction."""
    name: str
    style_prompt: str

    def to_dict(self) -> dict:
        return {"name": self.name, "style_prompt": self.style_prompt}


STYLE_CATALOG: Tuple[StyleDescriptor, ...] = (
    StyleDescriptor(
        name="Studio Minimalis",
        style_prompt=(
            "Professional product photography, clean white background, soft studio lighting, "
            "high key, commercial e-commerce look, 4k resolution."
        ),
    ),
    StyleDescriptor(
        name="Elegan & Mewah",
        style_prompt=(
            "Luxury product photography, dark moody background with texture, dramatic rim "
            "lighting, gold accents, premium cinematic look."
        ),
    ),
    StyleDescriptor(
        name="Alam & Natural",
        style_prompt=(
            "Lifestyle product photography, placed on a wooden surface, natural sunlight "
            "dappling through leaves (bokeh), soft outdoor atmosphere."
        ),
    ),
    StyleDescriptor(
        name="Modern Pastel",
        style_prompt=(
            "Modern artistic product photography, pastel colored geometric podiums, bright "
            "vivid lighting, pop art style, trendy aesthetic."
        ),
    ),
)
