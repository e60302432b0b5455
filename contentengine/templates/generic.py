"""
Built-in generic prompt builders.

Used when a brand has no template for a format. Every format has one: the
kit formats get minimal structure prompts filled from brand positioning and
primary call-to-action; reel/story/post/image use the hook templates.
"""

from functools import partial
from typing import Any, Dict

from ..brands.registry import BrandKit
from .builders import Builder


def _brand_strings(brand: BrandKit):
    return brand.positioning or "Premium quality.", brand.primary_cta or "Learn more"


def _var(variables: Dict[str, Any], key: str, default: str) -> str:
    value = variables.get(key)
    return str(value) if value not in (None, "") else default


# ============================================================================
# Kit format fallbacks
# ============================================================================

def image_kit_fallback(brand, variables, options):
    headline, cta = _brand_strings(brand)
    body = _var(variables, "body", "Product in context.")
    return "\n".join([
        "EDITORIAL PHOTOGRAPHY. Background image for overlay.",
        "Scene: " + body,
        f"OVERLAY: HEADLINE: {headline} | CTA: {cta}",
        "Do not bake text into the image.",
    ])


def reel_kit_fallback(brand, variables, options):
    headline, cta = _brand_strings(brand)
    return "\n".join([
        "REEL STRUCTURE - 6 second contrast. Static camera.",
        "Scene 1: Uncontrolled. Scene 2: Designed.",
        f"End Frame: {headline} | {cta}",
    ])


def wide_video_kit_fallback(brand, variables, options):
    headline, cta = _brand_strings(brand)
    theme = _var(variables, "theme", "Design")
    return "\n".join([
        "WIDE VIDEO - 16:9 editorial lookbook.",
        f"Concept: {theme}. CTA: {cta}",
        f"Headline: {headline}",
    ])


def format_fallback(content_format: str, brand, variables, options):
    headline, cta = _brand_strings(brand)
    return f"Generate {content_format} content. Headline: {headline}. CTA: {cta}."


# ============================================================================
# Hook templates (reel / story / post) and product image
# ============================================================================

def _positioning_line(brand: BrandKit) -> str:
    headline, cta = _brand_strings(brand)
    return f"BRAND: {headline} | {cta}"


def reel_contrast(brand, variables, options):
    location = _var(variables, "location", "luxury living space")
    product = _var(variables, "product", "premium product")
    cta = _var(variables, "cta", _brand_strings(brand)[1])
    return "\n".join([
        "SCENE 1 - UNCONTROLLED:",
        f"Raw, authentic footage of {location} before intervention. Natural lighting, uncurated.",
        "",
        "SCENE 2 - DESIGNED:",
        f"The same space reimagined with {product}. Polished, aspirational, controlled.",
        "",
        "END FRAME CTA:",
        cta,
        "",
        _positioning_line(brand),
    ])


def reel_question(brand, variables, options):
    product = _var(variables, "product", "the product")
    cta = _var(variables, "cta", "Discover more")
    return (
        f"OPEN: Compelling question about {product}.\n"
        f"BODY: Show the answer visually.\n"
        f"CTA: {cta}\n{_positioning_line(brand)}"
    )


def reel_pain_point(brand, variables, options):
    pain = _var(variables, "pain", "Common frustration")
    product = _var(variables, "product", "Your solution")
    cta = _var(variables, "cta", "Try today")
    return f"PROBLEM: {pain}.\nSOLUTION: {product}.\nCTA: {cta}\n{_positioning_line(brand)}"


def reel_statistic(brand, variables, options):
    stat = _var(variables, "stat", "Surprising stat")
    cta = _var(variables, "cta", "Learn more")
    return f"HOOK: {stat}.\nPROOF: Visual demonstration.\nCTA: {cta}\n{_positioning_line(brand)}"


def reel_story(brand, variables, options):
    setup = _var(variables, "setup", "Before")
    product = _var(variables, "product", "After")
    cta = _var(variables, "cta", "Your story next")
    return f"SETUP: {setup}.\nTRANSFORMATION: {product}.\nCTA: {cta}\n{_positioning_line(brand)}"


REEL_HOOKS: Dict[str, Builder] = {
    "contrast": reel_contrast,
    "question": reel_question,
    "pain_point": reel_pain_point,
    "statistic": reel_statistic,
    "story": reel_story,
}


def product_image(brand, variables, options):
    product = _var(variables, "product", "premium product")
    style = _var(variables, "style", "clean, modern")
    cta = _var(variables, "cta", _brand_strings(brand)[1])
    return " ".join([
        f"Create a high-quality product image for {product}.",
        f"Style: {style}.",
        "Include clear visual appeal suitable for advertising.",
        f"CTA suggestion: {cta}",
        _positioning_line(brand),
    ])


def generic_builder(content_format: str, hook_type: str = "default") -> Builder:
    """
    Return the built-in builder for a format.

    Unknown hooks on reel fall back to the contrast template; story and post
    always use contrast.
    """
    if content_format == "image_kit":
        return image_kit_fallback
    if content_format == "reel_kit":
        return reel_kit_fallback
    if content_format == "wide_video_kit":
        return wide_video_kit_fallback
    if content_format == "reel":
        return REEL_HOOKS.get(hook_type, reel_contrast)
    if content_format in ("story", "post"):
        return reel_contrast
    if content_format == "image":
        return product_image
    return partial(format_fallback, content_format)
