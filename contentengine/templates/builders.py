"""
Brand-specific prompt builders.

Each builder takes (brand kit, variables, options) and returns the provider
prompt. Builders are registered by name at import time; the template
manifest maps (brand, format, template) onto these names.
"""

from typing import Any, Callable, Dict

from ..brands.registry import BrandKit

Builder = Callable[[BrandKit, Dict[str, Any], Dict[str, Any]], str]

BUILDERS: Dict[str, Builder] = {}


def register_builder(name: str) -> Callable[[Builder], Builder]:
    """Register a builder function under a manifest name."""
    def decorator(fn: Builder) -> Builder:
        if name in BUILDERS:
            raise ValueError(f"Duplicate template builder name: {name}")
        BUILDERS[name] = fn
        return fn
    return decorator


def get_builder(name: str) -> Builder:
    return BUILDERS[name]


# ============================================================================
# nablinds
# ============================================================================

_NAB_HEADLINE = "LIGHT. CONTROLLED."
_NAB_CTA = "Schedule Design Consultation"

_PROJECT_CONTEXT = {
    "high-rise": "high-rise condo with floor-to-ceiling windows",
    "single-family": "single-family modern home",
    "townhouse": "townhouse with flexible spaces",
}


def _nab_strings(brand: BrandKit):
    return brand.positioning or _NAB_HEADLINE, brand.primary_cta or _NAB_CTA


def _micro_label(brand: BrandKit, options: Dict[str, Any]) -> str:
    collection_key = options.get("collection_key")
    if collection_key:
        return brand.collection_label(str(collection_key))
    return brand.default_micro_label or "BRAND"


def _editorial_image(brand: BrandKit, variables: Dict[str, Any], options: Dict[str, Any],
                     opener: str) -> str:
    headline, cta = _nab_strings(brand)
    body = str(variables.get("body") or "Architectural window treatment in modern space.")
    return "\n".join([
        opener,
        "Style: Warm neutrals, realistic exposure. No HDR glow. No text baked into image.",
        "Focus on light behavior in space. South Florida modern home interior.",
        "Scene: " + body,
        "",
        "OVERLAY STRUCTURE (for post-processing):",
        f"MICRO LABEL: {_micro_label(brand, options)}",
        f"HEADLINE: {headline}",
        f"BODY: {body} (1 short line, architectural, no sales tone)",
        f"CTA: {cta}",
        "",
        "Do not bake text into the image. Generate clean architectural photography "
        "suitable for typography overlay.",
    ])


@register_builder("nablinds.image_kit.default")
def nablinds_image_default(brand, variables, options):
    """4:5 editorial ad background with overlay structure."""
    return _editorial_image(
        brand, variables, options,
        "EDITORIAL ARCHITECTURAL PHOTOGRAPHY. Background image for overlay.",
    )


@register_builder("nablinds.image_kit.contrast")
def nablinds_image_contrast(brand, variables, options):
    return _editorial_image(
        brand, variables, options,
        "EDITORIAL ARCHITECTURAL PHOTOGRAPHY. Contrast composition. Background image for overlay.",
    )


@register_builder("nablinds.reel_kit.contrast_6s")
def nablinds_reel_contrast(brand, variables, options):
    """Two-scene before/after reel with end frame."""
    headline, cta = _nab_strings(brand)
    return "\n".join([
        "REEL STRUCTURE - 6 second contrast. Static camera. Natural light. No flashy transitions.",
        "",
        "Scene 1 (UNCONTROLLED):",
        "Raw, authentic space. Natural lighting, uncurated. Light flooding in without control.",
        "",
        "Scene 2 (DESIGNED):",
        "Same space with window treatment. Polished, aspirational. Light controlled.",
        "",
        "End Frame:",
        headline,
        cta,
        "",
        "Tone: Calm, deliberate. Feels like editorial, not ad creative. No aggressive text motion.",
    ])


@register_builder("nablinds.reel_kit.concept")
def nablinds_reel_concept(brand, variables, options):
    headline, cta = _nab_strings(brand)
    concept = str(variables.get("concept") or "Design Your Light")
    return "\n".join([
        "REEL STRUCTURE - 6 second concept reveal. Static camera. Natural light.",
        "",
        "Concept theme: " + concept,
        "",
        "Scene 1: Setup - space before",
        "Scene 2: Reveal - light controlled",
        f"End Frame: {headline} | {cta}",
        "",
        "Tone: Calm, deliberate. Editorial feel.",
    ])


@register_builder("nablinds.reel_kit.motorized_demo")
def nablinds_reel_motorized(brand, variables, options):
    headline, cta = _nab_strings(brand)
    return "\n".join([
        "REEL STRUCTURE - 6 second motorized demo. Static camera.",
        "",
        "Show: Silent automation of window treatment. Quiet, smooth movement.",
        f"End Frame: {headline} | {cta}",
        "",
        "Tone: Calm. Show the product in use, no loud motion graphics.",
    ])


@register_builder("nablinds.wide_video_kit.showcase_12s")
def nablinds_wide_showcase(brand, variables, options):
    """16:9 lookbook; project_type picks the architectural context."""
    headline, cta = _nab_strings(brand)
    theme = str(variables.get("theme") or "Design Your Light")
    project_type = str(options.get("project_type") or "single-family")
    project_context = _PROJECT_CONTEXT.get(project_type, _PROJECT_CONTEXT["single-family"])
    return "\n".join([
        "WIDE VIDEO STRUCTURE - 16:9 editorial lookbook. Architectural showcase.",
        "",
        "Label: " + (brand.default_micro_label or "BRAND"),
        "Headline: " + headline,
        "Concept: " + theme,
        "Detail: " + project_context + ". Light behavior, window architecture.",
        "CTA: " + cta,
        "",
        "Tone: Editorial lookbook. Architectural showcase. Not ad creative.",
        "No discount framing. No loud motion graphics. Calm, aspirational.",
    ])
