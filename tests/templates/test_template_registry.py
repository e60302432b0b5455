"""
Tests for template resolution across the brand-hook, brand-default and
generic tiers, using the packaged manifest and brand data.
"""

import pytest

from contentengine.brands.registry import BrandKit, BrandRegistry
from contentengine.core.exceptions import ConfigurationError
from contentengine.core.models import ContentFormat
from contentengine.templates.registry import ResolvedTemplate, TemplateRegistry, TemplateTier


@pytest.fixture
def registry():
    return TemplateRegistry.from_manifest(BrandRegistry())


class TestResolve:
    """Tier selection."""

    def test_brand_hook_template(self, registry):
        template = registry.resolve("nablinds", ContentFormat.IMAGE_KIT, "contrast")
        assert template.tier == TemplateTier.BRAND_HOOK
        assert template.key == "nablinds.image_kit.contrast"

    def test_brand_default_template(self, registry):
        template = registry.resolve("nablinds", "image_kit")
        assert template.tier == TemplateTier.BRAND_DEFAULT
        assert template.key == "nablinds.image_kit.default"

    def test_default_hook_for_format(self, registry):
        template = registry.resolve("nablinds", "reel_kit")
        assert template.key == "nablinds.reel_kit.contrast_6s"

    def test_hook_mapped_to_template_name(self, registry):
        template = registry.resolve("nablinds", "wide_video_kit", "anything")
        assert template.key == "nablinds.wide_video_kit.showcase_12s"

    def test_unknown_brand_uses_generic(self, registry):
        template = registry.resolve("ghost", "reel", "contrast")
        assert template.tier == TemplateTier.GENERIC
        assert template.key == "generic.reel"

    def test_brand_without_format_default_falls_to_generic(self, registry):
        template = registry.resolve("nablinds", "reel_kit", "unknown_hook")
        assert template.tier == TemplateTier.GENERIC
        assert template.key == "generic.reel_kit"

    @pytest.mark.parametrize("brand,fmt", [
        ("ghost", "reel"),
        ("nablinds", "reel_kit"),
        ("nablinds", "image_kit"),
    ])
    def test_unknown_hook_resolves_like_default(self, registry, brand, fmt):
        unknown = registry.resolve(brand, fmt, "no_such_hook")
        default = registry.resolve(brand, fmt, "default")
        assert unknown.key == default.key
        assert unknown.build() == default.build()

    def test_unsupported_format_raises(self, registry):
        with pytest.raises(ConfigurationError, match="billboard"):
            registry.resolve("nablinds", "billboard")


class TestBuild:
    """Prompt text from resolved templates."""

    def test_generic_prompt_uses_default_brand_strings(self, registry):
        prompt = registry.resolve("ghost", "reel").build({"location": "a loft"})
        assert "a loft" in prompt
        assert "Premium quality." in prompt
        assert "Learn more" in prompt

    @pytest.mark.parametrize("fmt", [f.value for f in ContentFormat])
    def test_every_format_has_a_generic_prompt(self, registry, fmt):
        prompt = registry.resolve("ghost", fmt).build()
        assert prompt.strip()
        assert "Learn more" in prompt

    def test_brand_prompt_uses_kit(self, registry):
        prompt = registry.resolve("nablinds", "image_kit").build(
            {"body": "Sheer shades at golden hour"}, {"collection_key": "sheer"}
        )
        assert "MICRO LABEL: SHEER COLLECTION" in prompt
        assert "HEADLINE: LIGHT. CONTROLLED." in prompt
        assert "Scene: Sheer shades at golden hour" in prompt

    def test_wide_video_project_type(self, registry):
        prompt = registry.resolve("nablinds", "wide_video_kit").build({}, {"project_type": "high-rise"})
        assert "floor-to-ceiling windows" in prompt

    def test_empty_prompt_raises(self):
        template = ResolvedTemplate(TemplateTier.GENERIC, "empty", BrandKit(brand_key="x"),
                                    lambda brand, variables, options: "  ")
        with pytest.raises(ConfigurationError):
            template.build()


class TestManifest:
    def test_unknown_builder_rejected(self, tmp_path):
        manifest = tmp_path / "manifest.yaml"
        manifest.write_text("brands:\n  acme:\n    reel:\n      default: acme.reel.nope\n")
        with pytest.raises(ConfigurationError, match="acme.reel.nope"):
            TemplateRegistry.from_manifest(BrandRegistry(str(tmp_path)), str(manifest))

    def test_empty_manifest_is_all_generic(self, tmp_path):
        manifest = tmp_path / "manifest.yaml"
        manifest.write_text("")
        registry = TemplateRegistry.from_manifest(BrandRegistry(str(tmp_path)), str(manifest))
        assert registry.resolve("nablinds", "image_kit").tier == TemplateTier.GENERIC
