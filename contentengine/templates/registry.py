"""
Template Registry - resolves (brand, format, hook) to a prompt builder.

Resolution order:
1. Brand template for the hook's template name
2. Brand "default" template for the format
3. Built-in generic builder for the format

Missing brand templates never raise; they degrade to the next tier. The
lookup table is populated once from the YAML manifest.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..brands.registry import BrandKit, BrandRegistry
from ..core.config import Config
from ..core.exceptions import ConfigurationError
from ..core.models import ContentFormat
from .builders import BUILDERS, Builder
from .generic import generic_builder

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset(f.value for f in ContentFormat)


class TemplateTier(str, Enum):
    """Which fallback tier produced the template"""
    BRAND_HOOK = "brand_hook"
    BRAND_DEFAULT = "brand_default"
    GENERIC = "generic"


@dataclass
class ResolvedTemplate:
    """A resolved prompt builder bound to its brand kit."""
    tier: TemplateTier
    key: str
    brand: BrandKit
    builder: Builder

    def build(self, variables: Optional[Dict[str, Any]] = None,
              options: Optional[Dict[str, Any]] = None) -> str:
        prompt = self.builder(self.brand, dict(variables or {}), dict(options or {}))
        if not prompt or not prompt.strip():
            raise ConfigurationError(f"Template {self.key} produced an empty prompt")
        return prompt


class TemplateRegistry:
    """Static lookup table of brand templates plus generic fallbacks."""

    def __init__(
        self,
        brands: BrandRegistry,
        hook_templates: Optional[Dict[str, Dict[str, str]]] = None,
        default_hooks: Optional[Dict[str, str]] = None,
    ):
        self.brands = brands
        self.hook_templates = hook_templates or {}
        self.default_hooks = default_hooks or {}
        self._entries: Dict[Tuple[str, str], Dict[str, str]] = {}

    @classmethod
    def from_manifest(cls, brands: BrandRegistry,
                      manifest_path: Optional[str] = None) -> "TemplateRegistry":
        """
        Build the registry from a YAML manifest.

        Raises:
            ConfigurationError: if the manifest names an unregistered builder
        """
        path = manifest_path or Config.TEMPLATE_MANIFEST
        manifest = Config.load_yaml(path)

        registry = cls(
            brands,
            hook_templates=manifest.get("hook_templates") or {},
            default_hooks=manifest.get("default_hooks") or {},
        )
        for brand_key, formats in (manifest.get("brands") or {}).items():
            for content_format, templates in (formats or {}).items():
                for template_name, builder_name in (templates or {}).items():
                    registry.register(brand_key, content_format, template_name, builder_name)

        logger.info(f"Loaded template manifest {path}: {len(registry._entries)} brand/format entries")
        return registry

    def register(self, brand_key: str, content_format: str,
                 template_name: str, builder_name: str) -> None:
        if builder_name not in BUILDERS:
            raise ConfigurationError(
                f"Template {brand_key}/{content_format}/{template_name} "
                f"references unknown builder '{builder_name}'"
            )
        self._entries.setdefault((brand_key, content_format), {})[template_name] = builder_name

    def template_name(self, content_format: str, hook_type: Optional[str]) -> str:
        """Map a hook type onto the format's template name."""
        hook = hook_type or self.default_hooks.get(content_format) or "default"
        hook_map = self.hook_templates.get(content_format)
        if not hook_map:
            return hook
        return hook_map.get(hook) or hook_map.get("default") or "default"

    def resolve(self, brand_key: str, content_format: Any,
                hook_type: Optional[str] = None) -> ResolvedTemplate:
        fmt = content_format.value if isinstance(content_format, Enum) else str(content_format)
        if fmt not in SUPPORTED_FORMATS:
            raise ConfigurationError(f"No template available for format: {fmt}")

        brand = self.brands.load(brand_key)
        name = self.template_name(fmt, hook_type)
        templates = self._entries.get((brand_key, fmt), {})

        if name in templates:
            tier = TemplateTier.BRAND_DEFAULT if name == "default" else TemplateTier.BRAND_HOOK
            builder_name = templates[name]
            return ResolvedTemplate(tier, builder_name, brand, BUILDERS[builder_name])

        if "default" in templates:
            builder_name = templates["default"]
            logger.info(f"No {fmt}/{name} template for {brand_key}, using brand default")
            return ResolvedTemplate(TemplateTier.BRAND_DEFAULT, builder_name, brand,
                                    BUILDERS[builder_name])

        hook = hook_type or self.default_hooks.get(fmt) or "default"
        logger.info(f"No {fmt} template for {brand_key}, using generic fallback")
        return ResolvedTemplate(TemplateTier.GENERIC, f"generic.{fmt}", brand,
                                generic_builder(fmt, hook))
