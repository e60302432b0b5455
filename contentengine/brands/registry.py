"""
Brand Registry - read-only lookup of brand kits.

A brand kit lives in <brands_dir>/<brand_key>/brand.json, optionally merged
with tokens.json from the same folder. Unknown or unreadable brands resolve
to the default kit carrying the requested brand_key, so prompt building can
always fall back to generic positioning and call-to-action strings.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.config import Config
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BrandCollection(BaseModel):
    """Named product collection (used for image_kit micro labels)"""
    key: str
    label: Optional[str] = None


class BrandKit(BaseModel):
    """Normalized brand data used by prompt builders"""
    model_config = ConfigDict(extra="allow")

    brand_key: str
    display_name: str = "Default"
    positioning: Optional[str] = "Premium quality."
    primary_cta: Optional[str] = "Learn more"
    default_micro_label: Optional[str] = "BRAND"
    collections: List[BrandCollection] = Field(default_factory=list)

    def collection_label(self, key: str) -> str:
        """Label for a collection key, upper-cased key when not declared."""
        for collection in self.collections:
            if collection.key == key:
                return collection.label or key.upper()
        return key.upper()


DEFAULT_BRAND_KEY = "default"


def is_valid_brand_key(brand_key: str) -> bool:
    """A brand key names one folder directly under the brands directory."""
    return bool(brand_key) and brand_key not in (".", "..") and not any(sep in brand_key for sep in "/\\")


class BrandRegistry:
    """Loads and caches brand kits from the brands directory."""

    def __init__(self, brands_dir: Optional[str] = None):
        self.brands_dir = Path(brands_dir or Config.BRANDS_DIR)
        self._cache: Dict[str, BrandKit] = {}

    def load(self, brand_key: str) -> BrandKit:
        """
        Load the brand kit for brand_key.

        Args:
            brand_key: Folder name under the brands directory

        Returns:
            BrandKit; the default kit (with brand_key preserved) when the
            brand folder or brand.json is missing or unreadable

        Raises:
            ConfigurationError: if brand_key is not a plain folder name
        """
        if not is_valid_brand_key(brand_key):
            raise ConfigurationError(f"Invalid brand key: {brand_key!r}")

        if brand_key in self._cache:
            return self._cache[brand_key]

        kit = self._read_kit(brand_key)
        self._cache[brand_key] = kit
        return kit

    def _read_kit(self, brand_key: str) -> BrandKit:
        brand_path = self.brands_dir / brand_key / "brand.json"
        if not brand_path.is_file():
            logger.debug(f"No brand.json for '{brand_key}', using default brand kit")
            return BrandKit(brand_key=brand_key)

        try:
            data = json.loads(brand_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable brand.json for '{brand_key}': {e}")
            return BrandKit(brand_key=brand_key)

        tokens_path = self.brands_dir / brand_key / "tokens.json"
        if tokens_path.is_file():
            try:
                data.update(json.loads(tokens_path.read_text(encoding="utf-8")))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable tokens.json for '{brand_key}': {e}")

        data.setdefault("brand_key", brand_key)
        try:
            return BrandKit(**data)
        except ValidationError as e:
            logger.warning(f"Invalid brand kit for '{brand_key}': {e}")
            return BrandKit(brand_key=brand_key)

    def has_brand(self, brand_key: str) -> bool:
        if not is_valid_brand_key(brand_key):
            return False
        return (self.brands_dir / brand_key / "brand.json").is_file()

    def list_brand_keys(self) -> List[str]:
        """List available brand keys (subfolders of the brands directory)."""
        if not self.brands_dir.is_dir():
            return []
        return sorted(p.name for p in self.brands_dir.iterdir() if p.is_dir())
