"""
Configuration management for ContentEngine
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def _env_bool(key: str, default: str = 'false') -> bool:
    return os.getenv(key, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Application configuration"""

    # Supabase
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_KEY: str = os.getenv('SUPABASE_SERVICE_KEY', '')
    STORAGE_BUCKET: str = os.getenv('STORAGE_BUCKET', 'content-outputs')

    # Replicate (generation provider)
    REPLICATE_API_TOKEN: str = os.getenv('REPLICATE_API_TOKEN', '')
    REPLICATE_API_BASE: str = os.getenv('REPLICATE_API_BASE', 'https://api.replicate.com/v1')
    PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv('PROVIDER_TIMEOUT_SECONDS', '300'))
    PROVIDER_POLL_INTERVAL_SECONDS: float = float(os.getenv('PROVIDER_POLL_INTERVAL_SECONDS', '2'))
    MAX_PROVIDER_DURATION_SECONDS: int = int(os.getenv('MAX_PROVIDER_DURATION_SECONDS', '6'))

    # Queue / worker
    WORKER_CONCURRENCY: int = int(os.getenv('WORKER_CONCURRENCY', '3'))
    MAX_JOB_ATTEMPTS: int = int(os.getenv('MAX_JOB_ATTEMPTS', '3'))
    RETRY_BACKOFF_SECONDS: float = float(os.getenv('RETRY_BACKOFF_SECONDS', '5'))
    QUEUE_POLL_INTERVAL_SECONDS: float = float(os.getenv('QUEUE_POLL_INTERVAL_SECONDS', '2'))
    STALLED_JOB_TIMEOUT_SECONDS: int = int(os.getenv('STALLED_JOB_TIMEOUT_SECONDS', '900'))
    HEARTBEAT_INTERVAL_SECONDS: int = int(os.getenv('HEARTBEAT_INTERVAL_SECONDS', '300'))

    # Validation / regeneration
    MAX_SHOT_REGENERATIONS: int = int(os.getenv('MAX_SHOT_REGENERATIONS', '1'))

    # Brand data and templates
    BRANDS_DIR: str = os.getenv('BRANDS_DIR', str(PACKAGE_ROOT / 'brands' / 'data'))
    TEMPLATE_MANIFEST: str = os.getenv(
        'TEMPLATE_MANIFEST', str(PACKAGE_ROOT / 'templates' / 'manifest.yaml')
    )

    # Compositor
    COMPOSITOR_DEBUG: bool = _env_bool('COMPOSITOR_DEBUG')
    BLANK_FRAME_MIN_BYTES: int = int(os.getenv('BLANK_FRAME_MIN_BYTES', '2048'))

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'SUPABASE_URL': cls.SUPABASE_URL,
            'SUPABASE_SERVICE_KEY': cls.SUPABASE_SERVICE_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)

    @staticmethod
    def load_yaml(path: str) -> Dict[str, Any]:
        """
        Load a YAML configuration file.

        Args:
            path: Path to the YAML file

        Returns:
            Parsed mapping (empty dict for an empty file)
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return data or {}
