"""
Brand data lookup
"""

from .registry import BrandKit, BrandRegistry

__all__ = ['BrandKit', 'BrandRegistry']
