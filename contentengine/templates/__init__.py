"""
Prompt templates: brand builders, generic fallbacks and the resolver
"""

from .registry import TemplateRegistry, ResolvedTemplate, TemplateTier

__all__ = ['TemplateRegistry', 'ResolvedTemplate', 'TemplateTier']
