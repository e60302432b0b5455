"""
Catalog commands: models, brief presets, brands, pipeline
"""

import asyncio
from typing import Optional

import click

from ..brands import BrandRegistry
from ..core.models import ContentFormat
from ..services.brief_service import (
    BRIEF_PRESETS,
    BriefService,
    apply_brief_defaults,
    compute_brief_key,
    get_preset,
    list_presets,
)
from ..services.model_selector import ModelRegistry


@click.command('models')
@click.option('--format', '-f', 'content_format', type=click.Choice([f.value for f in ContentFormat]),
              help='Only models supporting this format')
def models_command(content_format: Optional[str]):
    """
    List generation models

    Examples:
        contentengine models
        contentengine models -f reel_kit
    """
    registry = ModelRegistry()
    models = registry.list_models()
    if content_format:
        models = [m for m in models if content_format in m["formats_supported"]]
        default = registry.select(content_format).key if models else None
    else:
        default = None

    click.echo(f"\n🎛️  Models ({len(models)})\n")
    for model in models:
        star = " ⭐ default" if model["key"] == default else ""
        cost = f"${model['cost_usd']:.3f}/run" if model.get("cost_usd") is not None else "cost n/a"
        click.echo(f"   {model['key']}{star}")
        click.echo(f"      {model['short_description']} ({model['cost_tier']}, {cost})")
        click.echo(f"      Formats: {', '.join(model['formats_supported'])}")
    click.echo()


@click.command('presets')
def presets_command():
    """
    List creative brief presets

    Examples:
        contentengine presets
    """
    for preset in list_presets():
        click.echo(f"   {preset['id']}: {preset['concept']}")


@click.command('brief-key')
@click.option('--brand', '-b', required=True)
@click.option('--goal')
@click.option('--topic')
@click.option('--audience')
@click.option('--style')
@click.option('--cache-preset', help='Store this preset brief under the key (jobs can then pass brief_key)')
def brief_key_command(brand, goal, topic, audience, style, cache_preset):
    """
    Print the cache key for a set of brief inputs

    Examples:
        contentengine brief-key -b nablinds --goal awareness --topic motorized
        contentengine brief-key -b nablinds --goal awareness --cache-preset luxury_crm_v1
    """
    brief_key = compute_brief_key(brand, goal, topic, audience, style)
    click.echo(brief_key)

    if cache_preset:
        if cache_preset not in BRIEF_PRESETS:
            raise click.BadParameter(f"unknown preset '{cache_preset}'", param_hint="--cache-preset")
        brief = apply_brief_defaults(get_preset(cache_preset))
        asyncio.run(BriefService().cache(brief_key, brief))
        click.echo(f"✅ Cached {cache_preset} as {brief_key}")


@click.command('brands')
def brands_command():
    """
    List brand kits available to templates

    Examples:
        contentengine brands
    """
    registry = BrandRegistry()
    keys = registry.list_brand_keys()
    if not keys:
        click.echo("No brand kits found.")
        return
    for key in keys:
        kit = registry.load(key)
        click.echo(f"🏢 {kit.display_name} ({key})")
        click.echo(f"   Positioning: {kit.positioning}")
        click.echo(f"   CTA: {kit.primary_cta}")


@click.command('pipeline')
def pipeline_command():
    """
    Show the content job pipeline nodes and their data flow

    Examples:
        contentengine pipeline
    """
    from ..pipelines.content_job.orchestrator import describe_pipeline

    for i, node in enumerate(describe_pipeline(), start=1):
        cost = " 💰" if node["provider_cost"] else ""
        click.echo(f"{i}. {node['node']}{cost}")
        click.echo(f"   reads:    {', '.join(node['inputs']) or '-'}")
        click.echo(f"   writes:   {', '.join(node['outputs']) or '-'}")
        click.echo(f"   services: {', '.join(node['services']) or '-'}")
