"""
Blueprint commands: validate and render locally
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, Optional

import click
from pydantic import ValidationError

from ..brands import BrandRegistry
from ..core.models import Blueprint, CompactCreativeBrief, IntentCategory
from ..services.brief_service import apply_brief_defaults, get_preset
from ..services.compositor_service import CompositorService, ShotMedia, resolve_end_frame
from ..services.ffmpeg_service import FFmpegService
from ..validation.blueprint import validate_blueprint
from ..validation.narrative import describe_narrative_constraints


def load_blueprint(path: str) -> Blueprint:
    with open(path, encoding="utf-8") as f:
        return Blueprint(**json.load(f))


def build_brief(intent: Optional[str], preset: Optional[str]) -> Optional[CompactCreativeBrief]:
    if preset:
        brief = get_preset(preset)
        if intent:
            brief = brief.model_copy(update={"intent_category": IntentCategory(intent)})
        return apply_brief_defaults(brief)
    if intent:
        return apply_brief_defaults(CompactCreativeBrief(intentCategory=intent))
    return None


@click.group('blueprint')
def blueprint_group():
    """Validate and render shot blueprints"""
    pass


@blueprint_group.command('validate')
@click.argument('blueprint_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--intent', type=click.Choice([i.value for i in IntentCategory]),
              help='Intent category (default: growth, or the preset\'s)')
@click.option('--brief-preset', help='Creative brief preset id')
@click.option('--json', 'as_json', is_flag=True, help='Print the full report as JSON')
def validate_command(blueprint_file: str, intent: Optional[str], brief_preset: Optional[str], as_json: bool):
    """
    Validate a blueprint without spending provider cost

    Examples:
        contentengine blueprint validate reel.json --intent lead_gen
    """
    try:
        blueprint = load_blueprint(blueprint_file)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        click.echo(f"❌ Could not load blueprint: {e}", err=True)
        sys.exit(1)

    result = validate_blueprint(blueprint, brief=build_brief(intent, brief_preset))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(f"\n{'='*60}")
        click.echo(f"📋 Blueprint: {len(blueprint.shots)} shots, {blueprint.duration_seconds:g}s "
                   f"@ {blueprint.fps}fps ({result.intent.value})")
        click.echo(f"{'='*60}\n")

        for violation in result.timeline + result.contract:
            click.echo(f"   ❌ {violation.reason}")
        for gate in result.gate_failures:
            marker = "🔁" if gate.can_retry else "❌"
            click.echo(f"   {marker} {gate.reason}")
        if result.narrative is not None and not result.narrative.passed:
            click.echo(f"   ❌ Narrative: {result.narrative.summary()}")

        click.echo(f"\n{'✅ Valid' if result.passed else '❌ Invalid'}\n")

    if not result.passed:
        sys.exit(1)


@blueprint_group.command('constraints')
@click.option('--intent', type=click.Choice([i.value for i in IntentCategory]), default='growth',
              show_default=True)
def constraints_command(intent: str):
    """
    Print the beat, pacing and CTA constraints for an intent

    Examples:
        contentengine blueprint constraints --intent authority
    """
    click.echo(describe_narrative_constraints(IntentCategory(intent)))


@blueprint_group.command('render')
@click.argument('blueprint_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='composite.mp4', show_default=True, type=click.Path(dir_okay=False))
@click.option('--brand', '-b', default='default', show_default=True, help='Brand key for the end frame')
@click.option('--clips-dir', type=click.Path(exists=True, file_okay=False),
              help='Directory of <shotId>.mp4 clips (placeholders are used when omitted)')
@click.option('--music', type=click.Path(exists=True, dir_okay=False), help='Music bed')
@click.option('--debug', is_flag=True, help='Check each shot midpoint for blank frames')
def render_command(blueprint_file: str, output: str, brand: str, clips_dir: Optional[str],
                   music: Optional[str], debug: bool):
    """
    Render a blueprint to MP4 with local clips or placeholders

    Examples:
        contentengine blueprint render reel.json -o preview.mp4
        contentengine blueprint render reel.json --clips-dir clips/ --debug
    """
    try:
        blueprint = load_blueprint(blueprint_file)
        kit = BrandRegistry().load(brand)

        media: Dict[str, ShotMedia] = {}
        if clips_dir:
            for shot in blueprint.shots:
                clip = Path(clips_dir) / f"{shot.shot_id}.mp4"
                if clip.is_file():
                    media[shot.shot_id] = ShotMedia(clip_path=clip)

        end_frame = resolve_end_frame(blueprint, kit.positioning, kit.primary_cta, kit.display_name)
        compositor = CompositorService(FFmpegService())
        result = asyncio.run(compositor.render(
            blueprint,
            media,
            Path(output).resolve(),
            end_frame=end_frame,
            music_path=Path(music) if music else None,
            preview=not media,
            debug=debug,
        ))

        click.echo(f"✅ Rendered {result.duration_seconds:.2f}s to {result.path}")
        for check in result.frame_checks:
            marker = "⚠️ " if check.possibly_blank else "✓"
            click.echo(f"   {marker} {check.shot_id} @ {check.at_seconds:.2f}s: {check.byte_size} bytes")

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
