"""
Job commands: run the worker, enqueue a job, inspect a job
"""

import asyncio
import json
from typing import Dict, Optional, Tuple

import click
from pydantic import ValidationError

from ..core.database import get_supabase_client
from ..core.models import ContentFormat, JobInput
from ..services.job_repository import JobRepository
from ..worker.queue import JobQueue


def parse_variables(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Parse repeated --var key=value options."""
    variables = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--var")
        key, value = pair.split("=", 1)
        variables[key.strip()] = value.strip()
    return variables


@click.command('worker')
@click.option('--concurrency', '-c', type=int, help='Number of concurrent consumers (default: WORKER_CONCURRENCY)')
def worker_command(concurrency: Optional[int]):
    """
    Run the content job worker

    Examples:
        contentengine worker
        contentengine worker -c 5
    """
    from ..worker.content_worker import main

    main(concurrency)


async def _enqueue(job_input: JobInput) -> str:
    supabase = get_supabase_client()
    job = await JobRepository(supabase).create_job(job_input)
    await JobQueue(supabase).enqueue(job.id, job_input)
    return job.id


@click.command('enqueue')
@click.option('--brand', '-b', required=True, help='Brand key')
@click.option('--format', '-f', 'content_format', required=True,
              type=click.Choice([f.value for f in ContentFormat]), help='Output format')
@click.option('--hook', help='Hook type (e.g. contrast, question)')
@click.option('--model', help='Model override key')
@click.option('--objective', default='awareness', show_default=True)
@click.option('--length', type=int, help='Length in seconds (video formats)')
@click.option('--aspect', help='Aspect ratio, e.g. 9:16')
@click.option('--collection', help='Brand collection key')
@click.option('--generation-id', help='Upstream generation record to merge')
@click.option('--blueprint', 'blueprint_file', type=click.Path(exists=True, dir_okay=False),
              help='Blueprint JSON file (reel_kit / wide_video_kit)')
@click.option('--brief-preset', help='Creative brief preset id')
@click.option('--preview', is_flag=True, help='Composite placeholders without provider calls')
@click.option('--var', 'variables', multiple=True, help='Template variable key=value (repeatable)')
def enqueue_command(brand, content_format, hook, model, objective, length, aspect, collection,
                    generation_id, blueprint_file, brief_preset, preview, variables):
    """
    Create a pending job and put it on the queue

    Examples:
        contentengine enqueue -b nablinds -f image_kit --var body="Sheer shades at dusk"
        contentengine enqueue -b nablinds -f reel_kit --blueprint reel.json --preview
    """
    try:
        payload = {
            "brand_key": brand,
            "format": content_format,
            "objective": objective,
            "hook_type": hook,
            "model_key": model,
            "length_seconds": length,
            "aspect_ratio": aspect,
            "collection": collection,
            "generation_id": generation_id,
            "brief_preset": brief_preset,
            "preview": preview,
            "variables": parse_variables(variables),
        }
        if blueprint_file:
            with open(blueprint_file, encoding="utf-8") as f:
                payload["blueprint"] = json.load(f)

        job_input = JobInput(**{k: v for k, v in payload.items() if v is not None})
        job_id = asyncio.run(_enqueue(job_input))

        click.echo(f"✅ Enqueued job {job_id}")
        click.echo(f"   Brand: {job_input.brand}  Format: {job_input.format.value}")

    except ValidationError as e:
        click.echo(f"❌ Invalid job input:\n{e}", err=True)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@click.command('job')
@click.argument('job_id')
def show_job_command(job_id: str):
    """
    Show a job's status, cost and assets

    Examples:
        contentengine job 7f0c...
    """
    try:
        repo = JobRepository(get_supabase_client())
        job = asyncio.run(repo.get_job(job_id))
        if job is None:
            click.echo(f"❌ Job '{job_id}' not found", err=True)
            return

        click.echo(f"\n{'='*60}")
        click.echo(f"🎬 Job {job.id}")
        click.echo(f"{'='*60}\n")
        click.echo(f"Status: {job.status.value}")
        click.echo(f"Brand: {job.brand}  Format: {job.format}")
        if job.model:
            click.echo(f"Model: {job.model}")
        if job.cost is not None:
            click.echo(f"Cost: ${job.cost:.4f}")
        if job.error_message:
            click.echo(f"Error: {job.error_message}")

        assets = asyncio.run(repo.list_assets(job_id))
        click.echo(f"\n📦 Assets ({len(assets)}):")
        for asset in assets:
            click.echo(f"   - {asset.type.value}: {asset.url}")
        click.echo()

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
