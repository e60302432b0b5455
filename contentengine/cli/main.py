"""
Main CLI entry point for ContentEngine
"""

import logging

import click

from .jobs import worker_command, enqueue_command, show_job_command
from .blueprint import blueprint_group
from .catalog import models_command, presets_command, brief_key_command, brands_command, pipeline_command


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    ContentEngine - Brand content generation pipeline

    Queue content jobs, run the worker, and validate or render shot
    blueprints locally.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )


# Register commands
cli.add_command(worker_command)
cli.add_command(enqueue_command)
cli.add_command(show_job_command)
cli.add_command(blueprint_group)
cli.add_command(models_command)
cli.add_command(presets_command)
cli.add_command(brief_key_command)
cli.add_command(brands_command)
cli.add_command(pipeline_command)


if __name__ == '__main__':
    cli()
