import json
import logging

import click

from .backends import BackendError, describe_backend
from .config import BACKENDS, EngineConfig, hardware_workers, resolve_position, resolve_workers
from .extract import compute
from .reference import verify_digits


def _config(backend: str, threads: int, chunk_length: int, blocks: int, threads_per_block: int, lane_length: int) -> EngineConfig:
    try:
        return EngineConfig(
            backend=backend.lower().strip(),
            workers=resolve_workers(threads),
            chunk_length=chunk_length,
            blocks=blocks,
            threads_per_block=threads_per_block,
            lane_length=lane_length,
        )
    except ValueError as e:
        raise click.ClickException(str(e))


def _engine_options(f):
    options = [
        click.option("--threads", default=0, show_default=True, type=int, help="CPU workers per wave; <= 0 uses every core."),
        click.option("--backend", type=click.Choice(list(BACKENDS), case_sensitive=False), default="process", show_default=True),
        click.option("--chunk-length", default=100_000, show_default=True, type=int),
        click.option("--blocks", default=80, show_default=True, type=int),
        click.option("--threads-per-block", default=60, show_default=True, type=int),
        click.option("--lane-length", default=2_000, show_default=True, type=int),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _run(position: int, config: EngineConfig) -> str:
    try:
        return compute(position, config)
    except BackendError as e:
        raise click.ClickException(f"backend failure: {e}")


def _using(config: EngineConfig) -> str:
    if config.backend == "lanes":
        return f"{config.blocks} x {config.threads_per_block} GPU-style lanes"
    return f"{config.workers} CPU Threads"


@click.group(context_settings={"help_option_names": ["-h", "--help"], "auto_envvar_prefix": "PIHEX"})
def main():
    pass


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("position", required=False, type=int)
@_engine_options
@click.option("--verbose", "-v", is_flag=True)
def digit(position, threads, backend, chunk_length, blocks, threads_per_block, lane_length, verbose):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    position = resolve_position(position)
    click.echo("Bailey–Borwein–Plouffe Formula for Pi")
    config = _config(backend, threads, chunk_length, blocks, threads_per_block, lane_length)
    click.echo(f"Calculating Position: {position}, Using {_using(config)}")
    click.echo(f"Pi Estimation Hex: {_run(position, config)}")


@main.command()
@click.argument("position", type=int)
@click.option("--count", default=8, show_default=True, type=int)
@_engine_options
@click.option("--verbose", "-v", is_flag=True)
def verify(position, count, threads, backend, chunk_length, blocks, threads_per_block, lane_length, verbose):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    if position < 1:
        raise click.BadParameter("position must be >= 1", param_hint="POSITION")
    config = _config(backend, threads, chunk_length, blocks, threads_per_block, lane_length)
    digits = _run(position, config)
    ok, expected = verify_digits(position - 1, digits, count)
    click.echo(f"engine:    {digits}")
    click.echo(f"reference: {expected}")
    if not ok:
        raise click.ClickException(f"verification failed at position {position}")
    click.echo("ok")


@main.command()
@_engine_options
def info(threads, backend, chunk_length, blocks, threads_per_block, lane_length):
    config = _config(backend, threads, chunk_length, blocks, threads_per_block, lane_length)
    details = describe_backend(config)
    details["cpu_count"] = hardware_workers()
    click.echo(json.dumps(details, ensure_ascii=False))
