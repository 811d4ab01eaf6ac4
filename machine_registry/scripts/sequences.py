"""Operator CLI for sequence management.

    machine-registry generate <category_id> [--subcategory-id ID]
    machine-registry reformat <config_id> --old-template "{category}-{sequence}" [--dry-run]
    machine-registry swap-templates [--apply]
"""

import asyncio
from collections.abc import Awaitable, Coroutine
from typing import Any, TypeVar

import click

from machine_registry.db import async_session_maker, dispose_engine
from machine_registry.logging import setup_logging
from machine_registry.services.exceptions import ServiceError
from machine_registry.services.sequences.allocator import SequenceAllocator
from machine_registry.services.sequences.config_service import SequenceConfigChanges, SequenceConfigService
from machine_registry.services.sequences.reformat_service import ReformatOutcome, ReformatReport, ReformatService
from machine_registry.services.sequences.scope import SequenceScope
from machine_registry.services.sequences.template import swap_category_and_sequence

T = TypeVar("T")

_OUTCOME_COLORS = {
    ReformatOutcome.UPDATED: "green",
    ReformatOutcome.UNCHANGED: None,
    ReformatOutcome.UNDECODABLE: "yellow",
    ReformatOutcome.FAILED: "red",
}


async def _with_engine(coro: Awaitable[T]) -> T:
    try:
        return await coro
    finally:
        await dispose_engine()


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, converting service errors to click errors."""
    try:
        return asyncio.run(_with_engine(coro))
    except ServiceError as e:
        raise click.ClickException(f"{e.code}: {e.message}") from e


def _echo_report(report: ReformatReport, *, verbose: bool) -> None:
    if verbose:
        for item in report.items:
            arrow = item.new_identifier or "-"
            line = f"  {item.old_identifier} -> {arrow} [{item.outcome}]"
            if item.reason:
                line += f" {item.reason}"
            click.secho(line, fg=_OUTCOME_COLORS[item.outcome])

    prefix = "Would update" if report.dry_run else "Updated"
    click.echo(
        f"{prefix} {report.updated}, unchanged {report.unchanged}, "
        f"undecodable {report.undecodable}, failed {report.failed} (total {report.total})"
    )


@click.group()
def cli() -> None:
    """Machine registry sequence management."""
    setup_logging()


@cli.command()
@click.argument("category_id")
@click.option("--subcategory-id", default=None, help="Subcategory to allocate in")
def generate(category_id: str, subcategory_id: str | None) -> None:
    """Allocate and print the next identifier for a category."""

    async def _generate() -> str:
        async with async_session_maker() as session:
            return await SequenceAllocator(session).generate(SequenceScope(category_id, subcategory_id))

    click.echo(_run(_generate()))


@cli.command()
@click.argument("config_id")
@click.option("--old-template", required=True, help="Template the existing identifiers were generated with")
@click.option("--new-template", default=None, help="Target template (default: the config's current template)")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("-v", "--verbose", is_flag=True, help="List every machine")
def reformat(config_id: str, old_template: str, new_template: str | None, dry_run: bool, verbose: bool) -> None:
    """Rewrite identifiers of a config's machines to a new template."""

    async def _reformat() -> ReformatReport:
        async with async_session_maker() as session:
            config = await SequenceConfigService(session).get(config_id)
            return await ReformatService(session).reformat(config, old_template, new_template, dry_run=dry_run)

    _echo_report(_run(_reformat()), verbose=verbose)


@cli.command("swap-templates")
@click.option("--apply", "apply_changes", is_flag=True, help="Write changes (default is preview)")
@click.option("-v", "--verbose", is_flag=True, help="List every machine")
def swap_templates(apply_changes: bool, verbose: bool) -> None:
    """Move {sequence} in front of {category} in every config that has it the other way round.

    Existing identifiers of each changed config are reformatted to match.
    """

    async def _swap() -> int:
        async with async_session_maker() as session:
            config_service = SequenceConfigService(session)
            reformat_service = ReformatService(session)
            changed = 0

            for config in await config_service.list_configs():
                new_template = swap_category_and_sequence(config.template)
                if new_template is None:
                    continue
                changed += 1
                click.secho(f"{config.id}: {config.template} -> {new_template}", bold=True)

                if not apply_changes:
                    report = await reformat_service.reformat(config, config.template, new_template, dry_run=True)
                else:
                    result = await config_service.update(
                        config.id,
                        SequenceConfigChanges(template=new_template, updated_by="swap-templates"),
                    )
                    report = await reformat_service.reformat(result.config, result.previous_template)
                _echo_report(report, verbose=verbose)
            return changed

    changed = _run(_swap())
    if changed == 0:
        click.echo("No templates need swapping.")
    elif not apply_changes:
        click.secho(f"\n{changed} config(s) would change. Re-run with --apply to write.", fg="yellow")
