"""depreview command-line interface."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import click

from depreview import __version__
from depreview.config import Settings
from depreview.errors import FetchError
from depreview.logging_config import configure_logging
from depreview.models.annotations import Classification
from depreview.state import open_app_state

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from depreview.models.annotations import ReviewSummary
    from depreview.models.snapshot import PackageResult, PackageSnapshot
    from depreview.state import AppState

_MARKERS = {
    Classification.OK: "✔",
    Classification.WARN: "⚠",
    Classification.DANGER: "✖",
    Classification.UNSET: " ",
}


def _run(settings: Settings, action: Callable[[AppState], Awaitable[int]]) -> None:
    async def runner() -> int:
        async with open_app_state(settings) as state:
            return await action(state)

    code = asyncio.run(runner())
    if code:
        raise SystemExit(code)


def _fmt_date(value: datetime | None) -> str:
    return value.date().isoformat() if value is not None else "-"


def _fmt_peers(peers: dict[str, str] | None) -> str:
    if not peers:
        return "-"
    return ", ".join(f"{name}: {rng}" for name, rng in peers.items())


def _echo_snapshot(snapshot: PackageSnapshot, state: AppState) -> None:
    level = state.store.classification(snapshot.name)
    note = state.store.note(snapshot.name)
    header = f"[{_MARKERS[level]}] {snapshot.name}"
    if note:
        header += f"  ({note})"
    click.echo(header)
    click.echo(f"    npm   {snapshot.link}")
    if snapshot.repository_link:
        click.echo(f"    repo  {snapshot.repository_link}")
    rows = [
        ("current", snapshot.version, snapshot.version_published, snapshot.peer_dependencies),
        (
            "next",
            snapshot.next_version,
            snapshot.next_version_published,
            snapshot.next_version_peer_dependencies,
        ),
        (
            "latest",
            snapshot.latest_version,
            snapshot.latest_version_published,
            snapshot.latest_version_peer_dependencies,
        ),
    ]
    for label, version, published, peers in rows:
        click.echo(
            f"    {label:<8}{version or '-':<16}{_fmt_date(published):<12}{_fmt_peers(peers)}"
        )


def _echo_results(results: list[PackageResult], state: AppState) -> None:
    for result in results:
        if result.snapshot is not None:
            _echo_snapshot(result.snapshot, state)
        elif result.error is not None:
            click.echo(f"[!] {result.name}: {result.error.message} ({result.error.code})")


def _results_json(results: list[PackageResult], state: AppState) -> str:
    payload = []
    for result in results:
        item = result.model_dump(mode="json")
        item["classification"] = state.store.classification(result.name).value
        item["note"] = state.store.note(result.name)
        payload.append(item)
    return json.dumps(payload, indent=2)


def _echo_summary(summary: ReviewSummary) -> None:
    for title, items in (("OK", summary.ok), ("Warn", summary.warn), ("Danger", summary.danger)):
        click.echo(f"{title} ({len(items)})")
        if not items:
            click.echo("    None")
        for item in items:
            click.echo(f"    {item.name} ({item.note})" if item.note else f"    {item.name}")


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context) -> None:
    """depreview - review package.json dependencies against the npm registry."""
    settings = Settings()
    configure_logging(settings.logging)
    ctx.obj = settings


@main.command()
@click.argument("manifest", type=click.File("r", encoding="utf-8"), required=False)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("--strict", is_flag=True, help="Fail the whole run if any lookup fails")
@click.pass_obj
def check(settings: Settings, manifest: Any, as_json: bool, strict: bool) -> None:
    """Resolve MANIFEST (or the stored manifest) against the registry."""
    text = manifest.read() if manifest is not None else None

    async def action(state: AppState) -> int:
        session = state.session
        try:
            if text is None:
                results = await session.refresh(strict=strict)
            else:
                results = await session.update_manifest(text, strict=strict)
        except FetchError as exc:
            click.echo(f"Lookup failed for {exc.package}: {exc.message}", err=True)
            return 1
        if not session.valid or results is None:
            click.echo("Invalid JSON", err=True)
            return 1
        if as_json:
            click.echo(_results_json(results, state))
        else:
            _echo_results(results, state)
        return 0

    _run(settings, action)


@main.command()
@click.argument("name")
@click.argument(
    "level",
    type=click.Choice([c.value for c in Classification if c is not Classification.UNSET]),
)
@click.pass_obj
def mark(settings: Settings, name: str, level: str) -> None:
    """Toggle the classification of package NAME."""

    async def action(state: AppState) -> int:
        new_value = await state.store.toggle_classification(name, Classification(level))
        click.echo(f"{name}: {new_value.value}")
        return 0

    _run(settings, action)


@main.command()
@click.argument("name")
@click.argument("text")
@click.pass_obj
def note(settings: Settings, name: str, text: str) -> None:
    """Set the note for package NAME."""

    async def action(state: AppState) -> int:
        await state.store.set_note(name, text)
        return 0

    _run(settings, action)


@main.command()
@click.argument("manifest", type=click.File("r", encoding="utf-8"), required=False)
@click.pass_obj
def summary(settings: Settings, manifest: Any) -> None:
    """Resolve the manifest and list packages grouped by classification."""
    text = manifest.read() if manifest is not None else None

    async def action(state: AppState) -> int:
        session = state.session
        if text is None:
            await session.refresh()
        else:
            await session.update_manifest(text)
        if not session.valid:
            click.echo("Invalid JSON", err=True)
            return 1
        _echo_summary(session.summary())
        return 0

    _run(settings, action)


@main.command()
@click.confirmation_option(prompt="Clear the manifest, all classifications and all notes?")
@click.pass_obj
def clear(settings: Settings) -> None:
    """Reset the stored manifest, classifications and notes."""

    async def action(state: AppState) -> int:
        await state.session.clear_all()
        click.echo("Cleared")
        return 0

    _run(settings, action)
