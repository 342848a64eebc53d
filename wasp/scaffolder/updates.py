"""Best-effort check for a newer release on PyPI."""

from __future__ import annotations

import httpx

from wasp.utils import console

PYPI_URL = "https://pypi.org/pypi/{distribution}/json"


async def fetch_latest_version(distribution: str, timeout: float = 5.0) -> str | None:
    """Return the latest published version of *distribution*, or ``None``.

    Network errors, non-200 responses and malformed payloads all yield
    ``None``; the update check must never get in the way of scaffolding.
    """
    url = PYPI_URL.format(distribution=distribution)
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=3.0)) as client:
            response = await client.get(url)
            if response.status_code != 200:
                return None
            data = response.json()
    except (httpx.HTTPError, ValueError):
        return None

    info = data.get("info") if isinstance(data, dict) else None
    if not isinstance(info, dict):
        return None
    latest = info.get("version")
    return latest if isinstance(latest, str) else None


async def check_for_updates(current_version: str, distribution: str) -> bool:
    """Print an upgrade notice when PyPI has a different version.

    Returns:
        ``True`` if a notice was printed.
    """
    latest = await fetch_latest_version(distribution)
    if latest is None or latest == current_version:
        return False

    console.print(f"\n[yellow]New version available! {current_version} -> {latest}[/yellow]")
    console.print(f"[cyan]Run: pip install --upgrade {distribution} to update[/cyan]\n")
    return True
