"""Local plugin scripts that contribute extra template values.

A plugin is any ``<plugin_dir>/<name>.py`` exporting ``invoke(argument)``. The argument
is the value of the ``--<name>`` flag passed to ``draftpr create`` (None when absent).
``invoke`` returns a flat mapping, or an awaitable resolving to one, which is merged
into the ``netlify`` template namespace. Any other result is ignored with a warning.

    # .github/draft/jira.py
    def invoke(ticket):
        return {"jiraLink": f"https://acme.atlassian.net/browse/{ticket}"} if ticket else {}
"""

import asyncio
import importlib.util
import inspect
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from draftpr.errors import PluginExecutionFailed

ENTRY_POINT = "invoke"

err_console = Console(stderr=True, soft_wrap=True)


def discover_plugins(plugin_dir: Path) -> list[Path]:
    """Return plugin files sorted by name. Files starting with '_' are helpers, not plugins."""
    if not plugin_dir.is_dir():
        return []
    return sorted(p for p in plugin_dir.glob("*.py") if p.is_file() and not p.name.startswith("_"))


def parse_plugin_flags(args: Iterable[str]) -> dict[str, str]:
    """Parse leftover CLI args into a flag dict.

    Accepts ``--name value``, ``--name=value`` and bare ``--name`` (→ "true").
    Positional leftovers are ignored.
    """
    flags: dict[str, str] = {}
    pending: str | None = None
    for arg in args:
        if arg.startswith("--") and len(arg) > 2:
            if pending is not None:
                flags[pending] = "true"
            name, sep, value = arg[2:].partition("=")
            if sep:
                flags[name] = value
                pending = None
            else:
                pending = name
        elif pending is not None:
            flags[pending] = arg
            pending = None
    if pending is not None:
        flags[pending] = "true"
    return flags


def flag_for(plugin: Path, flags: Mapping[str, str]) -> str | None:
    key = plugin.stem
    if key in flags:
        return flags[key]
    return flags.get(key.replace("_", "-"))


def load_plugin(path: Path) -> Callable[[Any], Any]:
    """Import the plugin file and return its entry point."""
    spec = importlib.util.spec_from_file_location(f"draftpr_plugin_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise PluginExecutionFailed(f"Plugin {path.name} could not be loaded")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise PluginExecutionFailed(f"Plugin {path.name} failed to load: {exc}") from exc
    entry = getattr(module, ENTRY_POINT, None)
    if not callable(entry):
        raise PluginExecutionFailed(f"Plugin {path.name} does not define {ENTRY_POINT}(argument)")
    return entry


async def run_plugin(path: Path, argument: str | None) -> dict[str, Any]:
    entry = load_plugin(path)
    try:
        result = entry(argument)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise PluginExecutionFailed(f"Plugin {path.name} failed: {exc}") from exc

    if result is None:
        return {}
    if not isinstance(result, Mapping):
        err_console.print(
            f"[yellow]Warning:[/yellow] Plugin {escape(path.name)} returned {type(result).__name__}, "
            "not a mapping. Ignoring its result.",
            highlight=False,
        )
        return {}
    return dict(result)


def merge_contributions(contributions: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Shallow merge; later contributions win on key collisions."""
    merged: dict[str, Any] = {}
    for contribution in contributions:
        merged.update(contribution)
    return merged


async def collect_plugin_values(plugin_dir: Path, flags: Mapping[str, str]) -> dict[str, Any]:
    """Run every discovered plugin concurrently and merge results in discovery order."""
    plugins = discover_plugins(plugin_dir)
    results = await asyncio.gather(*(run_plugin(p, flag_for(p, flags)) for p in plugins))
    return merge_contributions(results)
