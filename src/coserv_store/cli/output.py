"""Rich terminal output for ingested CoSERV documents.

Renders a per-document summary of contributed relations and a short
listing of the environments and authorities found in the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from coserv_store.models.corim import CryptoKey, EnvironmentMap
    from coserv_store.models.relations import RelationBundle
    from coserv_store.storage.mem_store import MemCoservStore


def describe_environment(env: EnvironmentMap | None) -> str:
    """Short one-line label for an environment."""
    if env is None:
        return "-"
    parts: list[str] = []
    if env.class_ is not None:
        for name in ("vendor", "model", "class_id"):
            value = getattr(env.class_, name)
            if value is not None:
                parts.append(f"{name}={_short(value)}")
    if env.instance is not None:
        parts.append(f"instance={_short(env.instance)}")
    if env.group is not None:
        parts.append(f"group={_short(env.group)}")
    return " ".join(parts) or "-"


def describe_key(key: CryptoKey) -> str:
    """Short one-line label for a crypto key or authority."""
    return f"{key.type.value}:{_short(key.value)}"


def _short(value: object, limit: int = 24) -> str:
    if isinstance(value, bytes):
        text = value.hex()
    else:
        text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def render_summary(
    contributions: list[tuple[str, RelationBundle]],
    store: MemCoservStore,
    console: Console,
) -> None:
    """Render per-document relation counts and store totals.

    Args:
        contributions: (document name, bundle it contributed) pairs.
        store: The store every document was ingested into.
        console: Rich Console for output.
    """
    table = Table(box=box.SIMPLE, padding=(0, 2))
    table.add_column("Document", style="bold")
    table.add_column("rv", justify="right")
    table.add_column("ev", justify="right")
    table.add_column("evs", justify="right")

    for name, bundle in contributions:
        table.add_row(
            name,
            str(len(bundle.rv_list)),
            str(len(bundle.ev_list)),
            str(len(bundle.evs_list)),
        )
    table.add_row(
        "Total",
        str(len(store.iterate_rv())),
        str(len(store.iterate_ev())),
        str(len(store.iterate_evs())),
        style="bold",
    )

    console.print()
    console.print(table)


def render_relations(store: MemCoservStore, console: Console) -> None:
    """List each relation's environment and addition authorities."""
    table = Table(box=box.SIMPLE, padding=(0, 2))
    table.add_column("Kind")
    table.add_column("Environment")
    table.add_column("Claims", justify="right")
    table.add_column("Authorities")

    for rv in store.iterate_rv():
        table.add_row(
            "rv",
            describe_environment(rv.condition.environment),
            str(len(rv.condition.elements)),
            ", ".join(describe_key(k) for k in rv.addition.authorities) or "-",
        )
    for ev in store.iterate_ev():
        condition = ev.condition[0]
        table.add_row(
            "ev",
            describe_environment(condition.environment),
            str(len(condition.elements)),
            ", ".join(describe_key(k) for a in ev.addition for k in a.authorities) or "-",
        )

    console.print(table)
