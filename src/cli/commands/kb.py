"""Knowledge base CLI commands."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components

console = Console()

SAFETY_STYLE = {
    "SAFE": "[green]SAFE[/]",
    "CAUTION": "[yellow]CAUTION[/]",
    "AVOID": "[red]AVOID[/]",
}

KIND_CHOICES = ["food", "symptom", "emotional", "emergency"]


def _print_stats(stats, version: str):
    table = Table(show_header=True, title=f"Knowledge base {version or '(unseeded)'}")
    table.add_column("Kind")
    table.add_column("Facts", justify="right")
    for kind, count in stats.as_dict().items():
        table.add_row(kind, str(count))
    console.print(table)


@click.group()
def kb():
    """Inspect and seed the bundled knowledge base."""


@kb.command("init")
@click.option("--force", is_flag=True, help="Reseed even if the stored version is current")
def kb_init(force: bool):
    """Create the knowledge database and load the bundled facts."""
    c = get_components(skip_assistant=True, force_seed=force)
    init = c["init"]

    if not init.success:
        error = init.report.error if init.report else None
        console.print(f"[red]Knowledge base init failed:[/] {error or 'unknown error'}")
        raise SystemExit(1)

    report = init.report
    if report and report.seeded:
        console.print(f"[green]Seeded[/] knowledge base v{init.version}")
    else:
        console.print(f"[dim]Knowledge base v{init.version} already current[/]")

    if report and report.skipped:
        console.print(f"[yellow]Skipped {len(report.skipped)} invalid record(s):[/]")
        for skipped in report.skipped:
            console.print(f"  {skipped.kind.value}[{skipped.index}]: {skipped.reason}")

    _print_stats(init.stats, init.version)


@kb.command("stats")
def kb_stats():
    """Show fact counts per kind."""
    c = get_components(skip_assistant=True)
    _print_stats(c["store"].stats(), c["store"].get_version() or "")


@kb.command("search")
@click.argument("kind", type=click.Choice(KIND_CHOICES))
@click.argument("query")
@click.option("-n", "--limit", type=int, default=None, help="Max results")
def kb_search(kind: str, query: str, limit: int):
    """Search one fact kind."""
    from knowledge import FactKind

    c = get_components(skip_assistant=True)
    result = c["search"].search(FactKind(kind), query, limit)

    if not result.items:
        console.print(f"[yellow]No {kind} facts match '{query}'[/]")
        return

    table = Table(show_header=True, title=f"{kind}: {query}")
    if kind == "food":
        table.add_column("Name")
        table.add_column("Category", style="dim")
        table.add_column("Safety")
        table.add_column("Reason")
        for item in result.items:
            table.add_row(
                item.name, item.category, SAFETY_STYLE.get(item.safety_level.value, item.safety_level.value),
                item.reason[:60],
            )
    elif kind == "symptom":
        table.add_column("ID", style="dim")
        table.add_column("Symptom")
        table.add_column("Questions", justify="right")
        for item in result.items:
            table.add_row(item.id, item.symptom_name, str(len(item.questions)))
    elif kind == "emotional":
        table.add_column("ID", style="dim")
        table.add_column("Scenario")
        table.add_column("Trigger")
        for item in result.items:
            table.add_row(item.id, item.scenario_name, item.trigger[:60])
    else:
        table.add_column("ID", style="dim")
        table.add_column("Emergency")
        table.add_column("First action")
        for item in result.items:
            first = item.immediate_actions[0] if item.immediate_actions else ""
            table.add_row(item.id, f"[red]{item.emergency_name}[/]", first)

    console.print(table)
    console.print(f"\n[dim]{result.total_matches} match(es)[/]")


@kb.command("food")
@click.argument("name")
def kb_food(name: str):
    """Look up one food by exact name."""
    c = get_components(skip_assistant=True)
    food = c["search"].get_food_by_name(name)
    if food is None:
        console.print(f"[yellow]No food named '{name}'[/]")
        raise SystemExit(1)

    console.print(f"[bold]{food.name}[/] {food.name_en}  {SAFETY_STYLE.get(food.safety_level.value)}")
    console.print(f"[dim]{food.category}[/]")
    console.print(f"\n{food.reason}")
    if food.dad_tip:
        console.print(f"\n[bold]Tip:[/] {food.dad_tip}")
    if food.trimester_notes:
        console.print(f"[bold]By trimester:[/] {food.trimester_notes}")
