"""Intent and symptom triage CLI commands."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components

console = Console()

URGENCY_STYLE = {
    "NORMAL": "green",
    "MONITOR": "cyan",
    "CALL_DOCTOR": "yellow",
    "EMERGENCY": "bold red",
}

_YES = {"y", "yes", "1", "true", "是"}
_NO = {"n", "no", "0", "false", "否"}


def parse_answers(raw: str) -> list[bool]:
    """Parse a comma-separated yes/no list such as ``y,n,n``."""
    answers = []
    for token in (t.strip().lower() for t in raw.split(",")):
        if not token:
            continue
        if token in _YES:
            answers.append(True)
        elif token in _NO:
            answers.append(False)
        else:
            raise click.BadParameter(f"'{token}' is not a yes/no answer", param_hint="--answers")
    return answers


@click.command()
@click.argument("text")
def intent(text: str):
    """Classify a message the way the assistant does before retrieval."""
    from knowledge import detect_intent

    result = detect_intent(text)
    if result.intent is None:
        console.print("[dim]No intent detected[/]")
        return

    console.print(f"[bold]Intent:[/] {result.intent.value}  [dim]({result.confidence.value})[/]")
    if result.keywords:
        console.print(f"[bold]Keywords:[/] {', '.join(result.keywords)}")


@click.command()
@click.argument("symptom_id")
@click.option("--answers", "-a", default=None, help="Comma-separated answers, e.g. y,n,n")
def triage(symptom_id: str, answers: str):
    """Walk a symptom's questions and print the recommended action."""
    from knowledge import evaluate_decision_path

    c = get_components(skip_assistant=True)
    symptom = c["search"].get_symptom_by_id(symptom_id)
    if symptom is None:
        console.print(f"[red]Unknown symptom:[/] {symptom_id}")
        known = [s.id for s in c["search"].list_symptoms()]
        if known:
            console.print(f"[dim]Known: {', '.join(known)}[/]")
        raise SystemExit(1)

    console.print(f"[bold]{symptom.symptom_name}[/]\n")
    if answers is None:
        values = [click.confirm(q, default=False) for q in symptom.questions]
    else:
        values = parse_answers(answers)
        table = Table(show_header=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Question")
        table.add_column("Answer")
        for i, question in enumerate(symptom.questions):
            answer = values[i] if i < len(values) else False
            table.add_row(str(i + 1), question, "是" if answer else "否")
        console.print(table)

    decision = evaluate_decision_path(symptom, values)
    style = URGENCY_STYLE.get(decision.urgency.value, "white")
    console.print(f"\n[{style}]{decision.urgency.value}[/]  {decision.suggestion}")

    if symptom.dad_actions:
        console.print("\n[bold]What you can do:[/]")
        for action in symptom.dad_actions:
            console.print(f"  • {action}")
