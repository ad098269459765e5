"""Ask the assistant a question with knowledge-base context."""

import asyncio
from datetime import date

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from cli.utils import get_components

console = Console()


@click.command()
@click.argument("message")
@click.option(
    "--due-date",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Expected due date (YYYY-MM-DD)",
)
@click.option("--warning", "warnings", multiple=True, help="Warning sign to mention (repeatable)")
@click.option("--show-prompt", is_flag=True, help="Print the system prompt sent to the model")
def ask(message: str, due_date, warnings: tuple[str, ...], show_prompt: bool):
    """Ask a pregnancy question."""
    from assistant import PregnancyContext
    from llm import LLMError

    c = get_components()
    context = PregnancyContext.from_due_date(due_date.date(), today=date.today(), warning_signs=list(warnings))

    try:
        with console.status("Thinking..."):
            reply = asyncio.run(c["assistant"].ask(message, context))
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)
    except LLMError as e:
        console.print(f"[red]LLM error:[/] {e}")
        raise SystemExit(1)

    console.print(f"[dim]{reply.context_summary}[/]")
    if reply.intent.intent is not None:
        console.print(f"[dim]intent: {reply.intent.intent.value} ({', '.join(reply.intent.keywords)})[/]")
    if show_prompt:
        console.print(Panel(reply.system_prompt, title="System prompt", border_style="dim"))
    console.print(Markdown(reply.content))
