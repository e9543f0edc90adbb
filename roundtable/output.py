"""Rich console output and markdown transcript export for roundtable results."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from roundtable.context import format_shot
from roundtable.models import AgentResponse, RoundtableResult
from roundtable.personas import get_persona

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _preview(text: str, words: int = 50) -> str:
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def move_label(response: AgentResponse) -> str:
    """Describe what a round 2 response was doing, e.g. "responds to platform_expert"."""
    if response.is_challenge:
        return "challenge"
    if response.responding_to:
        return f"responds to {response.responding_to}"
    if response.building_on:
        return f"builds on {' and '.join(response.building_on)}"
    return ""


def print_round_summary(round_num: int, responses: list[AgentResponse]) -> None:
    """Print one panel per persona, bordered in the persona's color."""
    console.print(Rule(f"[bold cyan]Round {round_num}[/bold cyan]"))
    for resp in responses:
        persona = get_persona(resp.agent)
        title = f"[bold]{persona.display_name}[/bold]"
        label = move_label(resp)
        if label:
            title += f" ({label})"
        console.print(
            Panel(
                _preview(resp.response),
                title=title,
                subtitle=f"{resp.latency_sec:.1f}s",
                border_style=persona.color_tag,
            )
        )


def print_result(result: RoundtableResult) -> None:
    """Print the optimized prompt, breakdown and shot list."""
    console.print(Rule("[bold green]Optimized Prompt[/bold green]"))
    console.print(
        Text(
            f"Template: {result.synthesis_template} | "
            f"Characters: {result.character_count} | "
            f"Duration: {result.total_duration_sec:.1f}s",
            style="dim",
        )
    )
    console.print(Panel(result.optimized_prompt or "[italic]empty[/italic]", border_style="green"))

    if result.detailed_breakdown:
        console.print(Rule("[bold]Breakdown[/bold]"))
        for key, value in result.detailed_breakdown.items():
            if key == "hashtags":
                continue
            console.print(Markdown(f"**{key}**: {_breakdown_value(value)}"))

    if result.hashtags:
        console.print(Text(" ".join(f"#{t.lstrip('#')}" for t in result.hashtags), style="cyan"))

    if result.suggested_shots:
        table = Table(title="Suggested Shots")
        table.add_column("#", justify="right")
        table.add_column("Timing")
        table.add_column("Description")
        table.add_column("Camera")
        table.add_column("Lighting")
        for shot in result.suggested_shots:
            table.add_row(str(shot.order), shot.timing, shot.description, shot.camera, shot.lighting or "")
        console.print(table)


def _breakdown_value(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def format_markdown(result: RoundtableResult) -> str:
    """Render the full roundtable as a markdown document."""
    lines: list[str] = [
        f"# Roundtable: {result.brief.splitlines()[0][:80] if result.brief else 'untitled'}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Platform:** {result.platform}",
        f"**Template:** {result.synthesis_template}",
        f"**Duration:** {result.total_duration_sec:.1f}s",
        "",
        "## Brief",
        "",
        result.brief,
        "",
        "---",
        "",
    ]

    for number, label, responses in (
        (1, "Initial Perspectives", result.discussion.round1),
        (2, "Discussion", result.discussion.round2),
    ):
        lines += [f"## Round {number}: {label}", ""]
        for resp in responses:
            heading = get_persona(resp.agent).display_name
            move = move_label(resp)
            if move:
                heading += f" ({move})"
            lines += [f"### {heading}", "", resp.response, "", f"*Latency: {resp.latency_sec:.2f}s*", ""]

    lines += [
        "## Optimized Prompt",
        "",
        result.optimized_prompt,
        "",
        f"*Character count: {result.character_count}*",
        "",
    ]

    if result.detailed_breakdown:
        lines += ["## Breakdown", ""]
        for key, value in result.detailed_breakdown.items():
            if key != "hashtags":
                lines.append(f"- **{key}**: {_breakdown_value(value)}")
        lines.append("")

    if result.hashtags:
        lines += ["## Hashtags", "", " ".join(f"#{t.lstrip('#')}" for t in result.hashtags), ""]

    if result.suggested_shots:
        lines += ["## Suggested Shots", ""]
        lines += [f"- {format_shot(shot)}" for shot in result.suggested_shots]
        lines.append("")

    return "\n".join(lines)


def save_to_file(result: RoundtableResult, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the transcript as <timestamp>_<slug>.md in output_dir and return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(result.brief) or "roundtable"
    filepath = output_dir / f"{timestamp}_{slug}.md"

    filepath.write_text(format_markdown(result), encoding="utf-8")
    logger.info("Roundtable saved to: %s", filepath)
    return filepath
