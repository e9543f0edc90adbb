"""Click CLI: loads config, routes models, runs the roundtable, prints and saves the result."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, SamplingConfig, load_config
from roundtable.briefs import (
    archive_file,
    ensure_dirs,
    input_from_mapping,
    parse_file,
    scan_inbox,
)
from roundtable.healthcheck import run_health_checks
from roundtable.invoker import ROUND1_OPTIONS, ROUND2_OPTIONS, AgentInvoker
from roundtable.models import (
    AdvancedRoundtableInput,
    AgentResponse,
    CompletionOptions,
    Platform,
    RoundtableInput,
    RoundtableResult,
)
from roundtable.output import print_result, print_round_summary, save_to_file
from roundtable.providers.base import AIProvider, ConfigurationError, ProviderError
from roundtable.roundtable import random_challenge, run_advanced_roundtable, run_roundtable
from roundtable.routing import AGENT_ROLE, SYNTHESIS_ROLE, ModelRouter
from roundtable.synthesis import SYNTHESIS_OPTIONS, Synthesizer
from roundtable.templates import get_template

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


class EmptyPromptError(RuntimeError):
    """Synthesis finished but produced no optimized prompt."""


@dataclass
class Engine:
    router: ModelRouter
    invoker: AgentInvoker
    synthesizer: Synthesizer
    challenge_probability: float


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _options(sampling: SamplingConfig | None, fallback: CompletionOptions) -> CompletionOptions:
    if sampling is None:
        return fallback
    return CompletionOptions(
        temperature=sampling.temperature,
        max_tokens=sampling.max_tokens,
        structured_output=fallback.structured_output,
    )


def build_engine(config: AppConfig, template_name: str | None = None) -> Engine:
    """Wire router, invoker and synthesizer from config.

    Raises:
        KeyError: If the synthesis template name is unknown.
        ConfigurationError: If a routed model uses an unknown sdk.
    """
    router = ModelRouter.from_config(config)
    invoker = AgentInvoker(
        router.provider_for(AGENT_ROLE),
        round1_options=_options(config.sampling.get("round1"), ROUND1_OPTIONS),
        round2_options=_options(config.sampling.get("round2"), ROUND2_OPTIONS),
    )
    synthesizer = Synthesizer(
        router.provider_for(SYNTHESIS_ROLE),
        template=get_template(template_name or config.synthesis.template),
        options=_options(config.sampling.get("synthesis"), SYNTHESIS_OPTIONS),
    )
    return Engine(router, invoker, synthesizer, config.synthesis.challenge_probability)


def routed_providers(router: ModelRouter) -> dict[str, AIProvider]:
    """One entry per distinct routed model, keyed by model name."""
    return {router.model_for(role).name: router.provider_for(role) for role in router.roles()}


def _check_providers(router: ModelRouter) -> None:
    """Ping every routed model; exit when any of them is unreachable."""
    console.print("\n[bold]Checking providers...[/bold]")
    results = asyncio.run(run_health_checks(routed_providers(router)))

    failed = False
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {short_err}")
            failed = True

    if failed:
        console.print(
            "\n[bold red]Error:[/bold red] A routed model failed the health check. "
            "Fix its API key or change `routing` in config/settings.yaml."
        )
        sys.exit(1)
    console.print()


def load_series(series_path: Path) -> dict[str, Any]:
    """Read a series-context YAML file (characters, settings, sora_settings, ...)."""
    with series_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise click.BadParameter(f"Series file must contain a mapping: {series_path}")
    return data


def compose_input(
    brief_text: str | None,
    meta: dict[str, Any],
    platform: str | None,
    series: dict[str, Any] | None,
    edits: str | None,
    guidance: str | None,
    shot_specs: tuple[str, ...],
    default_platform: str,
) -> RoundtableInput:
    """Merge series file, frontmatter and CLI flags into one roundtable input.

    Precedence: CLI flag > frontmatter > series file > config default.
    """
    data: dict[str, Any] = {"platform": default_platform}
    data.update(series or {})
    data.update(meta)
    if platform:
        data["platform"] = platform
    if edits:
        data["user_prompt_edits"] = edits
    if guidance:
        data["additional_guidance"] = guidance
    if shot_specs:
        data["shot_list"] = list(shot_specs)
    return input_from_mapping(data, brief=brief_text)


async def _run_single(
    roundtable_input: RoundtableInput,
    engine: Engine,
    output_dir: Path,
    slug_override: str | None = None,
) -> tuple[RoundtableResult, Path]:
    """Run one roundtable, print it, save the transcript.

    Raises:
        EmptyPromptError: After saving, if synthesis produced no prompt.
    """
    synthesizer = engine.synthesizer
    agent_model = engine.router.model_for(AGENT_ROLE)
    synthesis_model = engine.router.model_for(SYNTHESIS_ROLE)
    advanced = isinstance(roundtable_input, AdvancedRoundtableInput)

    brief_line = roundtable_input.brief.splitlines()[0]
    console.print(
        f"\n[bold cyan]Roundtable[/bold cyan] ({roundtable_input.platform}, "
        f"{'advanced' if advanced else 'standard'})"
    )
    console.print(f"Agents: {agent_model.model} | Synthesis: {synthesis_model.model} ({synthesizer.template.name})")
    console.print(f"Brief: [italic]{brief_line[:80]}{'...' if len(brief_line) > 80 else ''}[/italic]\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Round 1: gathering perspectives...", total=None)

        def on_round_complete(number: int, responses: list[AgentResponse]) -> None:
            progress.print(f"[green]OK[/green] Round {number} complete ({len(responses)} responses)")
            next_step = "Round 2: discussion..." if number == 1 else "Running synthesis..."
            progress.update(task, description=next_step)

        run = run_advanced_roundtable if advanced else run_roundtable
        result = await run(
            roundtable_input,
            engine.invoker,
            synthesizer,
            should_challenge=random_challenge(engine.challenge_probability),
            on_round_complete=on_round_complete,
        )

    print_round_summary(1, result.discussion.round1)
    print_round_summary(2, result.discussion.round2)
    print_result(result)

    saved_path = save_to_file(result, output_dir, slug_override=slug_override)
    console.print(f"\n[dim]Saved to: {saved_path}[/dim]")

    if not result.optimized_prompt:
        raise EmptyPromptError(f"Synthesis returned an empty prompt (transcript saved to {saved_path})")
    return result, saved_path


async def _run_inbox(
    engine: Engine,
    inbox_dir: Path,
    archive_dir: Path,
    output_dir: Path,
    platform_cli: str | None,
    series: dict[str, Any] | None,
    default_platform: str,
) -> None:
    """Process every brief in the inbox, oldest first.

    A failing brief is archived with a FAILED_ prefix and the loop moves on.
    """
    ensure_dirs(inbox_dir, archive_dir)
    files = scan_inbox(inbox_dir)

    if not files:
        click.echo("No files in inbox.")
        return

    for file_path in files:
        try:
            body, meta = parse_file(file_path)
            roundtable_input = compose_input(
                body or None, meta, platform_cli, series, None, None, (), default_platform,
            )
            _, saved = await _run_single(roundtable_input, engine, output_dir, slug_override=file_path.stem)
            archived = archive_file(file_path, archive_dir)
            click.echo(f"Processed: {file_path.name} -> {saved} (archived: {archived.name})")
        except Exception as e:
            logger.error("Failed: %s -- %s", file_path.name, e)
            archive_file(file_path, archive_dir, failed=True)


@click.command()
@click.argument("brief", required=False)
@click.option("--file", "brief_file", type=click.Path(exists=True, dir_okay=False),
              help="Read the brief (and optional frontmatter) from a .md file")
@click.option("--platform", type=click.Choice([p.value for p in Platform]), default=None,
              help="Target platform (default: from config)")
@click.option("--series", "series_file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="YAML file with series context: characters, settings, sora_settings, ...")
@click.option("--edits", default=None, help="Direct edits the final prompt must respect")
@click.option("--guidance", default=None, help="Additional creative guidance for the crew")
@click.option("--shot", "shots", multiple=True, help='Requested shot as "timing|description|camera" (repeatable)')
@click.option("--template", "template_name", default=None,
              help="Synthesis template: short_form, cinematic, ultra_detailed (default: from config)")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--inbox", "use_inbox", is_flag=True, default=False, help="Process all .md briefs in the inbox folder")
@click.option("--inbox-dir", "inbox_dir_override", default=None,
              help="Override inbox folder path; archives go to its archive/ subfolder")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    brief: str | None,
    brief_file: str | None,
    platform: str | None,
    series_file: str | None,
    edits: str | None,
    guidance: str | None,
    shots: tuple[str, ...],
    template_name: str | None,
    output_path: str | None,
    verbose: bool,
    use_inbox: bool,
    inbox_dir_override: str | None,
    skip_health_check: bool,
) -> None:
    """Roundtable -- a film crew of AI personas turns a brief into a video prompt.

    \b
    Examples:
      python -m roundtable.cli "A barista's first day on the job" --platform tiktok
      python -m roundtable.cli --file brief.md --template cinematic
      python -m roundtable.cli "Morning routine" --series series.yaml --shot "0-3s|Alarm rings|Close-up"
      python -m roundtable.cli --inbox --inbox-dir ./my_queue
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    try:
        engine = build_engine(config, template_name)
    except (KeyError, ConfigurationError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc.args[0]}")
        sys.exit(1)

    output_dir = Path(output_path) if output_path else config.defaults.output_dir
    series = load_series(Path(series_file)) if series_file else None

    if use_inbox:
        if not skip_health_check:
            _check_providers(engine.router)
        if inbox_dir_override:
            inbox_dir = Path(inbox_dir_override)
            archive_dir = inbox_dir / "archive"
        else:
            inbox_dir, archive_dir = config.inbox.dir, config.inbox.archive_dir
        asyncio.run(
            _run_inbox(
                engine=engine,
                inbox_dir=inbox_dir,
                archive_dir=archive_dir,
                output_dir=output_dir,
                platform_cli=platform,
                series=series,
                default_platform=config.defaults.platform,
            )
        )
        return

    meta: dict[str, Any] = {}
    slug_override = None
    if brief_file:
        body, meta = parse_file(Path(brief_file))
        brief_text = body or None
        slug_override = Path(brief_file).stem
    elif brief:
        brief_text = brief
    else:
        console.print("[bold red]Error:[/bold red] Provide a BRIEF argument, --file, or --inbox.")
        sys.exit(1)

    try:
        roundtable_input = compose_input(
            brief_text, meta, platform, series, edits, guidance, shots, config.defaults.platform,
        )
    except (ValueError, KeyError) as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid brief: {exc}")
        sys.exit(1)

    if not skip_health_check:
        _check_providers(engine.router)

    try:
        asyncio.run(_run_single(roundtable_input, engine, output_dir, slug_override=slug_override))
    except (EmptyPromptError, ProviderError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
