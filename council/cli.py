"""
Council CLI - Command line interface for the expert council.

Commands:
    - ask: Answer a query with a configured council
    - demo: Answer a query with the offline demo council
    - route: Show how experts rank for a query
    - check: Verify configuration
    - experts list / experts create: Manage expert definitions
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from council import __version__
from council.config import CouncilConfig, ProviderKind
from council.core.errors import CouncilError
from council.log import setup_logging
from council.swarm import DelegationStrategy, FinalAnswer, Lead, create_demo_lead

console = Console()

STRATEGIES = [s.value for s in DelegationStrategy]


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {error}")
    raise SystemExit(1)


def _load_config(path: str) -> CouncilConfig:
    return CouncilConfig.from_yaml(Path(path))


def _print_answer(result: FinalAnswer) -> None:
    experts = ", ".join(result.experts) or "none"
    console.print(Panel(
        result.content,
        title="[bold green]Response[/bold green]",
        subtitle=f"Experts: {experts}",
    ))

    tokens = result.token_usage.total_tokens if result.token_usage else 0
    console.print(
        f"\n[dim]Path: {result.path.value} | Confidence: {result.confidence:.2f} | Tokens: {tokens}[/dim]"
    )

    if result.tool_results:
        table = Table(title="Tool Calls")
        table.add_column("Tool", style="cyan")
        table.add_column("Status")
        table.add_column("Result")

        for tool_result in result.tool_results:
            status = "[green]ok[/green]" if tool_result.success else "[red]failed[/red]"
            output = tool_result.data if tool_result.success else tool_result.error
            table.add_row(tool_result.tool_name, status, str(output)[:60])

        console.print(table)


async def _answer(lead: Lead, query: str, strategy: Optional[DelegationStrategy]) -> FinalAnswer:
    try:
        with console.status("[bold green]Experts thinking..."):
            return await lead.answer(query, strategy=strategy)
    finally:
        await lead.aclose()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """
    Council - Multi-expert orchestration.

    Routes each query to specialized experts, runs them under a delegation
    strategy and merges their answers into one response.
    """
    setup_logging(verbose)


@main.command()
@click.argument("query")
@click.option("--config", "-c", default="council.yaml", help="Council configuration file")
@click.option("--strategy", "-s", type=click.Choice(STRATEGIES), default=None, help="Delegation strategy")
@click.option("--max-participants", "-k", type=int, default=None, help="Maximum experts per query")
@click.option("--json", "as_json", is_flag=True, help="Print the answer as JSON")
def ask(query: str, config: str, strategy: Optional[str], max_participants: Optional[int], as_json: bool):
    """
    Answer a query with a configured council.

    Example:
        council ask "What's the weather in Paris?" -s parallel
    """
    try:
        council_config = _load_config(config)
        if max_participants is not None:
            council_config.lead.max_participants = max_participants

        lead = Lead.from_config(council_config)
        chosen = DelegationStrategy(strategy) if strategy else None

        if not as_json:
            console.print(f"[bold]Query:[/bold] {query}\n")
        result = asyncio.run(_answer(lead, query, chosen))
    except (CouncilError, FileNotFoundError) as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        _print_answer(result)


@main.command()
@click.argument("query")
@click.option("--strategy", "-s", type=click.Choice(STRATEGIES), default="parallel", help="Delegation strategy")
def demo(query: str, strategy: str):
    """
    Answer a query with the offline demo council.

    No API keys needed: the weather, math and general experts run on
    scripted mock oracles.

    Example:
        council demo "What's the weather like? Also calculate 15 * 23"
    """
    console.print(Panel.fit(
        "[bold blue]Council[/bold blue] - Demo",
        subtitle=f"Strategy: {strategy}"
    ))
    console.print(f"[bold]Query:[/bold] {query}\n")

    try:
        lead = create_demo_lead(DelegationStrategy(strategy))
        result = asyncio.run(_answer(lead, query, None))
    except CouncilError as e:
        _fail(e)

    _print_answer(result)


@main.command()
@click.argument("query")
@click.option("--config", "-c", default=None, help="Council configuration file (demo council if omitted)")
def route(query: str, config: Optional[str]):
    """
    Show how every expert scores for a query.

    Example:
        council route "calculate the sum of these numbers"
    """
    try:
        lead = Lead.from_config(_load_config(config)) if config else create_demo_lead()
    except (CouncilError, FileNotFoundError) as e:
        _fail(e)

    ranking = lead.router.rank(query, lead.experts)
    limit = lead.config.max_participants
    selected = [expert for expert, score in ranking if score > 0.0][:limit]

    table = Table(title=f"Routing: {query[:60]}")
    table.add_column("#", style="dim")
    table.add_column("Expert", style="cyan")
    table.add_column("Domain", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Selected")

    for position, (expert, score) in enumerate(ranking, start=1):
        table.add_row(
            str(position),
            expert.name,
            expert.domain,
            f"{score:.2f}",
            "[green]✓[/green]" if expert in selected else "",
        )

    console.print(table)
    if not selected:
        console.print("[yellow]No expert matches; only the single strategy would answer.[/yellow]")


@main.command()
@click.option("--config", "-c", default="council.yaml", help="Council configuration file")
def check(config: str):
    """
    Verify the council configuration.

    Example:
        council check -c council.yaml
    """
    console.print("[bold]Checking configuration...[/bold]\n")

    try:
        council_config = _load_config(config)
    except (CouncilError, FileNotFoundError) as e:
        _fail(e)

    table = Table(title="Providers")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Model")
    table.add_column("Key")

    for provider in council_config.providers.values():
        has_key = provider.kind == ProviderKind.MOCK or bool(provider.resolve_api_key())
        table.add_row(
            provider.name,
            provider.kind.value,
            provider.model or "default",
            "✓" if has_key else "[red]✗ missing[/red]",
        )

    console.print(table)

    errors = council_config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]✗[/red] {error}")
        raise SystemExit(1)

    console.print(f"[green]✓[/green] Configuration valid ({len(council_config.load_experts())} experts)")


# =============================================================================
# EXPERT COMMANDS
# =============================================================================

@main.group()
def experts():
    """
    Expert definition commands.

    Each expert is one YAML file in the council's experts directory.
    """
    pass


@experts.command("list")
@click.option("--config", "-c", default="council.yaml", help="Council configuration file")
def experts_list(config: str):
    """
    List configured experts.

    Example:
        council experts list
    """
    try:
        council_config = _load_config(config)
        expert_configs = council_config.load_experts()
    except (CouncilError, FileNotFoundError) as e:
        _fail(e)

    table = Table(title="Configured Experts")
    table.add_column("Name", style="cyan")
    table.add_column("Domain", style="green")
    table.add_column("Provider")
    table.add_column("Tools")
    table.add_column("Keywords", style="dim")

    for expert in expert_configs:
        keywords = ", ".join(expert.keywords[:5])
        if len(expert.keywords) > 5:
            keywords += f" (+{len(expert.keywords) - 5})"

        table.add_row(
            expert.name,
            expert.domain,
            council_config.provider_for(expert) or "[red]none[/red]",
            ", ".join(expert.tools) or "-",
            keywords,
        )

    console.print(table)


@experts.command("create")
@click.argument("name")
@click.option("--domain", "-d", required=True, help="Expert domain (e.g., weather, math)")
@click.option("--output", "-o", default="experts", help="Output directory")
def experts_create(name: str, domain: str, output: str):
    """
    Create a new expert definition from template.

    Example:
        council experts create travel-expert --domain travel
    """
    output_path = Path(output)
    output_path.mkdir(parents=True, exist_ok=True)

    expert_file = output_path / f"{name}.yaml"

    if expert_file.exists():
        console.print(f"[red]Error:[/red] Expert '{name}' already exists")
        raise SystemExit(1)

    template = f'''# =============================================================================
# EXPERT: {name}
# =============================================================================

name: "{name}"
domain: "{domain}"
description: "Expert in {domain}"

keywords:
  - "{domain}"
  # Add more keywords...

confidence: 0.8
tools: []  # calculator, weather, echo
provider: null  # Defaults to the council's default_expert_provider

temperature: 0.7
max_tool_rounds: 5

system_prompt: |
  You are an expert in {domain}.

  Provide accurate, practical answers within your domain.
'''

    with open(expert_file, "w") as f:
        f.write(template)

    console.print(f"[green]✓[/green] Expert created: {expert_file}")
    console.print("  Edit the file to customize your expert configuration")


if __name__ == "__main__":
    main()
