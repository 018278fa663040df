"""Command-line interface for the paper aggregator."""

import asyncio
import json
from typing import Annotated, Any

import typer

from .config import create_service, load_config, load_profiles
from .config.loader import DEFAULT_CONFIG_PATH
from .papers.errors import AggregatorError
from .papers.models import SearchRequest, format_authors

app = typer.Typer(
    name="paper-aggregator",
    help="Search arXiv and Semantic Scholar through one interface.",
    add_completion=False,
)

ProfileOption = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Configuration profile (default: AGGREGATOR_PROFILE or dev)"),
]
FormatOption = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: text or json"),
]
SourceOption = Annotated[
    list[str],
    typer.Option("--source", "-s", help="Paper sources: all, arxiv, semantic (can specify multiple)"),
]
CategoryOption = Annotated[
    str,
    typer.Option("--category", "-c", help="arXiv category, or 'all' for no filter"),
]


def _run(params: dict[str, Any], profile: str | None, output_format: str) -> None:
    if output_format not in ("text", "json"):
        typer.echo("Error: Format must be one of: text, json", err=True)
        raise typer.Exit(1)

    try:
        request = SearchRequest.from_params(params)
        payload = asyncio.run(_handle(request, profile))
    except (AggregatorError, KeyError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output_format == "json":
        typer.echo(json.dumps(payload, indent=2))
    else:
        _print_papers(payload.get("papers", []))


async def _handle(request: SearchRequest, profile: str | None) -> dict[str, Any]:
    async with create_service(load_config(profile)) as service:
        return await service.handle(request)


def _print_papers(papers: list[dict[str, Any]]) -> None:
    if not papers:
        typer.echo("No papers found.")
        return

    typer.echo(f"Found {len(papers)} papers:\n")
    for i, p in enumerate(papers, 1):
        source_tag = "[arXiv]" if p["source"] == "arxiv" else "[SS]"
        typer.echo(f"{i}. {source_tag} {p['title']}")

        year = p.get("year") or (p.get("published") or "")[:4] or "N/A"
        line = f"   Year: {year} | Citations: {p.get('citations', 'N/A')}"
        if "relevanceScore" in p:
            line += f" | Relevance: {p['relevanceScore']}"
        if "trendingScore" in p:
            line += f" | Trending: {p['trendingScore']}"
        typer.echo(line)

        if p.get("authors"):
            typer.echo(f"   Authors: {format_authors(p['authors'])}")
        reason = p.get("personalizedReason") or p.get("trendingReason")
        if reason:
            typer.echo(f"   Why: {reason}")
        typer.echo(f"   URL: {p['url']}")
        typer.echo()


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search query for papers")] = "",
    category: CategoryOption = "cs.LG",
    sources: SourceOption = ["all"],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum number of results")] = 20,
    start: Annotated[int, typer.Option("--start", help="Result offset")] = 0,
    enhance: Annotated[bool, typer.Option("--enhance/--no-enhance", help="Attach enhancement fields")] = False,
    refresh: Annotated[bool, typer.Option("--refresh", help="Bypass cached results")] = False,
    profile: ProfileOption = None,
    output_format: FormatOption = "text",
):
    """
    Search every selected source and merge the results.

    Examples:

        # Search both sources
        paper-aggregator search "diffusion models"

        # arXiv only, any category
        paper-aggregator search "graph neural networks" -s arxiv -c all

        # Enhanced JSON output
        paper-aggregator search "LLM reasoning" --enhance --format json
    """
    _run(
        {
            "action": "search",
            "query": query,
            "category": category,
            "sources": sources,
            "max_results": limit,
            "start": start,
            "enhance": enhance,
            "refresh": refresh,
        },
        profile,
        output_format,
    )


@app.command()
def personalized(
    interests: Annotated[list[str], typer.Argument(help="Research interests to match")],
    sources: SourceOption = ["all"],
    profile: ProfileOption = None,
    output_format: FormatOption = "text",
):
    """
    Rank papers against a list of research interests.

    Example:

        paper-aggregator personalized "reinforcement learning" robotics
    """
    _run(
        {"action": "personalized", "interests": interests, "sources": sources},
        profile,
        output_format,
    )


@app.command()
def trending(
    query: Annotated[str, typer.Option("--query", "-q", help="Topic to look for")] = "",
    category: CategoryOption = "cs.LG",
    timeframe: Annotated[str, typer.Option("--timeframe", help="Reported timeframe label")] = "week",
    sources: SourceOption = ["all"],
    profile: ProfileOption = None,
    output_format: FormatOption = "text",
):
    """Show the top trending papers for a topic (default: machine learning)."""
    _run(
        {
            "action": "trending",
            "query": query,
            "category": category,
            "timeframe": timeframe,
            "sources": sources,
        },
        profile,
        output_format,
    )


@app.command()
def profiles():
    """List available configuration profiles."""
    config_file = load_profiles(DEFAULT_CONFIG_PATH)

    typer.echo("Available profiles:\n")
    for name, profile in config_file.profiles.items():
        typer.echo(f"  {name}")
        typer.echo(f"    Sources: {', '.join(profile.sources.providers)}")
        typer.echo(f"    Cache: {profile.cache.backend}")
        typer.echo(f"    LLM: {profile.llm.backend}")
        typer.echo()


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
