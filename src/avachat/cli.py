"""CLI interface using typer."""

import asyncio
import json
import logging

import typer

from .config import settings

app = typer.Typer(
    name="avachat",
    help="Marketing advisor chat proxy with website analysis",
    no_args_is_help=True,
)


def _setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fetcher(proxy: bool, timeout: float | None):
    from .core import create_fetcher

    config = settings if timeout is None else settings.model_copy(update={"fetch_timeout": timeout})
    return create_fetcher(config, use_proxy=proxy or None)


async def _signals(url: str, proxy: bool, timeout: float | None) -> dict:
    """Fetch a URL and return its signal record (or failure) as a dict."""
    from .core import FetchFailure
    from .signals import extract_signals
    from .urls import normalize_url

    url = normalize_url(url)
    result = await _fetcher(proxy, timeout).fetch(url)
    if isinstance(result, FetchFailure):
        return {
            "url": result.url,
            "error": result.reason.value,
            "status": result.status,
            "detail": result.detail,
        }
    return extract_signals(result.text, result.url, result.content_format).to_dict()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
):
    """Run the chat HTTP server."""
    import uvicorn

    from .app import create_app

    _setup_logging()
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


@app.command()
def analyze(
    text: str = typer.Argument(..., help="Chat text that may mention a website"),
    proxy: bool = typer.Option(False, "--proxy", help="Fetch through the rendering proxy"),
    timeout: float = typer.Option(None, "--timeout", min=1.0, max=15.0, help="Fetch timeout in seconds (1-15)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug logging"),
):
    """Print the context block the advisor would receive for TEXT."""
    from .analysis import analyze_site

    _setup_logging(verbose)
    block = asyncio.run(analyze_site(
        text,
        _fetcher(proxy, timeout),
        min_content_length=settings.min_content_length,
    ))

    if block is None:
        typer.echo("No website found in the text.")
        raise typer.Exit(code=1)
    typer.echo(block)


@app.command()
def signals(
    url: str = typer.Argument(..., help="Website to analyze"),
    proxy: bool = typer.Option(False, "--proxy", help="Fetch through the rendering proxy"),
    timeout: float = typer.Option(None, "--timeout", min=1.0, max=15.0, help="Fetch timeout in seconds (1-15)"),
    output: str = typer.Option(None, "-o", "--output", help="Output file (JSON)"),
):
    """Fetch a single URL and show its extracted signals."""
    result = asyncio.run(_signals(url, proxy, timeout))

    if output:
        with open(output, "w") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        typer.echo(f"Saved to {output}")
    else:
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"avachat {__version__}")


if __name__ == "__main__":
    app()
