from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from unspoken.chat.session import run_chat
from unspoken.config import ConfigError, resolve_config
from unspoken.llm import ChatClient

app = typer.Typer(
    add_completion=False,
    help="OpenAI chat API command line client. Command line options override the config file.",
)

err_console = Console(stderr=True, highlight=False)
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        from unspoken import __version__

        Console().print(__version__)
        raise typer.Exit()


@app.command()
def chat(
    url: Annotated[
        str | None,
        typer.Option("--url", "-u", help='API url. Example: "https://models.inference.ai.azure.com/".'),
    ] = None,
    model: Annotated[
        str | None, typer.Option("--model", "-m", help='Model. Example: "gpt-4o".')
    ] = None,
    system: Annotated[
        str | None,
        typer.Option(
            "--system",
            "-s",
            help='System message to initialize the model. Example: "You are a helpful assistant."',
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file location. Default: $HOME/.config/unspoken.toml.",
            dir_okay=False,
        ),
    ] = None,
    temperature: Annotated[
        float | None, typer.Option("--temperature", help="Sampling temperature.")
    ] = None,
    max_tokens: Annotated[
        int | None, typer.Option("--max-tokens", help="Max output tokens per reply.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Print version and exit."),
    ] = False,
) -> None:
    """Chat with a model; each line on stdin is one user turn."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO; keep it for --verbose only.
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        app_config = resolve_config(
            config_path=config,
            url=url,
            model=model,
            system_message=system,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except ConfigError as e:
        err_console.print(f"Error: {e}", markup=False, highlight=False)
        raise typer.Exit(code=2) from e

    logger.debug("Using %s with model %s", app_config.client.api_url, app_config.client.model)
    with ChatClient(app_config.api_key, app_config.client) as client:
        run_chat(client)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
