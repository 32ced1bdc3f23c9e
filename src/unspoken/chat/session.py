from __future__ import annotations

import logging
import sys
from typing import Iterator

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.text import Text

from unspoken.llm import ChatClient, ChatError

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
logger = logging.getLogger(__name__)

YOU = Text("You:", style="bold red")
ASSISTANT = Text("Assistant:", style="bold green")

HELP = "\n".join(
    [
        "/new                    Start a new conversation (keeps the system message)",
        "/history                Show the current conversation",
        "/exit                   Exit chat",
    ]
)


def _prompt_lines() -> Iterator[str]:
    session = PromptSession()
    with patch_stdout():
        while True:
            try:
                yield session.prompt("You: ")
            except (EOFError, KeyboardInterrupt):
                return


def _stdin_lines() -> Iterator[str]:
    for line in sys.stdin:
        yield line.rstrip("\n")


def _print_history(client: ChatClient) -> None:
    if not client.messages:
        console.print("Conversation is empty.")
        return
    for m in client.messages:
        label = {"system": "System:", "user": "You:", "assistant": "Assistant:"}[m.role]
        console.print(f"{label} {m.content}", markup=False, highlight=False, soft_wrap=True)


def run_chat(client: ChatClient, *, interactive: bool | None = None) -> None:
    """
    Read user turns until EOF and print each assistant reply.

    Uses a prompt_toolkit session on a terminal, plain stdin lines otherwise.
    A failed turn prints the error and the loop carries on.
    """
    if interactive is None:
        interactive = sys.stdin.isatty()
    lines = _prompt_lines() if interactive else _stdin_lines()
    if interactive:
        console.print("Type /help for commands.")

    for line in lines:
        text = line.strip()
        if not text:
            continue

        cmd = text.split(maxsplit=1)[0].lower()
        if cmd in {"/exit", "/quit"}:
            break
        if cmd == "/help":
            console.print(HELP, markup=False, highlight=False)
            continue
        if cmd == "/new":
            client.reset()
            console.print("New conversation.")
            continue
        if cmd == "/history":
            _print_history(client)
            continue
        # Anything else, including other lines starting with "/", is a query sent as typed.

        if not interactive:
            console.print(Text.assemble(YOU, " ", line), soft_wrap=True)
        try:
            reply = client.ask(line)
        except ChatError as e:
            logger.debug("ask failed: %r", e)
            err_console.print(Text.assemble(("Error:", "yellow"), " ", (str(e), "yellow")))
            continue
        console.print()
        console.print(Text.assemble(ASSISTANT, " ", reply), soft_wrap=True)
        console.print()

    console.print()
