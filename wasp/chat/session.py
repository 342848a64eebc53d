"""Turn executor for the chat REPL.

A session is either ``IDLE`` (waiting for input) or ``PROCESSING`` (the build
script is running).  Control commands are answered while idle; any other
non-blank input becomes a turn:

1. append the user message to the history,
2. write the whole history to the request file,
3. run the build script and wait for it,
4. print its filtered stderr and stdout,
5. read, classify and print the response,
6. append the assistant's content to the history.

A failed turn is reported and the session goes back to ``IDLE``; the user
message stays in the history.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from rich.markup import escape

from wasp.chat.build_output import filter_build_messages
from wasp.chat.history import ConversationHistory
from wasp.chat.response import ParsedResponse, format_response, parse_response
from wasp.chat.runner import BuildInvoker, ShellBuildInvoker
from wasp.config import ChatConfig
from wasp.errors import FilesystemError, WaspError
from wasp.utils import console, print_error, print_warning, read_text, save_json

EXIT_COMMAND = "/exit"
CLEAR_COMMAND = "/clear"
HISTORY_COMMAND = "/history"

HELP_TEXT = """[bold]UOMI Development Environment[/bold]
Type your messages. Use these commands:
/clear - Clear conversation history
/history - Show conversation history
/exit - Exit the program
"""


class SessionState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


async def read_console_input() -> str:
    """Prompt on the console without blocking the event loop."""
    return await asyncio.to_thread(console.input, "[green]You:[/green] ")


class ChatSession:
    """Drives conversation turns against the external build script.

    Args:
        history: Conversation history the session appends to.
        invoker: Runs the build script; defaults to :class:`ShellBuildInvoker`.
        config: Request/response file locations and build settings.
    """

    def __init__(
        self,
        history: ConversationHistory | None = None,
        invoker: BuildInvoker | None = None,
        config: ChatConfig | None = None,
    ) -> None:
        self.config = config or ChatConfig()
        self.history = history if history is not None else ConversationHistory()
        self.invoker = invoker or ShellBuildInvoker(self.config)
        self.state = SessionState.IDLE

    # -- Input dispatch ------------------------------------------------------

    async def handle_input(self, text: str) -> bool:
        """Handle one line of user input.

        Returns:
            ``False`` when the session should end, ``True`` otherwise.
        """
        command = text.strip().lower()
        if command == EXIT_COMMAND:
            return False
        if command == CLEAR_COMMAND:
            self.history.clear()
            print_warning("Conversation history cleared")
            return True
        if command == HISTORY_COMMAND:
            console.print("[blue]Conversation History:[/blue]")
            console.print(escape(self.history.render()))
            return True
        if not command:
            return True

        await self.process_message(text)
        return True

    async def run_interactive(
        self, read_input: Callable[[], Awaitable[str]] = read_console_input
    ) -> None:
        """Prompt for input until ``/exit``, end of input or Ctrl-C."""
        console.print(HELP_TEXT)
        while True:
            try:
                text = await read_input()
            except (EOFError, KeyboardInterrupt):
                console.print()
                return
            if not await self.handle_input(text):
                return

    # -- Turns ---------------------------------------------------------------

    async def process_message(self, message: str) -> ParsedResponse | None:
        """Run one conversation turn.

        Returns:
            The parsed response, or ``None`` if the turn failed.
        """
        self.state = SessionState.PROCESSING
        try:
            return await self._run_turn(message)
        except (WaspError, OSError) as exc:
            print_error(f"Error: {exc}")
            return None
        finally:
            self.state = SessionState.IDLE

    async def _run_turn(self, message: str) -> ParsedResponse:
        self.history.append("user", message)
        request_path = self.config.input_path
        response_path = self.config.output_path
        await save_json(self.history.to_payload(), request_path)

        console.print("\n[cyan]Executing WASM...[/cyan]")
        output = await self.invoker.invoke_build(request_path, response_path)

        errors = filter_build_messages(output.stderr)
        if errors:
            console.print(f"[red]Errors:[/red]\n{escape(errors)}")
        logs = filter_build_messages(output.stdout)
        if logs:
            console.print(f"[bold]Logs:[/bold]\n{escape(logs)}")

        try:
            raw = await read_text(response_path)
        except OSError as exc:
            raise FilesystemError(f"Cannot read response file {response_path}: {exc}") from exc

        parsed = parse_response(raw)
        console.print(format_response(parsed))
        self.history.append("assistant", parsed.content)
        return parsed
