"""``wasp-chat`` command-line entry point.

Usage::

    wasp-chat                     # interactive session
    wasp-chat What is your name?  # one-shot: the arguments form one message
"""

from __future__ import annotations

import asyncio
import sys

from wasp.chat.history import ConversationHistory
from wasp.chat.session import ChatSession
from wasp.config import Config
from wasp.utils import report_unhandled


async def run(args: list[str], config: Config) -> int:
    """Run a one-shot turn or an interactive session and return the exit code."""
    session = ChatSession(history=ConversationHistory(), config=config.chat)
    if args:
        result = await session.process_message(" ".join(args))
        return 0 if result is not None else 1

    await session.run_interactive()
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``wasp-chat``."""
    args = sys.argv[1:] if argv is None else argv
    config = Config.from_env()
    try:
        code = asyncio.run(run(args, config))
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as exc:
        report_unhandled(exc, show_traceback=config.debug)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
