"""Command-line interface for Sentilympics."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .core.config import settings
from .core.constants import FileConstants
from .core.errors import SentilympicsError, user_message
from .core.models import AnalysisResult
from .services.analysis import AnalysisOrchestrator
from .services.chat import ChatOrchestrator

logger = logging.getLogger(__name__)

EXIT_WORDS = {"exit", "quit"}


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT,
    )


def _read_text(path):
    if path:
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


def cmd_analyze(args) -> int:
    """Analyze command."""
    text = _read_text(args.file)
    if not text.strip():
        print("No review text provided!")
        return 1

    orchestrator = AnalysisOrchestrator()
    try:
        result = asyncio.run(orchestrator.analyze(text))
    except SentilympicsError as e:
        logger.error(f"Analysis failed: {e!r}")
        print(user_message(e))
        return 1

    print(result.to_json(indent=2))
    return 0


def _print_reply(message):
    print(f"\nassistant> {message.text}")
    if message.sources:
        print("Sources:")
        for idx, source in enumerate(message.sources, 1):
            print(f"  {idx}. {source.title} - {source.uri}")
    print()


async def _chat_loop(orchestrator: ChatOrchestrator):
    loop = asyncio.get_running_loop()
    print(f"assistant> {orchestrator.messages[0].text}\n")
    while True:
        line = await loop.run_in_executor(None, input, "you> ")
        if line.strip().lower() in EXIT_WORDS:
            return
        try:
            reply = await orchestrator.send(line)
        except SentilympicsError as e:
            print(user_message(e))
            continue
        if reply is not None:
            _print_reply(reply)


def cmd_chat(args) -> int:
    """Interactive chat command."""
    context = None
    if args.context:
        try:
            context = AnalysisResult.from_json(Path(args.context).read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error(f"Failed to load chat context from {args.context}: {e}")
            print(f"Could not load analysis context from {args.context}.")
            return 1

    orchestrator = ChatOrchestrator(context)
    try:
        asyncio.run(_chat_loop(orchestrator))
    except EOFError:
        print()
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Sentilympics - LLM customer review analysis")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Analyze customer reviews')
    analyze_parser.add_argument('file', nargs='?', help='Text file with reviews (stdin when omitted)')

    # Chat command
    chat_parser = subparsers.add_parser('chat', help='Chat with the CX assistant')
    chat_parser.add_argument('--context', help='AnalysisResult JSON file to ground the chat in')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    setup_logging()

    try:
        if args.command == 'analyze':
            code = cmd_analyze(args)
        else:
            code = cmd_chat(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
