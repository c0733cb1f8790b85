"""CLI entry point for the property chatbot.

This provides a simple terminal-based chat interface for trying a tenant's
chatbot against a local seed file. For production, use the FastAPI server
(src/server.py).

Usage:
    uv run python -m src.main --tenant agency-1 --seed units.json
    uv run python -m src.main --tenant agency-1 --seed units.json --debug
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from src.orchestrator import create_orchestrator
from src.services.storage import InMemoryTenantStore

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    root_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("src").setLevel(logging.DEBUG if debug else logging.INFO)


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Realty AI property chatbot CLI")
    parser.add_argument("--tenant", required=True, help="Agency (tenant) id to chat as")
    parser.add_argument(
        "--seed",
        help="JSON file with 'agencies' and 'units' to load into an in-memory store",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    store = InMemoryTenantStore.from_json(args.seed) if args.seed else None
    orchestrator = create_orchestrator(store)
    chatbot = orchestrator.chatbot

    print("\n" + "=" * 60)
    print(f"  Realty AI - Property Chatbot ({args.tenant})")
    print("=" * 60)
    print("  Type your message and press Enter.")
    print("  Commands: 'quit' to exit, 'new' to clear the conversation.")
    print("=" * 60 + "\n")

    history: list[dict[str, str]] = []
    logger.info("Started conversation for tenant %s", args.tenant)

    while True:
        try:
            user_input = input("Tú: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n¡Hasta luego!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("exit", "quit", "q", "salir"):
            print("\n¡Hasta luego!")
            break

        if user_input.lower() == "new":
            history.clear()
            print("\n>> Conversation cleared.\n")
            continue

        try:
            reply = chatbot.run_turn(args.tenant, user_input, history)
        except KeyboardInterrupt:
            print("\n\n¡Hasta luego!")
            break
        except Exception as e:
            logger.exception("Error processing message")
            print(f"\nAsistente: Lo siento, algo salió mal: {e}")
            print("     Intenta de nuevo o escribe 'new' para empezar de cero.\n")
            continue

        history.append({"role": "user", "content": user_input})
        history.append({"role": "assistant", "content": reply})
        print(f"\nAsistente: {reply}\n")


if __name__ == "__main__":
    main()
