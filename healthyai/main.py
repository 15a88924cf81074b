"""HealthyAI entry point."""

import asyncio
import logging

from healthyai.chat.engine import ChatEngine
from healthyai.chat.store import SessionStore
from healthyai.cli import ChatCLI, QuitRequested
from healthyai.config import settings
from healthyai.knowledge.store import KnowledgeStore
from healthyai.llm.client import OllamaClient
from healthyai.storage import SQLiteStorage

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_engine() -> ChatEngine:
    storage = SQLiteStorage()
    return ChatEngine(
        sessions=SessionStore(storage),
        knowledge=KnowledgeStore(storage),
        client=OllamaClient(),
    )


async def run() -> None:
    engine = build_engine()
    await engine.start()

    if engine.client.available_models:
        logger.info("Installed models: %s", ", ".join(engine.client.available_models))
    else:
        logger.warning(
            "Ollama not reachable at %s — chat will report errors until it is running",
            settings.ollama_base_url,
        )
    logger.info("Starting HealthyAI with model %s...", engine.client.selected_model)

    cli = ChatCLI(engine)
    print("HealthyAI ready. Type /help for commands.")
    while True:
        try:
            line = await asyncio.to_thread(input, cli.prompt())
        except EOFError:
            break
        try:
            output = await cli.handle_line(line)
        except QuitRequested:
            break
        if output:
            print(output)


def main() -> None:
    """Start the interactive chat."""
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
