"""Slash-command front end over ChatEngine.

Each input line is either a question for the active session or a
``/command``. ``handle_line`` returns the text to print, which keeps the
command layer testable without a terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING

from healthyai.errors import SendInProgressError, ValidationError

if TYPE_CHECKING:
    from healthyai.chat.engine import ChatEngine

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /new [folder_id]     start a new chat (optionally inside a folder)
  /list                show chats grouped by recency and folder
  /open <chat_id>      switch to a chat
  /rename <title>      rename the current chat
  /delete              delete the current chat
  /reset               clear the current chat history
  /folder <name>       create a folder
  /folders             list folders
  /move <folder_id|none>  move the current chat
  /rmfolder <folder_id>   delete a folder and its chats
  /models              refresh and list installed models
  /model <name>        switch model
  /pull [name]         download a model
  /kb on|off|refresh   control knowledge-base augmentation
  /export <path>       write the knowledge base to a JSON file
  /import <path>       replace the knowledge base from a JSON file
  /help                this text
  /quit                exit"""

Handler = Callable[[str], Awaitable[str]]


class QuitRequested(Exception):
    """Raised by ``/quit`` to end the REPL."""


class ChatCLI:
    def __init__(self, engine: ChatEngine) -> None:
        self.engine = engine
        self._commands: dict[str, Handler] = {
            "new": self._new,
            "list": self._list,
            "open": self._open,
            "rename": self._rename,
            "delete": self._delete,
            "reset": self._reset,
            "folder": self._folder,
            "folders": self._folders,
            "move": self._move,
            "rmfolder": self._rmfolder,
            "models": self._models,
            "model": self._model,
            "pull": self._pull,
            "kb": self._kb,
            "export": self._export,
            "import": self._import,
            "help": self._help,
            "quit": self._quit,
        }

    @property
    def _sessions(self):
        return self.engine.sessions

    def prompt(self) -> str:
        return f"[{self._sessions.active.title}] > "

    async def handle_line(self, line: str) -> str:
        line = line.strip()
        if not line:
            return ""
        if not line.startswith("/"):
            return await self._ask(line)

        name, _, args = line[1:].partition(" ")
        handler = self._commands.get(name.lower())
        if handler is None:
            return f"Unknown command /{name}. Type /help for options."
        try:
            return await handler(args.strip())
        except ValidationError as exc:
            return f"Error: {exc}"
        except LookupError as exc:
            return f"Not found: {exc}"

    async def _ask(self, text: str) -> str:
        session_id = self._sessions.active_id
        try:
            reply = await self.engine.send_message(session_id, text)
        except SendInProgressError:
            return "Still waiting for the previous answer in this chat."
        return reply.content if reply else ""

    # -- Sessions --------------------------------------------------------------

    async def _new(self, args: str) -> str:
        session = await self._sessions.create_session(args or None)
        return f"Started {session.id}"

    async def _list(self, args: str) -> str:
        lines = []
        active = self._sessions.active_id
        for group in self._sessions.group_for_display():
            lines.append(f"{group.label}:")
            lines.extend(
                f"  {'*' if s.id == active else ' '} {s.id}  {s.title}" for s in group.sessions
            )
        for folder in self._sessions.list_folders():
            lines.append(f"{folder.name}/ ({folder.id})")
            lines.extend(
                f"  {'*' if s.id == active else ' '} {s.id}  {s.title}"
                for s in self._sessions.sessions_in_folder(folder.id)
            )
        return "\n".join(lines)

    async def _open(self, args: str) -> str:
        session = self._sessions.select(args)
        return "\n".join(f"{m.role}: {m.content}" for m in session.messages)

    async def _rename(self, args: str) -> str:
        if not await self._sessions.rename_session(self._sessions.active_id, args):
            return "Title cannot be blank."
        return f"Renamed to {args.strip()}"

    async def _delete(self, args: str) -> str:
        removed = self._sessions.active_id
        await self._sessions.delete_session(removed)
        return f"Deleted {removed}; now on {self._sessions.active_id}"

    async def _reset(self, args: str) -> str:
        await self._sessions.reset_session(self._sessions.active_id)
        return "Chat history has been cleared"

    # -- Folders ---------------------------------------------------------------

    async def _folder(self, args: str) -> str:
        folder = await self._sessions.create_folder(args)
        return f"Created folder {folder.name} ({folder.id})"

    async def _folders(self, args: str) -> str:
        folders = self._sessions.list_folders()
        if not folders:
            return "No folders."
        return "\n".join(f"{f.id}  {f.name}" for f in folders)

    async def _move(self, args: str) -> str:
        folder_id = None if args.lower() in ("", "none") else args
        await self._sessions.move_session(self._sessions.active_id, folder_id)
        return f"Moved to {folder_id or 'unfiled'}"

    async def _rmfolder(self, args: str) -> str:
        count = await self._sessions.delete_folder(args)
        return f"Deleted folder and {count} chat(s)"

    # -- Models ----------------------------------------------------------------

    async def _models(self, args: str) -> str:
        client = self.engine.client
        models = await client.refresh_models()
        if not models:
            return f"No models found (is Ollama running?). Using {client.selected_model}."
        return "\n".join(
            f"{'*' if m == client.selected_model else ' '} {m}" for m in models
        )

    async def _model(self, args: str) -> str:
        client = self.engine.client
        if not args:
            return f"Current model: {client.selected_model}"
        if not client.select_model(args):
            return f"Unknown model '{args}'. Installed: {', '.join(client.available_models)}"
        return f"Model → {args}"

    async def _pull(self, args: str) -> str:
        name = args or "llama3"
        ok = await self.engine.client.pull_model(name)
        if not ok:
            return f"Failed to pull {name}."
        await self.engine.client.refresh_models()
        return f"Pulled {name}."

    # -- Knowledge base --------------------------------------------------------

    async def _kb(self, args: str) -> str:
        action = args.lower()
        if action == "on":
            self.engine.use_knowledge = True
            return "Knowledge base enabled."
        if action == "off":
            self.engine.use_knowledge = False
            return "Knowledge base disabled."
        if action == "refresh":
            count = await self.engine.refresh_knowledge()
            return f"Knowledge base refreshed ({count} entries)."
        state = "on" if self.engine.use_knowledge else "off"
        return f"Knowledge base is {state} ({len(self.engine.knowledge)} entries)."

    async def _export(self, args: str) -> str:
        path = Path(args or "health_knowledge_base.json")
        try:
            path.write_text(self.engine.knowledge.export_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Knowledge export to %s failed: %s", path, exc)
            return f"Error: could not write {path} ({exc.strerror or exc})"
        return f"Exported {len(self.engine.knowledge)} entries to {path}"

    async def _import(self, args: str) -> str:
        path = Path(args)
        if not args or not path.is_file():
            return f"File not found: {args}"
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Knowledge import from %s failed: %s", path, exc)
            return f"Error: could not read {path} as UTF-8 text"
        count = await self.engine.knowledge.import_json(text)
        return f"Imported {count} knowledge entries."

    # -- Misc ------------------------------------------------------------------

    async def _help(self, args: str) -> str:
        return HELP_TEXT

    async def _quit(self, args: str) -> str:
        raise QuitRequested
