"""Async client for a local Ollama inference service.

Handles model discovery and selection, request formatting, and failure
classification. The selected model lives on the instance, so several
clients can coexist (one per test, for example).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
import pydantic

from healthyai.config import settings
from healthyai.errors import BackendUnreachableError, MalformedResponseError
from healthyai.llm.models import (
    GenerateFailure,
    GenerateOptions,
    GenerateReply,
    GenerateRequest,
    GenerateResponse,
    TagsResponse,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from healthyai.chat.models import Message
    from healthyai.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PULL_MODEL = "llama3"


def format_prompt(messages: Sequence[Message]) -> str:
    """Flatten a message list into the single prompt string ``/api/generate`` takes.

    A leading system message becomes the preamble; later system messages
    are rendered as ``Context:`` notes.
    """
    parts: list[str] = []
    for index, msg in enumerate(messages):
        if msg.role == "system":
            if index == 0:
                parts.append(msg.content + "\n\n")
            else:
                parts.append(f"Context: {msg.content}\n")
        elif msg.role == "user":
            parts.append(f"User: {msg.content}\n")
        else:
            parts.append(f"Assistant: {msg.content}\n")
    parts.append("Assistant: ")
    return "".join(parts)


class OllamaClient:
    """Model discovery, selection, and non-streaming generation.

    Discovery is best-effort: every failure yields an empty model list.
    ``send`` never raises for transport or parsing problems; it returns a
    ``GenerateFailure`` instead.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or settings
        self._transport = transport
        self._available: list[str] = []
        self._selected = self._config.default_model

    def _http(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    # -- Model catalog -----------------------------------------------------------

    @property
    def available_models(self) -> list[str]:
        return list(self._available)

    @property
    def selected_model(self) -> str:
        return self._selected

    def select_model(self, name: str) -> bool:
        """Select *name*. Refused only when it is known to be unavailable."""
        if self._available and name not in self._available:
            logger.warning("Model %s is not available (have: %s)", name, self._available)
            return False
        self._selected = name
        logger.info("Chat model → %s", name)
        return True

    async def list_models(self) -> list[str]:
        """Names of installed models, in backend order. Empty on any failure."""
        try:
            async with self._http(self._config.discovery_timeout) as client:
                resp = await client.get(self._config.models_url())
        except httpx.HTTPError as exc:
            logger.warning("Model discovery failed: %s", exc)
            return []

        if not resp.is_success:
            logger.warning("Model discovery returned %d", resp.status_code)
            return []
        try:
            tags = TagsResponse.model_validate_json(resp.text)
        except pydantic.ValidationError:
            logger.warning("Model discovery returned an unexpected body")
            logger.debug("Raw model list body: %s", resp.text)
            return []
        return [tag.name for tag in tags.models]

    async def refresh_models(self) -> list[str]:
        """Rediscover models and keep the selection valid.

        If the current selection is missing from a non-empty catalog, the
        first discovered model is selected. An empty catalog leaves the
        configured selection in place, unverified.
        """
        self._available = await self.list_models()
        if self._available and self._selected not in self._available:
            logger.info(
                "Model %s not installed; falling back to %s", self._selected, self._available[0]
            )
            self._selected = self._available[0]
        return self.available_models

    async def is_available(self) -> bool:
        """True if the service answers its model-listing endpoint."""
        try:
            async with self._http(self._config.discovery_timeout) as client:
                resp = await client.get(self._config.models_url())
        except httpx.HTTPError:
            return False
        return resp.is_success

    async def pull_model(self, name: str = DEFAULT_PULL_MODEL) -> bool:
        """Ask the service to download *name*. Returns True on success."""
        try:
            async with self._http(self._config.request_timeout) as client:
                resp = await client.post(
                    self._config.pull_url(), json={"name": name, "stream": False}
                )
        except httpx.HTTPError:
            logger.exception("Failed to pull model %s", name)
            return False
        if not resp.is_success:
            logger.warning("Pull of %s returned %d: %s", name, resp.status_code, resp.text[:200])
            return False
        logger.info("Pulled model %s", name)
        return True

    # -- Generation --------------------------------------------------------------

    async def send(
        self,
        messages: Sequence[Message],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> GenerateReply | GenerateFailure:
        """Send a composed conversation and return the reply or a classified failure."""
        model = model or self._selected
        try:
            text = await self._generate(
                messages,
                model=model,
                temperature=self._config.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self._config.max_tokens,
            )
        except BackendUnreachableError as exc:
            logger.warning("Generation with %s failed: %s", model, exc)
            return GenerateFailure(
                kind="backend_unreachable",
                message=str(exc),
                model=model,
                status_code=exc.status_code,
            )
        except MalformedResponseError as exc:
            logger.warning("Generation with %s returned a malformed body: %s", model, exc)
            logger.debug("Raw generate body: %s", exc.raw_body)
            return GenerateFailure(
                kind="malformed_response",
                message=str(exc),
                model=model,
                raw_body=exc.raw_body,
            )
        return GenerateReply(text=text, model=model)

    async def _generate(
        self,
        messages: Sequence[Message],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        request = GenerateRequest(
            model=model,
            prompt=format_prompt(messages),
            options=GenerateOptions(temperature=temperature, num_predict=max_tokens),
        )
        logger.info("Sending %d message(s) to %s", len(messages), model)

        try:
            async with self._http(self._config.request_timeout) as client:
                resp = await client.post(
                    self._config.generate_url(), json=request.model_dump()
                )
        except httpx.TimeoutException as exc:
            msg = f"Timed out waiting for {model}"
            raise BackendUnreachableError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Could not reach Ollama: {exc}"
            raise BackendUnreachableError(msg) from exc

        raw = resp.text
        if not resp.is_success:
            msg = f"Ollama API error: {resp.status_code} - {raw[:200]}"
            raise BackendUnreachableError(msg, status_code=resp.status_code)

        try:
            return GenerateResponse.model_validate_json(raw).response
        except pydantic.ValidationError as exc:
            msg = "Failed to parse Ollama response"
            raise MalformedResponseError(msg, raw_body=raw) from exc
