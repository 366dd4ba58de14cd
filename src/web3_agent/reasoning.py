# reasoning.py
# Reasoning-service boundary.
#
# The agent only ever sees ReasoningService.complete(); the OpenAI-compatible
# implementation below is one backend. Any endpoint speaking the
# chat-completions API works via base_url.

from typing import Protocol

from openai import AsyncOpenAI

from web3_agent.config import AgentConfig


class ReasoningService(Protocol):
    async def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        """Return the assistant text for a chat request."""


class OpenAIReasoningService:
    """
    ReasoningService over openai.AsyncOpenAI.

    The client is created on first use so an agent can be built (and
    tested) without credentials in the environment.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._client = client

    @classmethod
    def from_config(cls, config: AgentConfig) -> "OpenAIReasoningService":
        return cls(api_key=config.api_key, base_url=config.base_url)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._base_url)
        return self._client

    async def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        extra: dict = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}
        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            **extra,
        )
        return (response.choices[0].message.content or "").strip()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
