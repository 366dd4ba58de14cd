# config.py
# Agent configuration: one validated model, populated from .env / environment.
# Wiring only. Nothing here talks to the network.

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

DEFAULT_RPC_URLS: dict[str, str] = {
    "ethereum": "https://mainnet.infura.io/v3/your-key",
    "polygon": "https://polygon-rpc.com",
    "solana": "https://api.mainnet-beta.solana.com",
}

NETWORK_KINDS: dict[str, str] = {
    "ethereum": "evm",
    "polygon": "evm",
    "solana": "solana",
}


class ModelSettings(BaseModel):
    """Chat models used for planning vs. step reasoning and summaries."""

    reasoning: str = "gpt-4"
    execution: str = "gpt-3.5-turbo"


class NetworkProvider(BaseModel):
    """Per-agent handle for one target chain."""

    name: str
    rpc_url: str
    kind: str = "evm"


class AgentConfig(BaseModel):
    name: str = "Web3Agent"
    api_key: str | None = None
    base_url: str | None = None
    models: ModelSettings = Field(default_factory=ModelSettings)
    networks: list[str] = Field(default_factory=lambda: ["ethereum"], min_length=1)
    default_network: str | None = None
    rpc_urls: dict[str, str] = Field(default_factory=dict)
    ipfs_api_url: str = "https://ipfs.infura.io:5001"
    ipfs_gateway_url: str = "https://ipfs.io/ipfs"
    web3_tools: list[str] = Field(default_factory=list)
    strict_tools: bool = True
    swap_rate: float = Field(default=1.5, gt=0)
    http_timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _check_networks(self) -> "AgentConfig":
        for network in self.networks:
            if not self.rpc_urls.get(network) and network not in DEFAULT_RPC_URLS:
                raise ValueError(f"Network {network!r} has no RPC URL configured.")
        if self.default_network is None:
            self.default_network = self.networks[0]
        elif self.default_network not in self.networks:
            raise ValueError(
                f"default_network {self.default_network!r} is not one of {self.networks}."
            )
        return self

    def providers(self) -> dict[str, NetworkProvider]:
        """Build a fresh provider handle for every configured network."""
        return {
            network: NetworkProvider(
                name=network,
                rpc_url=self.rpc_urls.get(network) or DEFAULT_RPC_URLS[network],
                kind=NETWORK_KINDS.get(network, "evm"),
            )
            for network in self.networks
        }

    @classmethod
    def from_env(cls, **overrides: Any) -> "AgentConfig":
        """Load .env, read AGENT_* / OPENAI_* / *_RPC_URL variables, apply overrides."""
        load_dotenv()

        values: dict[str, Any] = {}
        if os.getenv("AGENT_NAME"):
            values["name"] = os.environ["AGENT_NAME"]
        if os.getenv("OPENAI_API_KEY"):
            values["api_key"] = os.environ["OPENAI_API_KEY"]
        if os.getenv("OPENAI_BASE_URL"):
            values["base_url"] = os.environ["OPENAI_BASE_URL"]

        models: dict[str, str] = {}
        if os.getenv("REASONING_MODEL"):
            models["reasoning"] = os.environ["REASONING_MODEL"]
        if os.getenv("EXECUTION_MODEL"):
            models["execution"] = os.environ["EXECUTION_MODEL"]
        values["models"] = models

        networks = _split(os.getenv("AGENT_NETWORKS")) or ["ethereum"]
        values["networks"] = networks
        values["rpc_urls"] = {
            network: os.environ[f"{network.upper()}_RPC_URL"]
            for network in networks
            if os.getenv(f"{network.upper()}_RPC_URL")
        }
        if os.getenv("DEFAULT_NETWORK"):
            values["default_network"] = os.environ["DEFAULT_NETWORK"]

        if os.getenv("IPFS_API_URL"):
            values["ipfs_api_url"] = os.environ["IPFS_API_URL"]
        if os.getenv("IPFS_GATEWAY_URL"):
            values["ipfs_gateway_url"] = os.environ["IPFS_GATEWAY_URL"]
        values["web3_tools"] = _split(os.getenv("AGENT_TOOLS"))
        if os.getenv("AGENT_STRICT_TOOLS"):
            values["strict_tools"] = os.environ["AGENT_STRICT_TOOLS"]

        values.update(overrides)
        return cls(**values)


def _split(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]
