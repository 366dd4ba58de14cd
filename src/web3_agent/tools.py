# tools.py
# Built-in tool implementations.
# The agent never calls these directly: register_builtin_tools() binds them
# into a ToolRegistry and everything goes through registry.execute().
#
# Swap and mint bodies are simulated placeholders and say so in their
# results ("simulated": True). Contract reads and IPFS writes are real HTTP.

import json
import logging
import math
import secrets
from functools import partial
from typing import Any

import httpx

from web3_agent.config import AgentConfig, NetworkProvider
from web3_agent.models import StepResult
from web3_agent.registry import Tool, ToolRegistry

logger = logging.getLogger(__name__)


def _synthetic_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)


def _fail(message: str) -> StepResult:
    return {"success": False, "error": message}


# ---------------------------------------------------------------------------
# Contract interaction
# ---------------------------------------------------------------------------


async def _tool_contract_interact(
    args: dict,
    *,
    providers: dict[str, NetworkProvider],
    default_network: str,
    client: httpx.AsyncClient,
) -> StepResult:
    """Read-only eth_call with caller-encoded calldata."""
    network = args.get("network") or default_network
    provider = providers.get(network)
    if provider is None:
        return _fail(f"Network {network} not supported")
    if provider.kind != "evm":
        return _fail(f"Network {network} does not support EVM contract calls")

    address = args.get("contractAddress")
    data = args.get("data")
    if not address:
        return _fail("Error: no contractAddress provided.")
    if not data:
        return _fail("Error: no encoded calldata ('data') provided.")

    call: dict[str, Any] = {"to": address, "data": data}
    sender = args.get("from") or args.get("walletAddress")
    if sender:
        call["from"] = sender

    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "eth_call",
        "params": [call, args.get("block", "latest")],
    }
    try:
        response = await client.post(provider.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        return _fail(f"RPC call to {network} failed: {exc}")

    if body.get("error"):
        error = body["error"]
        message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        return _fail(message)
    return {"success": True, "result": body.get("result"), "network": network}


# ---------------------------------------------------------------------------
# Asset exchange (simulated)
# ---------------------------------------------------------------------------


async def _tool_token_swap(args: dict, *, rate: float, default_network: str) -> StepResult:
    network = args.get("network") or default_network
    from_token = args.get("fromToken")
    to_token = args.get("toToken")
    if not from_token or not to_token:
        return _fail("Error: fromToken and toToken are required.")
    try:
        amount = float(args.get("amount"))
    except (TypeError, ValueError):
        return _fail(f"Error: amount {args.get('amount')!r} is not a number.")
    if not math.isfinite(amount) or amount <= 0:
        return _fail("Error: amount must be a positive finite number.")

    logger.info("Simulating token swap on %s: %s %s -> %s", network, amount, from_token, to_token)
    return {
        "success": True,
        "simulated": True,
        "network": network,
        "fromToken": from_token,
        "toToken": to_token,
        "fromAmount": amount,
        "toAmount": amount * rate,
        "txHash": _synthetic_tx_hash(),
    }


# ---------------------------------------------------------------------------
# Content-addressed storage
# ---------------------------------------------------------------------------


async def _tool_ipfs_store(
    args: dict,
    *,
    client: httpx.AsyncClient,
    api_url: str,
    gateway_url: str,
) -> StepResult:
    if "content" not in args:
        return _fail("Error: no content provided.")

    body = json.dumps(args["content"]).encode("utf-8")
    filename = f"{args.get('type') or 'data'}.json"
    try:
        response = await client.post(
            f"{api_url.rstrip('/')}/api/v0/add",
            files={"file": (filename, body, "application/json")},
        )
        response.raise_for_status()
        cid = response.json()["Hash"]
    except (httpx.HTTPError, ValueError, KeyError) as exc:
        return _fail(f"IPFS add failed: {exc}")

    return {
        "success": True,
        "cid": cid,
        "url": f"ipfs://{cid}",
        "gatewayUrl": f"{gateway_url.rstrip('/')}/{cid}",
    }


# ---------------------------------------------------------------------------
# Mint (storage write, then simulated receipt)
# ---------------------------------------------------------------------------


async def _tool_nft_create(args: dict, *, registry: ToolRegistry, default_network: str) -> StepResult:
    metadata = args.get("metadata")
    if metadata is None:
        return _fail("Error: no metadata provided.")

    # Resolved through the registry so a replaced ipfsStore is honoured.
    stored = await registry.execute("ipfsStore", {"content": metadata, "type": "metadata"})
    if not stored.get("success"):
        return stored

    return {
        "success": True,
        "simulated": True,
        "network": args.get("network") or default_network,
        "tokenId": secrets.randbelow(1_000_000),
        "metadataUri": stored.get("url"),
        "txHash": _synthetic_tx_hash(),
    }


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_builtin_tools(
    registry: ToolRegistry,
    config: AgentConfig,
    client: httpx.AsyncClient,
    providers: dict[str, NetworkProvider] | None = None,
) -> ToolRegistry:
    """Bind the default tool set to one agent's config, providers and HTTP client."""
    providers = providers if providers is not None else config.providers()
    network = config.default_network

    registry.register(
        Tool(
            name="contractInteract",
            description=(
                "Read-only call to a smart contract on an EVM chain. Parameters: "
                "contractAddress, data (ABI-encoded calldata as a 0x hex string), "
                "optional network and block. Does not accept abi/method/args."
            ),
            handler=partial(
                _tool_contract_interact, providers=providers, default_network=network, client=client
            ),
        )
    )
    registry.register(
        Tool(
            name="tokenSwap",
            description="Swap tokens on decentralized exchanges",
            handler=partial(_tool_token_swap, rate=config.swap_rate, default_network=network),
        )
    )
    registry.register(
        Tool(
            name="ipfsStore",
            description="Store data on IPFS",
            handler=partial(
                _tool_ipfs_store,
                client=client,
                api_url=config.ipfs_api_url,
                gateway_url=config.ipfs_gateway_url,
            ),
        )
    )
    registry.register(
        Tool(
            name="nftCreate",
            description="Create an NFT on supported blockchains",
            handler=partial(_tool_nft_create, registry=registry, default_network=network),
        )
    )
    return registry
