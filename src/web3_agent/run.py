# run.py
# Entry point. Config and wiring only. No logic lives here.
#
#   web3-agent "Store {\"hello\": \"world\"} on IPFS and summarise the CID"
#
# With no arguments the demo objectives below are run in order.

import asyncio
import logging
import os
import sys

from rich.logging import RichHandler

from web3_agent import display
from web3_agent.agent import create_agent
from web3_agent.config import AgentConfig
from web3_agent.models import Task

PROMPTS = [
    # Reasoning only, no side effects.
    "Explain the trade-offs between minting an NFT on Ethereum and on Polygon.",

    # Storage write followed by a reasoning step over its result.
    "Store the JSON document {\"project\": \"web3-agent\", \"version\": 1} on IPFS "
    "and tell me the gateway URL.",

    # Tool-to-tool composition: nftCreate writes its metadata through ipfsStore.
    "Mint an NFT called 'First Light' with the description 'Genesis artwork' "
    "and report the token id and metadata URI.",
]


async def _run_all(objectives: list[str]) -> int:
    config = AgentConfig.from_env()
    wallet = os.getenv("WALLET_ADDRESS") or None
    tasks = [Task(objective=objective, wallet_address=wallet) for objective in objectives]

    failures = 0
    async with create_agent(config) as agent:
        display.banner(agent.name, config.models.reasoning, config.models.execution, config.networks)
        display.attach(agent.events)
        for task in tasks:
            try:
                await agent.run(task)
            except Exception:
                # Already rendered by the taskFailed observer.
                failures += 1
    return failures


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
    )
    objectives = [" ".join(sys.argv[1:])] if len(sys.argv) > 1 else PROMPTS
    failures = asyncio.run(_run_all(objectives))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
