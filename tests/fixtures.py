import asyncio

from appshelf.core.errors import ManifestResolutionError
from appshelf.models.app_entry import EntryRecord, FetchStatus
from appshelf.sources.manifest_resolver import BaseManifestResolver


CATALOG = [
    {
        "id": 13,
        "url": "https://cloudflare-ipfs.com/ipfs/QmX31xCdhFDmJzoVG33Y6kJtJ5Ujw8r5EJJBrsp8Fbjm7k",
        "name": "Compound",
        "iconUrl": "https://cloudflare-ipfs.com/ipfs/QmX31xCdhFDmJzoVG33Y6kJtJ5Ujw8r5EJJBrsp8Fbjm7k/Compound.png",
        "error": False,
        "description": "Money markets on the Ethereum blockchain",
        "fetchStatus": "SUCCESS",
        "chainIds": [1, 4],
        "provider": None,
    },
    {
        "id": 3,
        "url": "https://app.ens.domains",
        "name": "ENS App",
        "iconUrl": "https://app.ens.domains/android-chrome-144x144.png",
        "description": "Decentralised naming for wallets, websites, & more.",
        "fetchStatus": "SUCCESS",
        "chainIds": [1, 4],
        "provider": None,
    },
    {
        "id": 14,
        "url": "https://cloudflare-ipfs.com/ipfs/QmXLxxczMH4MBEYDeeN9zoiHDzVkeBmB5rBjA3UniPEFcA",
        "name": "Synthetix",
        "iconUrl": "https://cloudflare-ipfs.com/ipfs/QmXLxxczMH4MBEYDeeN9zoiHDzVkeBmB5rBjA3UniPEFcA/Synthetix.png",
        "description": "Trade synthetic assets on Ethereum",
        "fetchStatus": "SUCCESS",
        "chainIds": [1, 4],
        "provider": None,
    },
    {
        "id": 24,
        "url": "https://cloudflare-ipfs.com/ipfs/QmdVaZxDov4bVARScTLErQSRQoxgqtBad8anWuw3YPQHCs",
        "name": "Transaction Builder",
        "iconUrl": "https://cloudflare-ipfs.com/ipfs/QmdVaZxDov4bVARScTLErQSRQoxgqtBad8anWuw3YPQHCs/tx-builder.png",
        "description": "A Safe app to compose custom transactions",
        "fetchStatus": "SUCCESS",
        "chainIds": [1, 4, 56, 100, 137, 246, 73799],
        "provider": None,
    },
]

DRAIN_SAFE = {
    "id": "36",
    "url": "https://apps.gnosis-safe.io/drain-safe",
    "name": "Drain safe",
    "iconUrl": "https://apps.gnosis-safe.io/drain-safe/logo.svg",
    "error": False,
    "description": "Transfer all your assets in batch",
    "fetchStatus": "SUCCESS",
    "chainIds": [4],
    "provider": None,
}


class ControlledResolver(BaseManifestResolver):
    """Resolver whose results are released by the test, in any order."""
    name = "Controlled"

    def __init__(self):
        self.calls = []
        self.futures = {}

    async def resolve(self, url: str) -> EntryRecord:
        self.calls.append(url)
        future = asyncio.get_running_loop().create_future()
        self.futures[url] = future
        return await future

    def succeed(self, url: str, name: str, description: str = "", **extra):
        self.futures[url].set_result(
            EntryRecord(url=url, name=name, description=description, fetch_status=FetchStatus.SUCCESS, **extra)
        )

    def fail(self, url: str, reason: str):
        self.futures[url].set_exception(ManifestResolutionError(url, reason))


class StaticResolver(BaseManifestResolver):
    """Resolver backed by a url -> name mapping; unknown urls fail."""
    name = "Static"

    def __init__(self, names=None):
        self.names = dict(names or {})
        self.calls = []

    async def resolve(self, url: str) -> EntryRecord:
        self.calls.append(url)
        if url not in self.names:
            raise ManifestResolutionError(url, "Failed to fetch manifest: 404")
        return EntryRecord(url=url, name=self.names[url], description=f"{self.names[url]} manifest", fetch_status=FetchStatus.SUCCESS)


async def drain(rounds: int = 5):
    for _ in range(rounds):
        await asyncio.sleep(0)
