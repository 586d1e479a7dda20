"""Static chain and token tables for the bridge widget.

Chain ids are deBridge chain ids: the EVM chain ids plus deBridge's
internal id for Solana. Token lists are ordered as the widget shows them;
an empty string is the chain's native asset.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple


ETHEREUM = 1
OPTIMISM = 10
BNB_CHAIN = 56
POLYGON = 137
BASE = 8453
ARBITRUM = 42161
AVALANCHE = 43114
SOLANA = 7565164

EVM_CHAINS = frozenset({ETHEREUM, OPTIMISM, BNB_CHAIN, POLYGON, BASE, ARBITRUM, AVALANCHE})
NON_EVM_CHAINS = frozenset({SOLANA})
SUPPORTED_CHAINS = EVM_CHAINS | NON_EVM_CHAINS

NATIVE_TOKEN = ""


class ChainTokenTable(Mapping[int, Tuple[str, ...]]):
    """Read-only mapping of chain id to its ordered token addresses."""

    def __init__(self, entries: Mapping[int, Iterable[str]]):
        self._entries = MappingProxyType(
            {int(chain): tuple(tokens) for chain, tokens in entries.items()}
        )

    def __getitem__(self, chain_id: int) -> Tuple[str, ...]:
        return self._entries[chain_id]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ChainTokenTable(chains={sorted(self._entries)})"

    @property
    def chain_ids(self) -> frozenset:
        return frozenset(self._entries)

    def to_json_dict(self) -> dict:
        """Token lists keyed by chain id as a string, in insertion order."""
        return {str(chain): list(tokens) for chain, tokens in self._entries.items()}


_TOKENS = {
    ETHEREUM: (
        NATIVE_TOKEN,
        "0xdac17f958d2ee523a2206206994597c13d831ec7",
        "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
        "0x6b175474e89094c44da98b954eedeac495271d0f",
        "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    ),
    OPTIMISM: (
        NATIVE_TOKEN,
        "0x4200000000000000000000000000000000000042",
        "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",
        "0x0b2c639c533813f4aa9d7837caf62653d097ff85",
        "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",
        "0x4200000000000000000000000000000000000006",
    ),
    BNB_CHAIN: (
        NATIVE_TOKEN,
        "0x55d398326f99059ff775485246999027b3197955",
        "0x8ac76a51cc950d9822d68b83fe1ad97b32cd580d",
        "0x1af3f329e8be154074d8769d1ffa4ee058b1dbc3",
        "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
    ),
    POLYGON: (
        NATIVE_TOKEN,
        "0xc2132d05d31c914a87c6611c10748aeb04b58e8f",
        "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359",
        "0x8f3cf7ad23cd3cadbd9735aff958023239c6a063",
        "0x7ceb23fd6bc0add59e62ac25578270cff1b9f619",
    ),
    BASE: (
        NATIVE_TOKEN,
        "0xfde4c96c8593536e31f229ea8f37b2ada2699bb2",
        "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        "0x50c5725949a6f0c72e6c4a641f24049a917db0cb",
        "0x4200000000000000000000000000000000000006",
        "0x506beb7965fc7053059006c7ab4c62c02c2d989f",
    ),
    ARBITRUM: (
        NATIVE_TOKEN,
        "0x912ce59144191c1204e64559fe8253a0e49e6548",
        "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",
        "0xaf88d065e77c8cc2239327c5edb3a432268e5831",
        "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",
    ),
    AVALANCHE: (
        NATIVE_TOKEN,
        "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7",
        "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e",
        "0xd586e7f844cea2f87f50152665bcbc2c279d8d70",
        "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",
    ),
    SOLANA: (
        NATIVE_TOKEN,
        "So11111111111111111111111111111111111111112",
        "HAqD46mR4LgY3aJiMZSabfefZoysG3Uuj6wn2ZKYE14v",
        "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
        "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    ),
}

# Every supported chain can be both source and destination
INPUT_TOKENS = ChainTokenTable(_TOKENS)
OUTPUT_TOKENS = ChainTokenTable(_TOKENS)
