"""deBridge widget configuration document.

The widget reads this document from ``/widget-config``. It is static apart
from the referral and fee-recipient fields, which depend on the default
input chain: EVM chains route referrals through deBridge, Solana through
Jupiter.
"""

import json
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from bridgegate.app.exceptions import UnsupportedChainError
from bridgegate.app.services.chain_tokens import (
    EVM_CHAINS,
    INPUT_TOKENS,
    NON_EVM_CHAINS,
    OUTPUT_TOKENS,
    SOLANA,
    SUPPORTED_CHAINS,
    ChainTokenTable,
)

DEBRIDGE_REFERRAL_CODE = "31021"
JUPITER_REFERRAL_PUBKEY = "FP5JGryFjTNdYustodtw9zLV31fdds5vvieW7TYzP8VJ"
JUPITER_REFERRAL_LINK = (
    f"https://jup.ag/?referrer={JUPITER_REFERRAL_PUBKEY}&feeBps=100"
)
SOLANA_FEE_RECIPIENT = "FWBUqaHuaRPpN4BsbcP255RVUezvf67n2zYGY6SrZfzZ"
EVM_FEE_RECIPIENT = "0xe83A14f6eae56B0b30465B48a2DE75B2DF895223"
AFFILIATE_FEE_PERCENT = "1"

WidgetConfig = Mapping[str, Any]

# Base64 encoded JSON theme consumed by the widget script
_STYLES = (
    "eyJhcHBCYWNrZ3JvdW5kIjoiIzQ3NDY0NiIsIm1vZGFsQmciOiIjMDAwMDAwIiwiY2hhcnRCZyI6IiMwMDAwMDAiLCJib3JkZXJDb2xvciI6IiMwMDAwMDAiLCJ0b29sdGlwQmciOiIjMDAwMDAwIiwiZm9ybUNvbnRyb2xCZyI6IiMwMjAyMDIiLCJjb250cm9sQm9yZGVyIjoiIzc0NzQ3NCIsInByaW1hcnkiOiIjMDAwMDAwIiwic2Vjb25kYXJ5IjoiIzQ3NDY0NiIsInN1Y2Nlc3MiOiIjMDA2NDA3IiwiZXJyb3IiOiIjY2QwMTAxIiwid2FybmluZyI6IiNlNGU3MDMiLCJmb250Q29sb3IiOiIjRkZGRkZGIiwiZm9udEZhbWlseSI6IkF1ZGlvd2lkZSIsInByaW1hcnlCdG5CZyI6IiM4MzAyMDIiLCJwcmltYXJ5QnRuQmdIb3ZlciI6IiMwYTBhMGEiLCJwcmltYXJ5QnRuVGV4dCI6IiNkNGQ0ZDQiLCJzZWNvbmRhcnlCdG5CZyI6IiM0NzQ2NDYiLCJzZWNvbmRhcnlCdG5CZ0hvdmVyIjoiI2NkNjgwMSIsInNlY29uZGFyeUJ0blRleHQiOiIjZDRkNGQ0Iiwic2Vjb25kYXJ5QnRuT3V0bGluZSI6IiMwYTBhMGEiLCJidG5Gb250V2VpZ2h0Ijo5MDAsImNoYWluQnRuQmciOiIjMDAwMDAwIiwiY2hhaW5CdG5CZ0FjdGl2ZSI6IiMwYzBiMGIiLCJjaGFpbkJ0blBhZGRpbmciOiIyMCJ9"
)

_DISPLAY_FIELDS = {
    "v": "1",
    "element": "debridgeWidget",
    "title": "J1T.FYI Bridge Gate",
    "description": "Just One Token, Just One Gate",
    "width": "600",
    "height": "800",
    "outputChain": SOLANA,
    "inputCurrency": "",
    "outputCurrency": "HAqD46mR4LgY3aJiMZSabfefZoysG3Uuj6wn2ZKYE14v",
    "address": "",
    "showSwapTransfer": True,
    "amount": "",
    "outputAmount": "",
    "isAmountFromNotModifiable": False,
    "isAmountToNotModifiable": False,
    "lang": "en",
    "mode": "deswap",
    "isEnableCalldata": False,
    "styles": _STYLES,
    "modalBg": "#000000",
    "chartBg": "#000000",
    "borderColor": "#000000",
    "tooltipBg": "#000000",
    "formControlBg": "#020202",
    "controlBorder": "#747474",
    "primary": "#000000",
    "secondary": "#474646",
    "success": "#006407",
    "error": "#cd0101",
    "warning": "#e4e703",
    "fontColor": "#8f8f8f",
    "fontFamily": "Audiowide",
    "theme": "dark",
    "isHideLogo": False,
    "logo": "",
}


def referral_key(chain_id: int) -> str:
    """Referral code credited for swaps starting on ``chain_id``."""
    if chain_id in NON_EVM_CHAINS:
        return JUPITER_REFERRAL_PUBKEY
    if chain_id in EVM_CHAINS:
        return DEBRIDGE_REFERRAL_CODE
    raise UnsupportedChainError(chain_id)


def fee_recipient(chain_id: int) -> str:
    """Address receiving the affiliate fee for swaps starting on ``chain_id``."""
    if chain_id in NON_EVM_CHAINS:
        return SOLANA_FEE_RECIPIENT
    if chain_id in EVM_CHAINS:
        return EVM_FEE_RECIPIENT
    raise UnsupportedChainError(chain_id)


def _supported_chains(inputs: ChainTokenTable, outputs: ChainTokenTable) -> str:
    """Serialize the token tables the way the widget expects them: as a JSON string."""
    if inputs.chain_ids != outputs.chain_ids:
        missing = sorted(inputs.chain_ids ^ outputs.chain_ids)
        raise UnsupportedChainError(missing[0])

    # Referral and fee lookups must cover every chain the widget can offer
    for chain_id in inputs.chain_ids:
        referral_key(chain_id)
        fee_recipient(chain_id)

    # Every chain with a referral and fee entry must be offered too
    missing = SUPPORTED_CHAINS - inputs.chain_ids
    if missing:
        raise UnsupportedChainError(min(missing))

    return json.dumps(
        {
            "inputChains": inputs.to_json_dict(),
            "outputChains": outputs.to_json_dict(),
        },
        separators=(",", ":"),
    )


def build_widget_config(
    default_input_chain: int,
    inputs: ChainTokenTable = INPUT_TOKENS,
    outputs: ChainTokenTable = OUTPUT_TOKENS,
) -> WidgetConfig:
    """Assemble the widget configuration document.

    Pure and deterministic: the same arguments always produce an equal
    document.

    Args:
        default_input_chain: Chain whose referral key and fee recipient apply
        inputs: Tokens selectable on each source chain
        outputs: Tokens selectable on each destination chain

    Returns:
        Read-only mapping ready for JSON serialization

    Raises:
        UnsupportedChainError: If a chain is missing from the referral,
            fee or token tables
    """
    if default_input_chain not in inputs.chain_ids:
        raise UnsupportedChainError(default_input_chain)

    config = dict(_DISPLAY_FIELDS)
    config.update({
        "inputChain": default_input_chain,
        "r": referral_key(default_input_chain),
        "affiliateFeeRecipient": fee_recipient(default_input_chain),
        "affiliateFeePercent": AFFILIATE_FEE_PERCENT,
        "jupiterRefLink": JUPITER_REFERRAL_LINK,
        "jupiterRefPubkey": JUPITER_REFERRAL_PUBKEY,
        "supportedChains": _supported_chains(inputs, outputs),
    })
    return MappingProxyType(config)


@lru_cache(maxsize=16)
def widget_config_json(default_input_chain: int) -> bytes:
    """Compact JSON encoding of the widget config, built once per chain."""
    config = build_widget_config(default_input_chain)
    return json.dumps(dict(config), separators=(",", ":"), ensure_ascii=False).encode("utf-8")
