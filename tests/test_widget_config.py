"""Tests for the widget configuration builder and chain tables."""

import json

import pytest

from bridgegate.app.exceptions import UnsupportedChainError
from bridgegate.app.services.chain_tokens import (
    ETHEREUM,
    EVM_CHAINS,
    INPUT_TOKENS,
    NATIVE_TOKEN,
    OUTPUT_TOKENS,
    SOLANA,
    SUPPORTED_CHAINS,
    ChainTokenTable,
)
from bridgegate.app.services.widget_config import (
    DEBRIDGE_REFERRAL_CODE,
    EVM_FEE_RECIPIENT,
    JUPITER_REFERRAL_PUBKEY,
    SOLANA_FEE_RECIPIENT,
    build_widget_config,
    fee_recipient,
    referral_key,
    widget_config_json,
)


class TestReferralAndFeeLookup:
    """Tests for referral_key and fee_recipient."""

    @pytest.mark.parametrize("chain_id", sorted(SUPPORTED_CHAINS))
    def test_every_supported_chain_has_values(self, chain_id):
        assert referral_key(chain_id)
        assert fee_recipient(chain_id)

    @pytest.mark.parametrize("chain_id", sorted(EVM_CHAINS))
    def test_evm_chains(self, chain_id):
        assert referral_key(chain_id) == DEBRIDGE_REFERRAL_CODE
        assert fee_recipient(chain_id) == EVM_FEE_RECIPIENT

    def test_solana(self):
        assert referral_key(SOLANA) == JUPITER_REFERRAL_PUBKEY
        assert fee_recipient(SOLANA) == SOLANA_FEE_RECIPIENT

    @pytest.mark.parametrize("chain_id", [0, -1, 2, 999, 7565165])
    def test_unsupported_chain(self, chain_id):
        with pytest.raises(UnsupportedChainError) as exc_info:
            referral_key(chain_id)
        assert exc_info.value.chain_id == chain_id
        assert exc_info.value.status_code == 500

        with pytest.raises(UnsupportedChainError):
            fee_recipient(chain_id)


class TestBuildWidgetConfig:
    """Tests for build_widget_config."""

    def test_default_chain_fields(self):
        config = build_widget_config(ETHEREUM)

        assert config["r"] == DEBRIDGE_REFERRAL_CODE
        assert config["affiliateFeeRecipient"] == EVM_FEE_RECIPIENT
        assert config["affiliateFeePercent"] == "1"
        assert config["jupiterRefPubkey"] == JUPITER_REFERRAL_PUBKEY
        assert JUPITER_REFERRAL_PUBKEY in config["jupiterRefLink"]
        assert config["element"] == "debridgeWidget"
        assert config["inputChain"] == ETHEREUM
        assert config["outputChain"] == SOLANA

    def test_solana_default_chain(self):
        config = build_widget_config(SOLANA)
        assert config["r"] == JUPITER_REFERRAL_PUBKEY
        assert config["affiliateFeeRecipient"] == SOLANA_FEE_RECIPIENT
        assert config["inputChain"] == SOLANA

    def test_deterministic(self):
        first = json.dumps(dict(build_widget_config(ETHEREUM)))
        second = json.dumps(dict(build_widget_config(ETHEREUM)))
        assert first == second

    def test_supported_chains_is_json_string(self):
        config = build_widget_config(ETHEREUM)
        chains = json.loads(config["supportedChains"])

        expected_keys = [str(chain) for chain in sorted(SUPPORTED_CHAINS)]
        assert list(chains["inputChains"]) == expected_keys
        assert list(chains["outputChains"]) == expected_keys
        for tokens in chains["inputChains"].values():
            assert tokens[0] == NATIVE_TOKEN
        assert "So11111111111111111111111111111111111111112" in chains["outputChains"][str(SOLANA)]

    def test_config_is_read_only(self):
        config = build_widget_config(ETHEREUM)
        with pytest.raises(TypeError):
            config["r"] = "other"

    def test_unsupported_default_chain(self):
        with pytest.raises(UnsupportedChainError):
            build_widget_config(999)

    def test_mismatched_token_tables(self):
        outputs = ChainTokenTable({k: v for k, v in OUTPUT_TOKENS.items() if k != SOLANA})
        with pytest.raises(UnsupportedChainError) as exc_info:
            build_widget_config(ETHEREUM, INPUT_TOKENS, outputs)
        assert exc_info.value.chain_id == SOLANA

    def test_token_table_with_unknown_chain(self):
        tables = ChainTokenTable({**INPUT_TOKENS, 999: [NATIVE_TOKEN]})
        with pytest.raises(UnsupportedChainError) as exc_info:
            build_widget_config(ETHEREUM, tables, tables)
        assert exc_info.value.chain_id == 999

    def test_token_tables_missing_supported_chain(self):
        tables = ChainTokenTable({k: v for k, v in INPUT_TOKENS.items() if k != SOLANA})
        with pytest.raises(UnsupportedChainError) as exc_info:
            build_widget_config(ETHEREUM, tables, tables)
        assert exc_info.value.chain_id == SOLANA


class TestWidgetConfigJson:
    """Tests for the serialized document."""

    def test_byte_identical(self):
        assert widget_config_json(ETHEREUM) == widget_config_json(ETHEREUM)

    def test_compact_json(self):
        body = widget_config_json(ETHEREUM)
        assert b'"r":"31021"' in body
        assert json.loads(body)["r"] == DEBRIDGE_REFERRAL_CODE

    def test_failures_are_not_cached(self):
        for _ in range(2):
            with pytest.raises(UnsupportedChainError):
                widget_config_json(999)


class TestChainTokenTable:
    """Tests for ChainTokenTable."""

    def test_values_are_tuples(self):
        table = ChainTokenTable({1: ["", "0xabc"]})
        assert table[1] == ("", "0xabc")
        assert table.chain_ids == frozenset({1})
        assert len(table) == 1

    def test_to_json_dict_keeps_order(self):
        table = ChainTokenTable({56: ["", "0xb"], 1: ["", "0xa"]})
        assert table.to_json_dict() == {"56": ["", "0xb"], "1": ["", "0xa"]}
        assert list(table.to_json_dict()) == ["56", "1"]

    def test_input_and_output_cover_same_chains(self):
        assert INPUT_TOKENS.chain_ids == OUTPUT_TOKENS.chain_ids == SUPPORTED_CHAINS
