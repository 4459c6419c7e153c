from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.data.models import AccountResult, LookupOutcome, ParameterKind
from core.exceptions import UnsupportedNetwork
from handlers.lookup_handler import LookupHandler, parse_cast_text
from utils.constants import HOOK_STATUS_MESSAGES, MESSAGE_TEMPLATES

EOA = "0x" + "ab" * 20


def classifier_mock(kind=ParameterKind.EOA):
    classifier = MagicMock()
    classifier.classify = AsyncMock(return_value=kind)
    classifier.enrich = AsyncMock(return_value=AccountResult(
        kind=ParameterKind.EOA, network="base", address=EOA,
        balance=Decimal("2.0000"), tx_count=5, last_tx_timestamp="2024-05-05 05:05:05",
    ))
    return classifier


def neynar_mock(cast_hash="0xcast"):
    neynar = MagicMock()
    neynar.publish_cast = AsyncMock(return_value=cast_hash)
    client_cls = MagicMock()
    client_cls.return_value.__aenter__ = AsyncMock(return_value=neynar)
    client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return client_cls, neynar


def test_parse_cast_text():
    assert parse_cast_text("@LookUp 0xABC Base") == ("@lookup", "0xabc", "base")
    assert parse_cast_text("@lookup") == ("@lookup", "", "")
    assert parse_cast_text(None) == ("", "", "")


@pytest.mark.asyncio
async def test_hook_rejects_casts_without_the_pattern(config):
    handler = LookupHandler(config)
    with patch("handlers.lookup_handler.build_classifier") as build:
        for text in ["hello there", "@lookup 0xabc", "@lookup 0xabc solana", "@other 0xabc base"]:
            result = await handler.handle_hook({"data": {"text": text, "hash": "0xparent"}})
            assert result == {"message": HOOK_STATUS_MESSAGES['analyze_text']}
    build.assert_not_called()


@pytest.mark.asyncio
async def test_hook_ignores_invalid_parameters(config):
    client_cls, neynar = neynar_mock()
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier_mock(ParameterKind.INVALID)), \
            patch("handlers.lookup_handler.NeynarClient", client_cls):
        result = await LookupHandler(config).handle_hook({"data": {"text": "@lookup hello base"}})

    assert result == {"message": HOOK_STATUS_MESSAGES['analyze_text']}
    neynar.publish_cast.assert_not_awaited()


@pytest.mark.asyncio
async def test_hook_replies_with_frame(config):
    client_cls, neynar = neynar_mock()
    tx_hash = "0x" + "e" * 64
    with patch("handlers.lookup_handler.build_classifier",
               return_value=classifier_mock(ParameterKind.TRANSACTION)), \
            patch("handlers.lookup_handler.NeynarClient", client_cls):
        result = await LookupHandler(config).handle_hook(
            {"data": {"text": f"@lookup {tx_hash} optimism", "hash": "0xparent"}}
        )

    frame_url = f"https://lookup.example/api/frame-analyze/optimism/tx/{tx_hash}"
    assert result == {
        "message": HOOK_STATUS_MESSAGES['cast_success'],
        "type": "tx",
        "frame_url": frame_url,
    }
    neynar.publish_cast.assert_awaited_once_with(
        "Here's some data about this Transaction:", embed_urls=[frame_url], parent_hash="0xparent"
    )


@pytest.mark.asyncio
async def test_hook_reports_publish_failure(config):
    client_cls, _ = neynar_mock(cast_hash=None)
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier_mock()), \
            patch("handlers.lookup_handler.NeynarClient", client_cls):
        result = await LookupHandler(config).handle_hook({"data": {"text": f"@lookup {EOA} base"}})

    assert result["message"] == HOOK_STATUS_MESSAGES['cast_error']
    assert result["type"] == "eoa"


@pytest.mark.asyncio
async def test_hook_unexpected_error(config):
    classifier = classifier_mock()
    classifier.classify.side_effect = RuntimeError("boom")
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier):
        result = await LookupHandler(config).handle_hook({"data": {"text": f"@lookup {EOA} base"}})

    assert result == {"message": HOOK_STATUS_MESSAGES['unexpected_error']}


@pytest.mark.asyncio
async def test_analyze_classifies_and_describes(config):
    classifier = classifier_mock()
    classifier.analyze = AsyncMock(return_value=LookupOutcome(
        EOA, "base", ParameterKind.EOA, "Its balance is 2.0000 ETH",
    ))
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier):
        result = await LookupHandler(config).analyze(EOA, " Base ")

    assert result["success"] is True
    assert result["type"] == "eoa"
    classifier.analyze.assert_awaited_once_with(EOA, "base")


@pytest.mark.asyncio
async def test_analyze_with_known_kind_skips_classification(config):
    classifier = classifier_mock()
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier):
        result = await LookupHandler(config).analyze(EOA, "base", kind="eoa")

    assert result["success"] is True
    assert result["description"] == (
        "Its balance is 2.0000 ETH, it has 5 txs, and the last one was 2024-05-05 05:05:05"
    )
    assert result["result"]["balance"] == "2.0000"
    classifier.classify.assert_not_awaited()
    classifier.enrich.assert_awaited_once_with(ParameterKind.EOA, EOA, "base")


@pytest.mark.asyncio
async def test_analyze_with_unknown_kind_is_invalid(config):
    classifier = classifier_mock()
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier):
        result = await LookupHandler(config).analyze(EOA, "base", kind="wallet")

    assert result["success"] is False
    assert result["description"] == MESSAGE_TEMPLATES['invalid']
    classifier.enrich.assert_not_awaited()


@pytest.mark.asyncio
async def test_analyze_lookup_error_returns_error_payload(config):
    classifier = classifier_mock()
    classifier.analyze = AsyncMock(side_effect=UnsupportedNetwork("base"))
    with patch("handlers.lookup_handler.build_classifier", return_value=classifier):
        result = await LookupHandler(config).analyze(EOA, "base")

    assert result["success"] is False
    assert result["type"] == "invalid"
    assert "Unsupported network" in result["error"]
