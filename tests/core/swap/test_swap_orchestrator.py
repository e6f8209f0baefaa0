"""
Tests for SwapOrchestrator end-to-end transaction preparation.
"""

import asyncio
from decimal import Decimal
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from dexswap.core.errors import (
    InsufficientFundsError,
    LedgerReadFailure,
    QuoteCreationFailure,
    UnknownStatusCode,
    UnsupportedNetworkError,
    UnsupportedTokenError,
)
from dexswap.core.execution.models import TransactionType
from dexswap.core.execution.tx_builder import encode_approve
from dexswap.core.swap.constants import TOKEN_REGISTRY
from dexswap.core.swap.manager import SwapOrchestrator
from dexswap.core.swap.models import ApprovalAction, SwapPolicy, SwapRequest, WrapAction
from dexswap.core.swap.status import NotificationStatus
from dexswap.providers.base import AggregatorClient, LedgerClient


WETH = TOKEN_REGISTRY["ETH"]["WETH"]["address"]
DAI = TOKEN_REGISTRY["ETH"]["DAI"]["address"]
USER = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
SPENDER = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
ROUTER = "0xdddddddddddddddddddddddddddddddddddddddd"


class FakeLedger(LedgerClient):
    """In-memory ledger recording every read."""

    name = "fake"

    def __init__(
        self,
        allowance: int = 0,
        token_balance: int = 0,
        native_balance: int = 0,
        error: Optional[Exception] = None,
    ):
        self.allowance = allowance
        self.token_balance = token_balance
        self.native_balance = native_balance
        self.error = error
        self.calls: List[str] = []

    async def read_allowance(self, token_address, owner_address, spender_address):
        self.calls.append(f"allowance:{token_address}:{owner_address}:{spender_address}")
        if self.error:
            raise self.error
        return self.allowance

    async def read_token_balance(self, token_address, owner_address):
        self.calls.append(f"balance:{token_address}:{owner_address}")
        return self.token_balance

    async def read_native_balance(self, address):
        self.calls.append(f"native:{address}")
        return self.native_balance

    def encode_approve_call(self, token_address, spender_address, amount):
        return encode_approve(spender_address, amount)


class FakeAggregator(AggregatorClient):
    name = "fake-aggregator"

    def __init__(self, trade: Optional[Dict] = None, status: str = "new"):
        self.create_trade = AsyncMock(return_value=trade)
        self.get_status = AsyncMock(return_value=status)
        self.validate_address = AsyncMock(return_value=True)

    async def create_trade(self, request, dex):  # pragma: no cover - replaced per instance
        raise NotImplementedError

    async def get_status(self, order_id, network):  # pragma: no cover
        raise NotImplementedError

    async def validate_address(self, currency, address, network):  # pragma: no cover
        raise NotImplementedError


def _request(from_currency="WETH", to_currency="DAI", provider=None, network="ETH") -> SwapRequest:
    return SwapRequest(
        from_currency=from_currency,
        to_currency=to_currency,
        from_value=Decimal("0.000000000000001"),
        from_address=USER,
        to_address=USER,
        provider=provider,
        network=network,
    )


def _trade(address=WETH, amount="1000", spender=SPENDER, value="0x0", gas_price=None) -> Dict:
    metadata: Dict = {
        "input": {"address": address, "amount": amount},
        "query": {"toAmount": "123.45"},
    }
    if spender:
        metadata["input"]["spender"] = spender
    if gas_price is not None:
        metadata["gasPrice"] = gas_price
    return {"trade": {"to": ROUTER, "data": "0xfeed", "value": value}, "metadata": metadata}


def _orchestrator(ledger: LedgerClient, aggregator: Optional[AggregatorClient] = None) -> SwapOrchestrator:
    return SwapOrchestrator(
        ledger=ledger,
        aggregator=aggregator or FakeAggregator(),
        policy=SwapPolicy.from_symbols(["USDT"]),
        network="ETH",
        swap_valid_seconds=600,
    )


@pytest.mark.asyncio
async def test_weth_swap_approves_wraps_then_swaps():
    ledger = FakeLedger(allowance=0, token_balance=200, native_balance=900)
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(_request(), _trade())

    assert result.approval.action == ApprovalAction.APPROVE
    assert result.wrap.action == WrapAction.WRAP
    assert result.wrap.amount == 800
    assert [tx.tx_type for tx in result.transactions] == [
        TransactionType.APPROVE,
        TransactionType.WRAP,
        TransactionType.SWAP,
    ]
    approve, wrap, swap = result.transactions
    assert approve.to_address == WETH
    assert approve.data == encode_approve(SPENDER, 1000)
    assert wrap.value == 800
    assert swap.to_address == ROUTER
    assert ledger.calls == [
        f"allowance:{WETH}:{USER}:{SPENDER}",
        f"balance:{WETH}:{USER}",
        f"native:{USER}",
    ]


@pytest.mark.asyncio
async def test_sufficient_allowance_yields_swap_only():
    ledger = FakeLedger(allowance=500)
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(_request("DAI", "USDC"), _trade(address=DAI, amount="300"))

    assert [tx.tx_type for tx in result.transactions] == [TransactionType.SWAP]
    assert result.approval.action == ApprovalAction.NONE
    assert result.wrap.action == WrapAction.NOT_REQUIRED
    # DAI is not the wrapped native token, so balances are never read
    assert len(ledger.calls) == 1


@pytest.mark.asyncio
async def test_insufficient_allowance_resets_before_approving():
    ledger = FakeLedger(allowance=100)
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(_request("DAI", "USDC"), _trade(address=DAI, amount="300"))

    reset, approve, swap = result.transactions
    assert reset.tx_type == TransactionType.RESET_APPROVAL
    assert reset.data == encode_approve(SPENDER, 0)
    assert approve.data == encode_approve(SPENDER, 300)
    assert swap.tx_type == TransactionType.SWAP


@pytest.mark.asyncio
async def test_native_source_skips_ledger_reads():
    ledger = FakeLedger()
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(
        _request("ETH", "DAI"),
        _trade(address=None, amount="1000", spender=None, value="0x3e8"),
    )

    assert ledger.calls == []
    assert len(result.transactions) == 1
    assert result.transactions[0].value == 1000


@pytest.mark.asyncio
async def test_insufficient_funds_raises_without_result():
    ledger = FakeLedger(allowance=5000, token_balance=200, native_balance=700)
    orchestrator = _orchestrator(ledger)

    with pytest.raises(InsufficientFundsError):
        await orchestrator.start_swap(_request(), _trade())


@pytest.mark.asyncio
async def test_result_metadata():
    ledger = FakeLedger(allowance=5000, token_balance=5000)
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(_request(), _trade(gas_price="0x3b9aca00"))

    assert [tx.tx_type for tx in result.transactions] == [TransactionType.SWAP]
    assert result.approval.action == ApprovalAction.NONE
    assert result.wrap.action == WrapAction.NOT_REQUIRED
    assert result.provider_address == SPENDER
    assert result.parsed.send_to_address == SPENDER
    assert result.parsed.status == "pending"
    assert result.parsed.valid_for == 600
    assert result.provider_receives == Decimal("0.000000000000001")
    assert result.provider_sends == "123.45"
    assert result.is_dex is True
    assert result.is_exit_to_fiat is False
    assert result.transactions[-1].gas_price == 10**9
    assert result.data_for_initialization()[-1]["gasPrice"] == 10**9


@pytest.mark.asyncio
async def test_spender_falls_back_to_trade_destination():
    ledger = FakeLedger(allowance=0)
    orchestrator = _orchestrator(ledger)

    result = await orchestrator.start_swap(
        _request("DAI", "USDC"),
        _trade(address=DAI, amount="300", spender=None),
    )

    assert result.provider_address == ROUTER
    assert ledger.calls == [f"allowance:{DAI}:{USER}:{ROUTER}"]


@pytest.mark.asyncio
async def test_trade_created_when_no_quote_given():
    aggregator = FakeAggregator(trade=_trade(address=DAI, amount="300"))
    orchestrator = _orchestrator(FakeLedger(allowance=300), aggregator)

    result = await orchestrator.start_swap(_request("DAI", "USDC", provider="uniswap"))

    aggregator.create_trade.assert_awaited_once()
    assert aggregator.create_trade.await_args.args[1] == "uniswap"
    assert result.dex == "uniswap"


@pytest.mark.asyncio
async def test_unknown_dex_falls_back_to_aggregate():
    aggregator = FakeAggregator(trade=_trade(address=DAI, amount="300"))
    orchestrator = _orchestrator(FakeLedger(allowance=300), aggregator)

    await orchestrator.start_swap(_request("DAI", "USDC", provider="sushiswap"))

    assert aggregator.create_trade.await_args.args[1] == "ag"


@pytest.mark.asyncio
async def test_trade_creation_failure_is_fatal():
    aggregator = FakeAggregator()
    aggregator.create_trade.side_effect = RuntimeError("503 from aggregator")
    ledger = FakeLedger()
    orchestrator = _orchestrator(ledger, aggregator)

    with pytest.raises(QuoteCreationFailure):
        await orchestrator.start_swap(_request())

    assert ledger.calls == []


@pytest.mark.asyncio
async def test_malformed_trade_is_quote_failure():
    orchestrator = _orchestrator(FakeLedger())

    with pytest.raises(QuoteCreationFailure):
        await orchestrator.start_swap(_request(), {"metadata": {}})


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "trade",
    [
        _trade(value="1.5"),
        _trade(gas_price="1.5"),
        _trade(amount="1.5"),
        _trade(amount="-10"),
        _trade(value="0xzz"),
    ],
    ids=["fractional-value", "fractional-gas-price", "fractional-amount", "negative-amount", "bad-hex-value"],
)
async def test_non_integer_trade_quantities_are_quote_failures(trade):
    ledger = FakeLedger(allowance=5000, token_balance=5000)
    orchestrator = _orchestrator(ledger)

    with pytest.raises(QuoteCreationFailure) as excinfo:
        await orchestrator.start_swap(_request(), trade)

    assert excinfo.value.context.recoverable is True
    assert ledger.calls == []


@pytest.mark.asyncio
async def test_malformed_created_trade_is_quote_failure():
    aggregator = FakeAggregator(trade=_trade(value="1.5"))
    orchestrator = _orchestrator(FakeLedger(), aggregator)

    with pytest.raises(QuoteCreationFailure):
        await orchestrator.start_swap(_request())


@pytest.mark.asyncio
async def test_ledger_errors_are_wrapped():
    orchestrator = _orchestrator(FakeLedger(error=ConnectionError("node down")))

    with pytest.raises(LedgerReadFailure) as excinfo:
        await orchestrator.start_swap(_request("DAI", "USDC"), _trade(address=DAI))

    assert excinfo.value.context.recoverable is True


class StalledBalanceLedger(FakeLedger):
    """Balance read never returns on its own; records whether it was cancelled."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.balance_cancelled = False

    async def read_token_balance(self, token_address, owner_address):
        self.calls.append(f"balance:{token_address}:{owner_address}")
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.balance_cancelled = True
            raise


@pytest.mark.asyncio
async def test_failed_read_cancels_pending_reads():
    ledger = StalledBalanceLedger(error=ConnectionError("node down"))
    orchestrator = _orchestrator(ledger)

    with pytest.raises(LedgerReadFailure):
        await asyncio.wait_for(orchestrator.start_swap(_request(), _trade()), timeout=5)

    assert ledger.balance_cancelled is True


@pytest.mark.asyncio
async def test_request_for_other_network_rejected():
    ledger = FakeLedger(allowance=5000, token_balance=5000)
    aggregator = FakeAggregator(trade=_trade())
    orchestrator = _orchestrator(ledger, aggregator)

    with pytest.raises(UnsupportedNetworkError) as excinfo:
        await orchestrator.start_swap(_request(network="BSC"), _trade())

    assert excinfo.value.network == "BSC"
    assert excinfo.value.context.recoverable is False
    assert ledger.calls == []
    aggregator.create_trade.assert_not_awaited()


@pytest.mark.asyncio
async def test_network_match_ignores_case():
    orchestrator = _orchestrator(FakeLedger(allowance=5000, token_balance=5000))

    result = await orchestrator.start_swap(_request(network="eth"), _trade())

    assert [tx.tx_type for tx in result.transactions] == [TransactionType.SWAP]


@pytest.mark.asyncio
async def test_disabled_and_unknown_tokens_rejected():
    orchestrator = _orchestrator(FakeLedger())

    with pytest.raises(UnsupportedTokenError) as excinfo:
        await orchestrator.start_swap(_request("USDT", "DAI"), _trade())
    assert excinfo.value.symbol == "USDT"

    with pytest.raises(UnsupportedTokenError):
        await orchestrator.start_swap(_request("DAI", "DOGE"), _trade())


def test_valid_swap():
    orchestrator = _orchestrator(FakeLedger())

    assert orchestrator.valid_swap("ETH", "DAI")
    assert not orchestrator.valid_swap("USDT", "DAI")
    assert not orchestrator.valid_swap("ETH", "DOGE")


@pytest.mark.asyncio
async def test_order_status_is_mapped():
    aggregator = FakeAggregator(status="overdue")
    orchestrator = _orchestrator(FakeLedger(), aggregator)

    status = await orchestrator.get_order_status({"statusId": "abc"}, "ETH")

    assert status is NotificationStatus.CANCELLED
    aggregator.get_status.assert_awaited_once_with("abc", "ETH")


@pytest.mark.asyncio
async def test_unknown_order_status_propagates():
    orchestrator = _orchestrator(FakeLedger(), FakeAggregator(status="mystery"))

    with pytest.raises(UnknownStatusCode):
        await orchestrator.get_order_status({"statusId": "abc"}, "ETH")


@pytest.mark.asyncio
async def test_validate_address_uses_network():
    aggregator = FakeAggregator()
    orchestrator = _orchestrator(FakeLedger(), aggregator)

    assert await orchestrator.validate_address("DAI", USER) is True
    aggregator.validate_address.assert_awaited_once_with("DAI", USER, "ETH")


def test_parse_order():
    order = SwapOrchestrator.parse_order(
        {
            "id": "ord-1",
            "payinAddress": SPENDER,
            "amountExpectedTo": "10",
            "amountExpectedFrom": "1",
            "status": "waiting",
            "createdAt": "2020-01-01T00:00:00Z",
        },
        valid_for=600,
    )

    assert order.order_id == order.status_id == "ord-1"
    assert order.send_to_address == SPENDER
    assert order.valid_for == 600
