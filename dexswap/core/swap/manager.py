"""SwapOrchestrator prepares dex.ag swaps as ordered, unsigned transactions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, List, Mapping, Optional, Union

from ...config import settings
from ...logging_config import swap_log_context
from ...providers.base import AggregatorClient, LedgerClient
from ..errors import (
    LedgerReadFailure,
    QuoteCreationFailure,
    UnsupportedNetworkError,
    UnsupportedTokenError,
)
from ..execution.models import Transaction
from ..execution.tx_builder import TransactionBuilder
from .allowance import AllowanceResolver
from .assembler import TransactionAssembler
from .constants import AGGREGATE_DEX, PROVIDER_NAME, SUPPORTED_DEXES
from .models import (
    ApprovalAction,
    ApprovalDecision,
    ParsedOrder,
    PendingOrder,
    SwapPolicy,
    SwapRequest,
    SwapResult,
    TradeQuote,
    WrapAction,
    WrapDecision,
)
from .status import NotificationStatus, StatusMapper
from .tokens import TokenDirectory
from .wrap import WrapCalculator


class SwapOrchestrator:
    """Turns a swap request and an aggregator trade into a broadcastable sequence."""

    name = PROVIDER_NAME

    def __init__(
        self,
        *,
        ledger: LedgerClient,
        aggregator: AggregatorClient,
        policy: Optional[SwapPolicy] = None,
        tokens: Optional[TokenDirectory] = None,
        network: Optional[str] = None,
        swap_valid_seconds: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._ledger = ledger
        self._aggregator = aggregator
        self.network = (network or settings.network).upper()
        self.policy = policy or SwapPolicy.from_symbols(settings.disabled_symbols)
        self.tokens = tokens or TokenDirectory(self.network)
        self.swap_valid_seconds = swap_valid_seconds or settings.swap_valid_seconds
        self._allowance = AllowanceResolver(logger=self._logger)
        self._wrap = WrapCalculator()
        self._assembler = TransactionAssembler()

    @staticmethod
    def is_dex() -> bool:
        return True

    @property
    def is_valid_network(self) -> bool:
        return self.network == 'ETH'

    def valid_swap(self, from_currency: str, to_currency: str) -> bool:
        if self.policy.is_disabled(from_currency) or self.policy.is_disabled(to_currency):
            return False
        if not self.is_valid_network:
            return False
        return from_currency in self.tokens and to_currency in self.tokens

    @staticmethod
    def select_dex(provider: Optional[str]) -> str:
        if provider and provider in SUPPORTED_DEXES:
            return provider
        return AGGREGATE_DEX

    async def create_trade(self, request: SwapRequest, dex: str) -> TradeQuote:
        try:
            raw = await self._aggregator.create_trade(request, dex)
        except Exception as exc:
            self._logger.error('Trade creation via %s failed: %s', dex, exc)
            raise QuoteCreationFailure(f'Trade creation failed: {exc}', provider=self.name, dex=dex) from exc
        return self._coerce_quote(raw, dex)

    def _coerce_quote(self, raw: Union[TradeQuote, Mapping[str, Any], None], dex: Optional[str]) -> TradeQuote:
        if isinstance(raw, TradeQuote):
            return raw
        if not raw:
            raise QuoteCreationFailure('Aggregator returned an empty trade', provider=self.name, dex=dex)
        try:
            return TradeQuote.model_validate(raw)
        except (TypeError, ValueError) as exc:
            self._logger.error('Malformed trade from %s: %s', dex, exc)
            raise QuoteCreationFailure(f'Malformed trade: {exc}', provider=self.name, dex=dex) from exc

    async def start_swap(
        self,
        request: SwapRequest,
        quote: Union[TradeQuote, Mapping[str, Any], None] = None,
    ) -> SwapResult:
        if request.network.upper() != self.network:
            self._logger.warning('Rejecting %s request on %s orchestrator', request.network, self.network)
            raise UnsupportedNetworkError(request.network, self.network)

        for symbol in (request.from_currency, request.to_currency):
            if symbol not in self.tokens or self.policy.is_disabled(symbol):
                raise UnsupportedTokenError(symbol, self.network)

        dex = self.select_dex(request.provider)
        with swap_log_context(
            from_currency=request.from_currency,
            to_currency=request.to_currency,
            from_address=request.from_address,
            dex=dex,
        ):
            if quote is None:
                trade = await self.create_trade(request, dex)
            else:
                trade = self._coerce_quote(quote, dex)

            spender = trade.spender_address
            transactions, approval, wrap = await self._generate_transactions(request, trade, spender)

            self._logger.info(
                'Prepared %d transaction(s) for %s -> %s (approval=%s, wrap=%s)',
                len(transactions),
                request.from_currency,
                request.to_currency,
                approval.action.value,
                wrap.action.value,
            )

        return SwapResult(
            request=request,
            transactions=transactions,
            provider_address=spender,
            provider_receives=request.from_value,
            provider_sends=trade.metadata.query.to_amount,
            parsed=PendingOrder(
                send_to_address=spender,
                status='pending',
                valid_for=self.swap_valid_seconds,
            ),
            provider=self.name,
            dex=dex,
            is_dex=self.is_dex(),
            is_exit_to_fiat=False,
            approval=approval,
            wrap=wrap,
        )

    async def _generate_transactions(
        self,
        request: SwapRequest,
        trade: TradeQuote,
        spender: str,
    ) -> tuple[List[Transaction], ApprovalDecision, WrapDecision]:
        is_native = self.tokens.is_native(request.from_currency)
        trade_input = trade.metadata.input

        if trade_input is not None and trade_input.address:
            token_address = trade_input.address
        elif is_native:
            token_address = None
        else:
            token_address = self.tokens.get_token_address(request.from_currency)

        if trade_input is not None and trade_input.amount:
            required_amount = trade_input.amount
        else:
            required_amount = self.tokens.to_base_units(request.from_currency, request.from_value)

        wrapped_address = self.tokens.wrapped_token_address
        check_wrap = (
            not is_native
            and wrapped_address is not None
            and self._wrap.is_applicable(token_address, wrapped_address)
        )

        reads: List[asyncio.Future] = []
        if not is_native:
            reads.append(asyncio.ensure_future(self._read(
                self._ledger.read_allowance(token_address, request.from_address, spender),
                'allowance',
            )))
        if check_wrap:
            reads.append(asyncio.ensure_future(self._read(
                self._ledger.read_token_balance(wrapped_address, request.from_address),
                'balanceOf',
            )))
            reads.append(asyncio.ensure_future(self._read(
                self._ledger.read_native_balance(request.from_address),
                'getBalance',
            )))
        values = await self._gather_reads(reads)

        allowance = values.pop(0) if not is_native else 0
        approval = self._allowance.resolve(allowance, required_amount, is_native=is_native)

        if check_wrap:
            wrapped_balance, native_balance = values
            wrap = self._wrap.resolve(required_amount, wrapped_balance, native_balance)
        else:
            wrap = WrapDecision.not_required()

        if wrap.action is WrapAction.INSUFFICIENT_FUNDS:
            self._logger.warning(
                'Insufficient funds: need %s, wrapped+native is %s',
                wrap.required,
                wrap.available,
            )

        approvals = self._approval_transactions(approval, token_address, spender)
        wrap_tx = None
        if wrap.action is WrapAction.WRAP:
            wrap_tx = TransactionBuilder.build_wrap(wrapped_address, wrap.amount)

        swap_tx = TransactionBuilder.build_swap(
            to_address=trade.trade.to,
            data=trade.trade.data,
            value=trade.trade.value,
            gas_price=trade.metadata.gas_price,
            description=f'Swap {request.from_currency} -> {request.to_currency}',
        )

        transactions = self._assembler.assemble(
            approval,
            wrap,
            swap_tx,
            approvals=approvals,
            wrap_tx=wrap_tx,
        )
        return transactions, approval, wrap

    @staticmethod
    async def _gather_reads(reads: List[asyncio.Future]) -> List[int]:
        """Await every read; the first failure cancels the ones still in flight."""
        try:
            return list(await asyncio.gather(*reads))
        except BaseException:
            for read in reads:
                if not read.done():
                    read.cancel()
            await asyncio.gather(*reads, return_exceptions=True)
            raise

    async def _read(self, call: Awaitable[int], method: str) -> int:
        try:
            return await call
        except LedgerReadFailure:
            raise
        except Exception as exc:
            self._logger.error('Ledger %s read failed: %s', method, exc)
            raise LedgerReadFailure(f'Ledger {method} read failed: {exc}', method=method) from exc

    def _approval_transactions(
        self,
        decision: ApprovalDecision,
        token_address: Optional[str],
        spender: str,
    ) -> List[Transaction]:
        if decision.action is ApprovalAction.NONE:
            return []

        approvals: List[Transaction] = []
        if decision.action is ApprovalAction.RESET_THEN_APPROVE:
            approvals.append(TransactionBuilder.build_approve(
                token_address,
                spender,
                self._ledger.encode_approve_call(token_address, spender, 0),
                reset=True,
            ))
        approvals.append(TransactionBuilder.build_approve(
            token_address,
            spender,
            self._ledger.encode_approve_call(token_address, spender, decision.amount),
        ))
        return approvals

    async def get_order_status(self, notice_details: Mapping[str, Any], network: str) -> NotificationStatus:
        status_id = notice_details.get('statusId') or notice_details.get('status_id')
        try:
            code = await self._aggregator.get_status(status_id, network)
            return StatusMapper.map(code)
        except Exception:
            self._logger.exception('Order status lookup failed for %s', status_id)
            raise

    async def validate_address(self, to_currency: str, address: str) -> bool:
        return await self._aggregator.validate_address(to_currency, address, self.network)

    @staticmethod
    def parse_order(order: Mapping[str, Any], valid_for: Optional[int] = None) -> ParsedOrder:
        return ParsedOrder(
            order_id=order.get('id'),
            status_id=order.get('id'),
            send_to_address=order.get('payinAddress'),
            rec_value=order.get('amountExpectedTo'),
            send_value=order.get('amountExpectedFrom'),
            status=order.get('status'),
            timestamp=order.get('createdAt'),
            # quoted rates are only an estimate
            valid_for=valid_for or settings.swap_valid_seconds,
            raw=dict(order),
        )
