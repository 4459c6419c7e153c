import dataclasses
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from web3 import Web3

from utils.constants import (
    ADDRESS_HEX_LENGTH, BASENAME_SUFFIX, EMPTY_CODE, ENS_SUFFIX, MESSAGE_TEMPLATES, TX_HASH_HEX_LENGTH
)
from utils.formatting import wei_to_native
from utils.networks import NetworkInfo, is_supported, resolve_network
from core.analysis.bytecode_inspector import extract_compiler_version
from core.data.models import (
    AccountResult, ClassificationInput, ContractResult, EnrichedResult, LookupOutcome, ParameterKind,
    TransactionResult
)
from core.exceptions import InvalidParameter, LookUpError, UnresolvedName

logger = logging.getLogger(__name__)

class ParameterClassifier:
    """Classify a free-form parameter and enrich it from RPC, analytics and metadata sources.

    Collaborators are injected per request; the classifier holds no state
    between calls. Enrichment failures degrade single fields, they never
    abort the description.
    """

    def __init__(self, rpc_client, query_client, token_client, name_resolver,
                 resolve_name_contracts: bool = False):
        self.rpc = rpc_client
        self.queries = query_client
        self.tokens = token_client
        self.names = name_resolver
        self.resolve_name_contracts = resolve_name_contracts

        # Every kind except INVALID needs an entry here
        self._enrichers: Dict[ParameterKind, Callable[..., Awaitable[EnrichedResult]]] = {
            ParameterKind.EOA: self._enrich_account,
            ParameterKind.CONTRACT: self._enrich_contract,
            ParameterKind.TRANSACTION: self._enrich_transaction,
            ParameterKind.ENS_NAME: self._enrich_name,
            ParameterKind.BASENAME: self._enrich_name,
        }

    @property
    def enriched_kinds(self):
        return set(self._enrichers)

    async def classify(self, raw: str, network: str) -> ParameterKind:
        kind, _ = await self._classify(ClassificationInput(raw, network))
        return kind

    async def _classify(self, request: ClassificationInput) -> Tuple[ParameterKind, Optional[str]]:
        """Kind of the parameter plus the bytecode fetched while disambiguating addresses"""
        network = request.network
        if not isinstance(network, str):
            raise TypeError(f"network must be a string, got {type(network).__name__}")

        param = (request.raw or '').strip()
        if not param or not is_supported(network):
            return ParameterKind.INVALID, None

        lowered = param.lower()
        if lowered.endswith(BASENAME_SUFFIX):
            return ParameterKind.BASENAME, None
        if lowered.endswith(ENS_SUFFIX):
            return ParameterKind.ENS_NAME, None

        if param.startswith('0x'):
            # Length alone marks a tx hash
            if len(param) == TX_HASH_HEX_LENGTH:
                return ParameterKind.TRANSACTION, None
            if len(param) == ADDRESS_HEX_LENGTH and Web3.is_address(param):
                try:
                    code = await self.rpc.get_code(param, network.strip().lower())
                except LookUpError as e:
                    logger.error(f"Error identifying param type for {param}: {e}")
                    return ParameterKind.INVALID, None
                kind = ParameterKind.EOA if code == EMPTY_CODE else ParameterKind.CONTRACT
                return kind, code

        return ParameterKind.INVALID, None

    async def enrich(self, kind: ParameterKind, raw: str, network: str,
                     bytecode: Optional[str] = None) -> EnrichedResult:
        """Fetch and assemble the facts for an already classified parameter"""
        enricher = self._enrichers.get(kind)
        if enricher is None:
            raise InvalidParameter(f"Cannot enrich a parameter of kind {kind.value}")

        info = resolve_network(network)
        return await enricher((raw or '').strip(), info, kind, bytecode)

    async def analyze(self, raw: str, network: str) -> LookupOutcome:
        """Classify then enrich; unclassifiable input yields an invalid outcome"""
        kind, code = await self._classify(ClassificationInput(raw, network))
        if kind == ParameterKind.INVALID:
            return LookupOutcome(raw, network, kind, MESSAGE_TEMPLATES['invalid'])

        result = await self.enrich(kind, raw, network, bytecode=code)
        return LookupOutcome(raw, network, kind, result.describe(), result)

    async def _safe(self, awaitable: Awaitable[Any], what: str) -> Any:
        try:
            return await awaitable
        except LookUpError as e:
            logger.warning(f"Unable to fetch {what}: {e}")
            return None

    async def _enrich_account(self, address: str, info: NetworkInfo, kind: ParameterKind,
                              bytecode: Optional[str] = None, name: Optional[str] = None) -> AccountResult:
        balance = await self._safe(self.rpc.get_balance(address, info.key), f"balance of {address}")
        activity = await self._safe(self.queries.get_account_activity(address, info.key),
                                    f"activity of {address}")

        return AccountResult(
            kind=kind,
            network=info.key,
            address=address,
            balance=balance,
            tx_count=activity.tx_count if activity else None,
            last_tx_timestamp=activity.last_tx_timestamp if activity else None,
            name=name,
            symbol=info.symbol,
        )

    async def _enrich_contract(self, address: str, info: NetworkInfo, kind: ParameterKind = ParameterKind.CONTRACT,
                               bytecode: Optional[str] = None) -> ContractResult:
        facts = await self._safe(self.queries.get_contract_facts(address, info.key),
                                 f"contract facts of {address}")
        is_erc20 = bool(facts and facts.is_erc20)
        is_erc721 = bool(facts and facts.is_erc721)

        token_info = None
        if is_erc20 or is_erc721:
            token_info = await self.tokens.fetch_token_info(address, info.key, is_erc721, is_erc20)

        code = facts.bytecode if facts and facts.bytecode else bytecode
        if code is None:
            code = await self._safe(self.rpc.get_code(address, info.key), f"code of {address}")

        # ERC721 wins when both flags are set, matching the metadata lookup
        if is_erc721:
            standard = 'ERC721'
        elif is_erc20:
            standard = 'ERC20'
        else:
            standard = 'Custom'

        return ContractResult(
            network=info.key,
            address=address,
            standard=standard,
            token_name=token_info.name if token_info else None,
            token_count=token_info.token_count if token_info else None,
            tx_count=facts.tx_count if facts else None,
            deployer=facts.deployer if facts else None,
            deployed_at=facts.deployed_at if facts else None,
            compiler_version=extract_compiler_version(code),
        )

    async def _enrich_transaction(self, tx_hash: str, info: NetworkInfo, kind: ParameterKind,
                                  bytecode: Optional[str] = None) -> TransactionResult:
        logger.info(f"Processing transaction with hash: {tx_hash}, network: {info.key}")
        detail = await self._safe(self.queries.get_transaction_detail(tx_hash, info.key),
                                  f"details of {tx_hash}")
        receipt = await self._safe(self.rpc.get_transaction_receipt(tx_hash, info.key),
                                   f"receipt of {tx_hash}")

        status = None
        if receipt is not None and receipt.status_code is not None:
            status = 'Success' if receipt.status_code == 1 else 'Failed'

        gas_used = receipt.gas_used if receipt is not None else None
        if gas_used is None and detail is not None:
            gas_used = detail.gas

        amount = None
        if detail is not None and detail.value_wei is not None:
            amount = wei_to_native(detail.value_wei)

        return TransactionResult(
            network=info.key,
            network_name=info.name,
            hash=tx_hash,
            sender=(detail.sender if detail else None) or (receipt.sender if receipt else None),
            receiver=(detail.receiver if detail else None) or (receipt.receiver if receipt else None),
            amount=amount,
            symbol=info.symbol,
            gas_used=gas_used,
            status=status,
            timestamp=detail.block_timestamp if detail else None,
        )

    async def _enrich_name(self, name: str, info: NetworkInfo, kind: ParameterKind,
                           bytecode: Optional[str] = None) -> EnrichedResult:
        try:
            address = await self.names.resolve_address(name, kind)
        except UnresolvedName as e:
            logger.warning(str(e))
            return AccountResult(kind=kind, network=info.key, address=None, name=name, symbol=info.symbol)

        if self.resolve_name_contracts:
            code = await self._safe(self.rpc.get_code(address, info.key), f"code of {address}")
            if code and code != EMPTY_CODE:
                contract = await self._enrich_contract(address, info, ParameterKind.CONTRACT, code)
                return dataclasses.replace(contract, name=name)

        return await self._enrich_account(address, info, kind, name=name)
