from dataclasses import dataclass, asdict, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Any, Union

from utils.constants import MESSAGE_TEMPLATES, UNKNOWN_COMPILER
from utils.formatting import display, format_native_amount, shorten_address

class ParameterKind(Enum):
    EOA = "eoa"
    CONTRACT = "contract"
    TRANSACTION = "tx"
    ENS_NAME = "ens"
    BASENAME = "basename"
    INVALID = "invalid"

    @property
    def is_name(self) -> bool:
        return self in (ParameterKind.ENS_NAME, ParameterKind.BASENAME)

class QueryStatus(Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (QueryStatus.FINISHED, QueryStatus.FAILED)

@dataclass(frozen=True)
class ClassificationInput:
    raw: str
    network: str

@dataclass
class QueryJob:
    """One asynchronous query execution, owned by the polling loop that created it"""
    execution_id: str
    query_id: str
    status: QueryStatus = QueryStatus.PENDING
    progress: float = 0.0
    polls: int = 0

# Query result records

@dataclass(frozen=True)
class AccountActivity:
    tx_count: Optional[int]
    last_tx_timestamp: Optional[str]

@dataclass(frozen=True)
class ContractFacts:
    address: str
    deployer: Optional[str]
    deploy_tx_hash: Optional[str]
    deployed_at: Optional[str]
    is_erc20: bool
    is_erc721: bool
    tx_count: Optional[int]
    bytecode: Optional[str] = None

@dataclass(frozen=True)
class TransactionDetail:
    hash: str
    sender: Optional[str]
    receiver: Optional[str]
    gas: Optional[int]
    value_wei: Optional[Decimal]
    block_timestamp: Optional[str]

@dataclass(frozen=True)
class TransactionReceipt:
    status_code: Optional[int]
    gas_used: Optional[int]
    sender: Optional[str] = None
    receiver: Optional[str] = None

@dataclass(frozen=True)
class TokenInfo:
    name: Optional[str] = None
    symbol: Optional[str] = None
    token_count: Optional[str] = None
    standard: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.token_count is None

# Enriched results

def _serialize(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value

@dataclass(frozen=True)
class AccountResult:
    """EOA, ENS name or Basename: balance plus activity summary"""
    kind: ParameterKind
    network: str
    address: Optional[str]
    balance: Optional[Decimal] = None
    tx_count: Optional[int] = None
    last_tx_timestamp: Optional[str] = None
    name: Optional[str] = None
    symbol: str = 'ETH'

    def describe(self) -> str:
        if self.kind.is_name and not self.address:
            return MESSAGE_TEMPLATES['unresolved_name'].format(name=self.name)

        balance = f"{self.balance:.4f}" if self.balance is not None else display(None)
        return MESSAGE_TEMPLATES[self.kind.value].format(
            balance=balance,
            symbol=self.symbol,
            tx_count=display(self.tx_count),
            last_tx=display(self.last_tx_timestamp),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}

@dataclass(frozen=True)
class ContractResult:
    network: str
    address: str
    standard: str
    token_name: Optional[str] = None
    token_count: Optional[str] = None
    tx_count: Optional[int] = None
    deployer: Optional[str] = None
    deployed_at: Optional[str] = None
    compiler_version: str = UNKNOWN_COMPILER
    name: Optional[str] = None
    kind: ParameterKind = field(default=ParameterKind.CONTRACT)

    def describe(self) -> str:
        return MESSAGE_TEMPLATES['contract'].format(
            name=self.token_name or 'This',
            article='an' if self.standard.startswith('ERC') else 'a',
            standard=self.standard,
            token_count=display(self.token_count, 'unknown'),
            tx_count=display(self.tx_count),
            deployer=display(self.deployer, 'unknown'),
            deployed_at=display(self.deployed_at, 'unknown'),
            compiler=self.compiler_version,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}

@dataclass(frozen=True)
class TransactionResult:
    network: str
    network_name: str
    hash: str
    sender: Optional[str] = None
    receiver: Optional[str] = None
    amount: Optional[Decimal] = None
    symbol: str = 'ETH'
    gas_used: Optional[int] = None
    status: Optional[str] = None
    timestamp: Optional[str] = None
    kind: ParameterKind = field(default=ParameterKind.TRANSACTION)

    @property
    def available(self) -> bool:
        return bool(self.sender or self.receiver)

    def describe(self) -> str:
        if not self.available:
            return MESSAGE_TEMPLATES['tx_unavailable']

        text = MESSAGE_TEMPLATES['tx_header'].format(
            network=self.network_name, status=display(self.status, 'Unknown')
        )
        receiver = shorten_address(self.receiver)
        if not self.amount:
            text += MESSAGE_TEMPLATES['tx_between'].format(
                sender=shorten_address(self.sender), receiver=receiver
            )
        else:
            text += MESSAGE_TEMPLATES['tx_sent'].format(
                amount=format_native_amount(self.amount, self.symbol), receiver=receiver
            )
        text += MESSAGE_TEMPLATES['tx_gas'].format(gas_used=display(self.gas_used))
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}

EnrichedResult = Union[AccountResult, ContractResult, TransactionResult]

@dataclass(frozen=True)
class LookupOutcome:
    """Classification plus the rendered description handed to the UI layer"""
    parameter: str
    network: str
    kind: ParameterKind
    description: str
    result: Optional[EnrichedResult] = None

    @property
    def valid(self) -> bool:
        return self.kind != ParameterKind.INVALID

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parameter': self.parameter,
            'network': self.network,
            'type': self.kind.value,
            'valid': self.valid,
            'description': self.description,
            'result': self.result.to_dict() if self.result else None,
        }
