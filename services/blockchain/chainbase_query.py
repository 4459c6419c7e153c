import aiohttp
import asyncio
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from utils.config import Config
from utils.networks import resolve_network
from core.data.models import (
    AccountActivity, ContractFacts, QueryJob, QueryStatus, TransactionDetail
)
from core.exceptions import QueryExecutionFailed, QueryTimeout, SchemaMismatch
from services.blockchain.session import session_scope

logger = logging.getLogger(__name__)

# Minimum number of columns each positional schema needs
SCHEMA_COLUMNS = {
    'account_activity': 2,
    'contract_facts': 7,
    'transaction_detail': 6,
}

def _to_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError) as e:
        raise SchemaMismatch(f"Expected an integer column, got {value!r}") from e

def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise SchemaMismatch(f"Expected a numeric column, got {value!r}") from e

def _to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true')
    return value == 1

def _to_str(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)

def parse_account_activity(row: List[Any]) -> AccountActivity:
    return AccountActivity(
        tx_count=_to_int(row[0]),
        last_tx_timestamp=_to_str(row[1]),
    )

def parse_contract_facts(row: List[Any]) -> ContractFacts:
    return ContractFacts(
        address=str(row[0]),
        deployer=_to_str(row[1]),
        deploy_tx_hash=_to_str(row[2]),
        deployed_at=_to_str(row[3]),
        is_erc20=_to_flag(row[4]),
        is_erc721=_to_flag(row[5]),
        tx_count=_to_int(row[6]),
        bytecode=_to_str(row[7]) if len(row) > 7 else None,
    )

def parse_transaction_detail(row: List[Any]) -> TransactionDetail:
    return TransactionDetail(
        hash=str(row[0]),
        sender=_to_str(row[1]),
        receiver=_to_str(row[2]),
        gas=_to_int(row[3]),
        value_wei=_to_decimal(row[4]),
        block_timestamp=_to_str(row[5]),
    )

PARSERS: Dict[str, Callable[[List[Any]], Any]] = {
    'account_activity': parse_account_activity,
    'contract_facts': parse_contract_facts,
    'transaction_detail': parse_transaction_detail,
}

class AnalyticsQueryClient:
    """Chainbase query-execution client: submit, poll until terminal, fetch and parse the first row"""

    def __init__(self, config: Config, session: Optional[aiohttp.ClientSession] = None,
                 poll_interval: float = None, timeout: float = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.session = session
        self.base_url = config.chainbase_query_url
        self.poll_interval = config.query_poll_interval if poll_interval is None else poll_interval
        self.timeout = config.query_timeout_seconds if timeout is None else timeout
        self._sleep = sleep
        self._clock = clock

        # query id -> schema name
        self._schemas = {query_id: schema for schema, query_id in config.query_ids.items()}

    def _headers(self) -> Dict[str, str]:
        return {
            "X-API-KEY": self.config.chainbase_api_key or "",
            "Content-Type": "application/json"
        }

    async def _request(self, method: str, url: str, payload: Dict = None,
                       execution_id: str = None) -> Dict:
        request_timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        try:
            async with session_scope(self.session, self.config.request_timeout) as session:
                if method == 'POST':
                    context = session.post(url, json=payload, headers=self._headers(), timeout=request_timeout)
                else:
                    context = session.get(url, headers=self._headers(), timeout=request_timeout)

                async with context as response:
                    if not 200 <= response.status < 300:
                        raise QueryExecutionFailed(f"{method} {url} returned HTTP {response.status}",
                                                   execution_id=execution_id)
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise QueryTimeout(f"{method} {url} timed out", execution_id=execution_id) from e
        except aiohttp.ClientError as e:
            raise QueryExecutionFailed(f"{method} {url} failed: {e}", execution_id=execution_id) from e
        except ValueError as e:
            raise QueryExecutionFailed(f"{method} {url} returned invalid JSON: {e}",
                                       execution_id=execution_id) from e

        if not isinstance(data, dict):
            raise QueryExecutionFailed(f"{method} {url} returned a non-object response",
                                       execution_id=execution_id)
        return data

    async def submit(self, query_id: str, parameters: Dict[str, Any]) -> str:
        """Start one execution of a pre-registered query and return its execution id"""
        url = f"{self.base_url}/query/{query_id}/execute"
        data = await self._request('POST', url, {"queryParameters": parameters})

        try:
            execution_id = data['data'][0]['executionId']
        except (KeyError, IndexError, TypeError) as e:
            raise QueryExecutionFailed(f"Query {query_id} submit returned no execution id: {data}") from e

        logger.info(f"Submitted query {query_id}: execution {execution_id}")
        return str(execution_id)

    async def poll(self, execution_id: str) -> Tuple[QueryStatus, float]:
        """Current status and progress of an execution"""
        url = f"{self.base_url}/execution/{execution_id}/status"
        data = await self._request('GET', url, execution_id=execution_id)

        try:
            entry = data['data'][0]
            raw_status = str(entry['status']).upper()
        except (KeyError, IndexError, TypeError) as e:
            raise QueryExecutionFailed(f"Malformed status response for {execution_id}: {data}",
                                       execution_id=execution_id) from e

        try:
            status = QueryStatus(raw_status)
        except ValueError:
            logger.debug(f"Unknown query status {raw_status}, treating as pending")
            status = QueryStatus.PENDING

        try:
            progress = float(entry.get('progress') or 0)
        except (TypeError, ValueError):
            progress = 0.0

        return status, progress

    async def fetch_result(self, execution_id: str) -> List[List[Any]]:
        """Result rows of a finished execution"""
        url = f"{self.base_url}/execution/{execution_id}/results"
        data = await self._request('GET', url, execution_id=execution_id)

        if data.get('code') != 200:
            raise QueryExecutionFailed(f"Unexpected result code for {execution_id}: {data.get('code')} "
                                       f"{data.get('message', '')}", execution_id=execution_id)

        result = data.get('data') or {}
        rows = result.get('data') if isinstance(result, dict) else None
        if not isinstance(rows, list):
            raise SchemaMismatch(f"Result of {execution_id} has no row list")
        return rows

    async def wait_for_completion(self, job: QueryJob) -> QueryJob:
        """Poll at a fixed interval until the job is terminal or the deadline passes"""
        deadline = self._clock() + self.timeout

        while True:
            job.status, job.progress = await self.poll(job.execution_id)
            job.polls += 1
            logger.info(f"Execution {job.execution_id}: {job.status.value} {job.progress} %")

            if job.status.is_terminal:
                return job

            if self._clock() >= deadline:
                raise QueryTimeout(
                    f"Execution {job.execution_id} not finished after {self.timeout}s",
                    execution_id=job.execution_id
                )

            await self._sleep(self.poll_interval)

    async def run_query(self, query_id: str, parameters: Dict[str, Any]) -> List[Any]:
        """Submit once, wait for completion and return the first result row"""
        execution_id = await self.submit(query_id, parameters)
        job = QueryJob(execution_id=execution_id, query_id=query_id)

        await self.wait_for_completion(job)
        if job.status == QueryStatus.FAILED:
            raise QueryExecutionFailed(f"Query {query_id} execution failed", execution_id=execution_id)

        rows = await self.fetch_result(execution_id)
        if not rows:
            raise SchemaMismatch(f"Query {query_id} returned no rows")
        return rows[0]

    async def execute(self, query_id: str, parameters: Dict[str, Any]) -> Any:
        """Run a query and parse its first row with the schema registered for the query id"""
        schema = self._schemas.get(str(query_id))
        if schema is None:
            raise ValueError(f"Unsupported query id: {query_id}")

        row = await self.run_query(query_id, parameters)
        if not isinstance(row, (list, tuple)) or len(row) < SCHEMA_COLUMNS[schema]:
            raise SchemaMismatch(
                f"Query {query_id} ({schema}) needs {SCHEMA_COLUMNS[schema]} columns, got {row!r}"
            )
        return PARSERS[schema](list(row))

    def _parameters(self, network: str, **params: str) -> Dict[str, str]:
        info = resolve_network(network)
        return {**params, "param_chain": info.key}

    async def get_account_activity(self, address: str, network: str) -> AccountActivity:
        return await self.execute(
            self.config.query_id_account_activity,
            self._parameters(network, param_address=address)
        )

    async def get_contract_facts(self, address: str, network: str) -> ContractFacts:
        return await self.execute(
            self.config.query_id_contract_facts,
            self._parameters(network, param_address=address)
        )

    async def get_transaction_detail(self, tx_hash: str, network: str) -> TransactionDetail:
        return await self.execute(
            self.config.query_id_transaction_detail,
            self._parameters(network, param_hash=tx_hash)
        )
