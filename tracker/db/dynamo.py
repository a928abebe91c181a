"""DynamoDB 단일 테이블 접근 계층.

DynamoDB single-table access layer.
Wraps a boto3 ``Table`` resource with the operations the durable
repositories need: point get/put/delete, partition and index queries,
paginated scans, and chunked batch writes. Blocking boto3 calls run in a
worker thread (``asyncio.to_thread``) so callers suspend on I/O only.

Every botocore failure except a failed condition is translated into
``BackendUnavailable``; ``ConditionFailed`` is raised for conditional
writes so repositories can map it to their own outcome.
"""

import asyncio
import logging
import time
from decimal import Decimal
from functools import partial
from typing import Any, Callable, TypeVar

import boto3
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from tracker.config import Settings
from tracker.db.errors import BackendUnavailable, PartialBatchFailure
from tracker.db.keys import KEY_ATTRIBUTES

logger = logging.getLogger(__name__)

T = TypeVar("T")

# DynamoDB 배치 요청당 최대 항목 수 — Per-request item limit of BatchWriteItem
BATCH_CHUNK_SIZE: int = 25

# 재시도 시 지연 시간(초) 기본값 — Base delay for unprocessed-item retries
_BATCH_RETRY_BASE_DELAY: float = 0.05


class ConditionFailed(Exception):
    """조건식 불일치로 쓰기가 거부됨 (A conditional write was rejected)."""


def to_dynamo(value: Any) -> Any:
    """float를 Decimal로 변환 — boto3는 float를 허용하지 않음.

    Recursively convert floats to ``Decimal`` for boto3 serialization.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Decimal을 int/float로 복원 (Recursively restore Decimals as int or float)."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    if isinstance(value, set):
        return sorted(from_dynamo(v) for v in value)
    return value


class DynamoTable:
    """단일 테이블 핸들 — PK/SK 기본 키와 GSI1/GSI2 보조 인덱스.

    Handle on the core table (PK/SK primary key, GSI1/GSI2 indexes).
    The boto3 resource is created lazily on first use.

    Attributes:
        table_name: 테이블 이름 (Table name)
        gsi1_name / gsi2_name: 인덱스 이름 (Index names)
    """

    def __init__(self, config: Settings) -> None:
        self._config: Settings = config
        self.table_name: str = config.DDB_TABLE
        self.gsi1_name: str = config.DDB_GSI1
        self.gsi2_name: str = config.DDB_GSI2
        self._resource = None
        self._table = None

    @property
    def resource(self):
        if self._resource is None:
            self._resource = boto3.resource(
                "dynamodb",
                region_name=self._config.AWS_REGION,
                endpoint_url=self._config.DDB_ENDPOINT or None,
                config=BotoConfig(retries={"max_attempts": 3, "mode": "standard"}),
            )
        return self._resource

    @property
    def table(self):
        if self._table is None:
            self._table = self.resource.Table(self.table_name)
        return self._table

    @property
    def client(self):
        # 리소스 클라이언트는 파이썬 기본 타입을 자동 직렬화함
        # The resource's client (de)serializes native Python values
        return self.resource.meta.client

    # ------------------------------------------------------------------
    # 실행 헬퍼 — Execution helpers
    # ------------------------------------------------------------------
    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """boto3 호출을 워커 스레드에서 실행하고 오류를 변환합니다.

        Run a blocking boto3 call in a worker thread and translate failures.

        Raises:
            ConditionFailed: 조건부 쓰기 거부 (Conditional check failed)
            BackendUnavailable: 그 외 모든 botocore 오류 (Any other botocore failure)
        """
        try:
            return await asyncio.to_thread(partial(fn, *args, **kwargs))
        except ClientError as exc:
            code: str = exc.response.get("Error", {}).get("Code", "Unknown")
            if code == "ConditionalCheckFailedException":
                raise ConditionFailed(code) from exc
            message: str = exc.response.get("Error", {}).get("Message", str(exc))
            logger.warning("DynamoDB request failed on %s: %s %s", self.table_name, code, message)
            raise BackendUnavailable(message, code=code) from exc
        except BotoCoreError as exc:
            logger.warning("DynamoDB connection failure on %s: %s", self.table_name, exc)
            raise BackendUnavailable(str(exc), code=type(exc).__name__) from exc

    # ------------------------------------------------------------------
    # 테이블 수명주기 — Table lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        """테이블이 ACTIVE가 될 때까지 대기, 필요 시 자동 생성.

        Wait (bounded) until the table and both indexes are ACTIVE, creating
        them first when ``DDB_CREATE_TABLES`` is set and the table is missing.

        Raises:
            BackendUnavailable: 테이블 없음, 시간 초과, 연결 실패
                                (Missing table, timeout, or connectivity failure)
        """
        try:
            await self._call(self.client.describe_table, TableName=self.table_name)
        except BackendUnavailable as exc:
            if exc.code != "ResourceNotFoundException":
                raise
            if not self._config.DDB_CREATE_TABLES:
                raise BackendUnavailable(
                    f"table {self.table_name} does not exist", code=exc.code
                ) from exc
            await self.create_table()
        await self.wait_for_active()

    async def create_table(self) -> None:
        """단일 테이블과 GSI1/GSI2를 생성합니다 (Create the table with GSI1 and GSI2)."""
        logger.info("Creating DynamoDB table %s", self.table_name)
        indexes: list[dict[str, Any]] = [
            {
                "IndexName": name,
                "KeySchema": [
                    {"AttributeName": f"{prefix}PK", "KeyType": "HASH"},
                    {"AttributeName": f"{prefix}SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
            for name, prefix in ((self.gsi1_name, "GSI1"), (self.gsi2_name, "GSI2"))
        ]
        await self._call(
            self.client.create_table,
            TableName=self.table_name,
            BillingMode="PAY_PER_REQUEST",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": name, "AttributeType": "S"}
                for name in sorted(KEY_ATTRIBUTES)
            ],
            GlobalSecondaryIndexes=indexes,
        )

    async def wait_for_active(self) -> None:
        """테이블과 인덱스가 ACTIVE 상태가 될 때까지 폴링합니다.

        Poll ``DescribeTable`` until the table and its indexes are ACTIVE.

        Raises:
            BackendUnavailable: 제한 시간 내 활성화되지 않음 (Not active within the timeout)
        """
        deadline: float = time.monotonic() + self._config.DDB_WAIT_TIMEOUT_SECONDS
        while True:
            response: dict = await self._call(
                self.client.describe_table, TableName=self.table_name
            )
            description: dict = response["Table"]
            statuses: list[str] = [description.get("TableStatus", "")]
            statuses += [
                index.get("IndexStatus", "")
                for index in description.get("GlobalSecondaryIndexes", [])
            ]
            if all(status == "ACTIVE" for status in statuses):
                return
            if time.monotonic() >= deadline:
                raise BackendUnavailable(
                    f"table {self.table_name} not active (status: {', '.join(statuses)})",
                    code="TableNotActive",
                )
            logger.info("Waiting for table %s to become active: %s", self.table_name, statuses)
            await asyncio.sleep(self._config.DDB_WAIT_INTERVAL_SECONDS)

    # ------------------------------------------------------------------
    # 단일 아이템 연산 — Single-item operations (atomic per key)
    # ------------------------------------------------------------------
    async def get(self, key: dict[str, str]) -> dict[str, Any] | None:
        response: dict = await self._call(self.table.get_item, Key=key, ConsistentRead=True)
        item: dict | None = response.get("Item")
        return from_dynamo(item) if item is not None else None

    async def put(
        self, item: dict[str, Any], condition: ConditionBase | None = None
    ) -> dict[str, Any]:
        """아이템을 저장합니다. 조건식 불일치 시 ConditionFailed.

        Write a whole item, optionally guarded by a condition expression.
        """
        params: dict[str, Any] = {"Item": to_dynamo(item)}
        if condition is not None:
            params["ConditionExpression"] = condition
        await self._call(self.table.put_item, **params)
        return item

    async def delete(self, key: dict[str, str]) -> dict[str, Any] | None:
        """아이템을 삭제하고 삭제 전 값을 반환합니다 (Delete; return the old item or None)."""
        response: dict = await self._call(self.table.delete_item, Key=key, ReturnValues="ALL_OLD")
        old: dict | None = response.get("Attributes")
        return from_dynamo(old) if old else None

    async def increment(
        self,
        key: dict[str, str],
        attribute: str,
        touched: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """기존 아이템의 숫자 속성을 1 증가시킵니다. 아이템이 없으면 None.

        Atomically add one to a numeric attribute of an existing item and set
        the ``touched`` attributes (e.g. ``updatedAt``) in the same request.
        """
        names: dict[str, str] = {"#attr": attribute}
        values: dict[str, Any] = {":one": 1}
        expression: str = "ADD #attr :one"
        assignments: list[str] = []
        for position, (name, value) in enumerate((touched or {}).items()):
            names[f"#t{position}"] = name
            values[f":t{position}"] = to_dynamo(value)
            assignments.append(f"#t{position} = :t{position}")
        if assignments:
            expression = f"SET {', '.join(assignments)} {expression}"
        try:
            response: dict = await self._call(
                self.table.update_item,
                Key=key,
                UpdateExpression=expression,
                ConditionExpression=Attr("PK").exists(),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ConditionFailed:
            return None
        return from_dynamo(response.get("Attributes"))

    # ------------------------------------------------------------------
    # 다중 아이템 조회 — Multi-item reads (paginated)
    # ------------------------------------------------------------------
    async def _paginate(self, fn: Callable[..., dict], params: dict[str, Any]) -> list[dict]:
        items: list[dict] = []
        while True:
            response: dict = await self._call(fn, **params)
            items.extend(from_dynamo(item) for item in response.get("Items", []))
            last_key: dict | None = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            params = {**params, "ExclusiveStartKey": last_key}

    async def query_partition(self, pk: str, sk_prefix: str | None = None) -> list[dict]:
        """파티션 내 아이템 조회 (Query one partition, optionally by SK prefix)."""
        condition: ConditionBase = Key("PK").eq(pk)
        if sk_prefix:
            condition = condition & Key("SK").begins_with(sk_prefix)
        return await self._paginate(
            self.table.query, {"KeyConditionExpression": condition, "ConsistentRead": True}
        )

    async def query_index(
        self,
        index: str,
        partition_value: str,
        sk_between: tuple[str, str] | None = None,
        sk_gte: str | None = None,
        sk_lte: str | None = None,
    ) -> list[dict]:
        """GSI 조회 — index는 "GSI1" 또는 "GSI2".

        Query a secondary index by its partition key with an optional range
        condition on its sort key.

        Args:
            index: 논리 인덱스 이름 "GSI1" | "GSI2" (Logical index name)
            partition_value: 인덱스 파티션 키 값 (Index partition key value)
            sk_between: 정렬 키 포함 범위 (Inclusive sort-key range)
            sk_gte / sk_lte: 한쪽 경계 (Single-sided bounds)
        """
        index_name: str = self.gsi1_name if index == "GSI1" else self.gsi2_name
        condition: ConditionBase = Key(f"{index}PK").eq(partition_value)
        sort_key = Key(f"{index}SK")
        if sk_between is not None:
            condition = condition & sort_key.between(*sk_between)
        elif sk_gte is not None:
            condition = condition & sort_key.gte(sk_gte)
        elif sk_lte is not None:
            condition = condition & sort_key.lte(sk_lte)
        return await self._paginate(
            self.table.query,
            {
                "IndexName": index_name,
                "KeyConditionExpression": condition,
            },
        )

    async def scan(self, filter_expression: ConditionBase | None = None) -> list[dict]:
        """전체 테이블 스캔 — 비용이 큰 대체 경로 (Full table scan, the expensive path)."""
        params: dict[str, Any] = {}
        if filter_expression is not None:
            params["FilterExpression"] = filter_expression
        return await self._paginate(self.table.scan, params)

    # ------------------------------------------------------------------
    # 배치 쓰기 — Batch writes (not transactional)
    # ------------------------------------------------------------------
    async def batch_write(
        self,
        puts: list[dict[str, Any]] | None = None,
        deletes: list[dict[str, str]] | None = None,
        form_id: str | None = None,
    ) -> int:
        """삭제 후 저장 요청을 25개 단위로 나누어 기록합니다.

        Write delete requests followed by put requests in chunks of 25.
        Unprocessed items are retried with backoff. A delete for a key that
        is also being put is dropped, since the put overwrites it and a single
        request may not touch the same key twice.

        Returns:
            int: 적용된 요청 수 (Number of applied requests)

        Raises:
            BackendUnavailable: 아무것도 기록되지 않은 채 실패 (Failed before anything was written)
            PartialBatchFailure: 일부만 기록됨 (Only part of the batch was applied)
        """
        puts = puts or []
        put_keys: set[tuple[str, str]] = {(item["PK"], item["SK"]) for item in puts}
        requests: list[dict[str, Any]] = [
            {"DeleteRequest": {"Key": key}}
            for key in (deletes or [])
            if (key["PK"], key["SK"]) not in put_keys
        ]
        requests += [{"PutRequest": {"Item": to_dynamo(item)}} for item in puts]

        written: int = 0
        for start in range(0, len(requests), BATCH_CHUNK_SIZE):
            chunk: list[dict[str, Any]] = requests[start:start + BATCH_CHUNK_SIZE]
            applied, unprocessed, failure = await self._write_chunk(chunk)
            written += applied
            if failure is None and not unprocessed:
                continue
            if written == 0:
                if failure is not None:
                    raise failure
                raise BackendUnavailable(
                    f"batch write on {self.table_name} throttled", code="UnprocessedItems"
                )
            logger.error(
                "Batch write on %s stopped after %d of %d requests",
                self.table_name, written, len(requests),
            )
            raise PartialBatchFailure(form_id, written, len(requests) - written) from failure
        return written

    async def _write_chunk(
        self, chunk: list[dict[str, Any]]
    ) -> tuple[int, list[dict[str, Any]], BackendUnavailable | None]:
        """한 청크를 기록하고 실제 진행 상황을 반환합니다.

        Write one chunk, retrying unprocessed requests. A failure on a retry
        does not discard what earlier attempts already applied.

        Returns:
            (applied, pending, failure): 적용된 요청 수, 남은 요청, 중단 원인
            (Requests applied, requests still pending, the error that stopped it)
        """
        pending: list[dict[str, Any]] = chunk
        for attempt in range(self._config.DDB_BATCH_MAX_RETRIES + 1):
            try:
                response: dict = await self._call(
                    self.client.batch_write_item, RequestItems={self.table_name: pending}
                )
            except BackendUnavailable as exc:
                return len(chunk) - len(pending), pending, exc
            pending = response.get("UnprocessedItems", {}).get(self.table_name, [])
            if not pending:
                return len(chunk), [], None
            logger.warning(
                "Retrying %d unprocessed batch requests on %s (attempt %d)",
                len(pending), self.table_name, attempt + 1,
            )
            await asyncio.sleep(_BATCH_RETRY_BASE_DELAY * (2 ** attempt))
        return len(chunk) - len(pending), pending, None
