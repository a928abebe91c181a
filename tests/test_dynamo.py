"""DynamoDB 백엔드 테스트 — 아이템 구조, 배치 쓰기, 테이블 대기 (moto).

DynamoDB-specific behaviour: stored item layout, chunked batch writes,
partial batch failures, wait-for-active, and the audit trail.
"""

from decimal import Decimal

import pytest
from botocore.exceptions import ClientError

from tracker.db.dynamo import DynamoTable
from tracker.db.errors import BackendUnavailable, PartialBatchFailure, VersionConflict
from tracker.db.keys import episode_key, form_field_key, form_key
from tracker.repositories.ddb import (
    AuditDynamoRepository,
    EpisodesDynamoRepository,
    FormsDynamoRepository,
)


def _raw_item(table: DynamoTable, key: dict) -> dict:
    return table.table.get_item(Key=key).get("Item")


def _throttled(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


class TestItemLayout:
    """저장 아이템 구조 테스트."""

    async def test_form_item_keys_and_camel_case(self, ddb_table: DynamoTable):
        """폼 아이템 — PK/SK와 camelCase 속성."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Layout", "created_by": "c@x.com"})
        item = _raw_item(ddb_table, form_key(form.id))
        assert item["PK"] == f"FORM#{form.id}"
        assert item["SK"] == "METADATA"
        assert item["formId"] == form.id
        assert item["createdBy"] == "c@x.com"
        assert "description" not in item

    async def test_field_item_in_form_partition(self, ddb_table: DynamoTable):
        """필드 아이템 — 폼 파티션, FIELD# 정렬 키."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Fields"})
        field = await forms.create_field(form.id, {"field_id": "x1", "label": "X", "type": "text"})
        item = _raw_item(ddb_table, form_field_key(form.id, field.field_id))
        assert item["PK"] == f"FORM#{form.id}"
        assert item["SK"] == "FIELD#x1"
        assert item["fieldId"] == "x1"
        assert item["formId"] == form.id

    async def test_episode_item_index_keys(self, ddb_table: DynamoTable):
        """에피소드 아이템 — GSI1(폼), GSI2(제출자) 키."""
        episodes = EpisodesDynamoRepository(ddb_table)
        episode = await episodes.create({
            "form_id": "f1",
            "timestamp": "2024-01-01T10:00:00Z",
            "created_by": "t@x.com",
        })
        item = _raw_item(ddb_table, episode_key(episode.id))
        assert item["GSI1PK"] == "FORM#f1"
        assert item["GSI1SK"] == "TS#2024-01-01T10:00:00.000000Z"
        assert item["GSI2PK"] == "TEACHER#t@x.com"
        assert item["GSI2SK"] == "TS#2024-01-01T10:00:00.000000Z"
        assert item["episodeId"] == episode.id
        assert item["createdBy"] == "t@x.com"

    async def test_episode_update_rewrites_index_keys(self, ddb_table: DynamoTable):
        """timestamp 수정 시 인덱스 정렬 키 갱신."""
        episodes = EpisodesDynamoRepository(ddb_table)
        episode = await episodes.create({
            "form_id": "f1",
            "timestamp": "2024-01-01T10:00:00Z",
            "created_by": "t@x.com",
        })
        await episodes.update(episode.id, {"timestamp": "2024-02-01T10:00:00Z"})
        item = _raw_item(ddb_table, episode_key(episode.id))
        assert item["GSI1SK"] == "TS#2024-02-01T10:00:00.000000Z"
        assert item["GSI2SK"] == "TS#2024-02-01T10:00:00.000000Z"

    async def test_numbers_round_trip(self, ddb_table: DynamoTable):
        """float는 Decimal로 저장되고 숫자로 복원."""
        episodes = EpisodesDynamoRepository(ddb_table)
        episode = await episodes.create({
            "form_id": "f1",
            "created_by": "t@x.com",
            "data": {"score": 2.5, "count": 3, "nested": [1.25]},
        })
        item = _raw_item(ddb_table, episode_key(episode.id))
        assert item["data"]["score"] == Decimal("2.5")

        fetched = await episodes.get(episode.id)
        assert fetched.data == {"score": 2.5, "count": 3, "nested": [1.25]}
        assert isinstance(fetched.data["count"], int)


class TestBatchWrites:
    """배치 쓰기 테스트."""

    async def test_replace_more_than_one_chunk(self, ddb_table: DynamoTable):
        """25개 초과 필드 교체 — 청크 분할."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Big"})
        await forms.replace_fields(form.id, [
            {"field_id": f"old{n}", "label": f"old {n}", "type": "text"} for n in range(10)
        ])
        fields = await forms.replace_fields(form.id, [
            {"field_id": f"f{n:02d}", "label": f"field {n}", "type": "number"} for n in range(40)
        ])
        assert len(fields) == 40

        listed = await forms.list_fields(form.id)
        assert [f.field_id for f in listed] == [f"f{n:02d}" for n in range(40)]
        assert [f.order for f in listed] == list(range(1, 41))
        assert (await forms.get(form.id)).version == 3

    async def test_replace_keeps_overlapping_ids(self, ddb_table: DynamoTable):
        """교체 집합에 기존 fieldId가 있으면 덮어쓰기."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Overlap"})
        await forms.create_field(form.id, {"field_id": "keep", "label": "Old", "type": "text"})
        await forms.replace_fields(form.id, [{"field_id": "keep", "label": "New", "type": "text"}])
        listed = await forms.list_fields(form.id)
        assert [(f.field_id, f.label) for f in listed] == [("keep", "New")]

    async def test_partial_failure_reports_counts(self, ddb_table: DynamoTable, monkeypatch):
        """두 번째 청크 실패 시 PartialBatchFailure, 버전 증가 없음."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Partial"})
        original = ddb_table.client.batch_write_item
        calls: list[int] = []

        def flaky(**kwargs):
            calls.append(1)
            if len(calls) > 1:
                raise _throttled("BatchWriteItem")
            return original(**kwargs)

        monkeypatch.setattr(ddb_table.client, "batch_write_item", flaky)
        with pytest.raises(PartialBatchFailure) as exc_info:
            await forms.replace_fields(form.id, [
                {"field_id": f"f{n}", "label": str(n), "type": "text"} for n in range(30)
            ])
        assert exc_info.value.form_id == form.id
        assert exc_info.value.written == 25
        assert exc_info.value.failed == 5
        assert (await forms.get(form.id)).version == 1

    async def test_failure_before_any_write_is_unavailable(
        self, ddb_table: DynamoTable, monkeypatch
    ):
        """첫 청크부터 실패하면 BackendUnavailable."""
        def down(**kwargs):
            raise _throttled("BatchWriteItem")

        monkeypatch.setattr(ddb_table.client, "batch_write_item", down)
        with pytest.raises(BackendUnavailable) as exc_info:
            await ddb_table.batch_write(puts=[{"PK": "FORM#x", "SK": "FIELD#a"}])
        assert exc_info.value.code == "ProvisionedThroughputExceededException"

    async def test_unprocessed_items_are_retried(self, ddb_table: DynamoTable, monkeypatch):
        """미처리 항목은 재시도 후 기록."""
        original = ddb_table.client.batch_write_item
        calls: list[int] = []

        def lagging(**kwargs):
            calls.append(1)
            if len(calls) == 1:
                return {"UnprocessedItems": kwargs["RequestItems"]}
            return original(**kwargs)

        monkeypatch.setattr(ddb_table.client, "batch_write_item", lagging)
        written = await ddb_table.batch_write(puts=[{"PK": "FORM#x", "SK": "FIELD#a"}])
        assert written == 1
        assert len(calls) == 2
        assert await ddb_table.get({"PK": "FORM#x", "SK": "FIELD#a"}) is not None

    async def test_unprocessed_after_retries_is_unavailable(
        self, ddb_table: DynamoTable, monkeypatch
    ):
        """재시도 후에도 미처리면 BackendUnavailable (기록 0건)."""
        def stuck(**kwargs):
            return {"UnprocessedItems": kwargs["RequestItems"]}

        monkeypatch.setattr(ddb_table.client, "batch_write_item", stuck)
        with pytest.raises(BackendUnavailable) as exc_info:
            await ddb_table.batch_write(puts=[{"PK": "FORM#x", "SK": "FIELD#a"}])
        assert exc_info.value.code == "UnprocessedItems"

    async def test_failed_retry_counts_applied_part_of_chunk(
        self, ddb_table: DynamoTable, monkeypatch
    ):
        """청크 일부 적용 후 재시도 실패 — 적용분을 written으로 보고."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Half applied"})
        await forms.replace_fields(form.id, [
            {"field_id": f"old{n}", "label": str(n), "type": "text"} for n in range(4)
        ])
        original = ddb_table.client.batch_write_item
        calls: list[int] = []

        def deletes_only(**kwargs):
            calls.append(1)
            if len(calls) > 1:
                raise _throttled("BatchWriteItem")
            (table_name, requests), = kwargs["RequestItems"].items()
            deletes = [r for r in requests if "DeleteRequest" in r]
            puts = [r for r in requests if "PutRequest" in r]
            original(RequestItems={table_name: deletes})
            return {"UnprocessedItems": {table_name: puts}}

        monkeypatch.setattr(ddb_table.client, "batch_write_item", deletes_only)
        with pytest.raises(PartialBatchFailure) as exc_info:
            await forms.replace_fields(form.id, [
                {"field_id": f"new{n}", "label": str(n), "type": "text"} for n in range(3)
            ])
        assert (exc_info.value.written, exc_info.value.failed) == (4, 3)
        monkeypatch.undo()
        assert (await forms.get(form.id)).version == 2
        assert await forms.list_fields(form.id) == []


class TestConditionalUpdate:
    """조건부 폼 수정 — 동시 수정 경합."""

    async def test_lost_race_raises_version_conflict(self, ddb_table: DynamoTable, monkeypatch):
        """읽은 뒤 다른 수정이 먼저 기록되면 VersionConflict, 버전은 한 번만 증가."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Race"})
        stale = await forms.get(form.id)
        fresh_get = forms.get
        reads: list[str] = []

        async def read_then_lose(form_id):
            reads.append(form_id)
            if len(reads) == 1:
                # 다른 작성자가 읽기 직후 먼저 기록
                await FormsDynamoRepository(ddb_table).update(form_id, {"title": "winner"})
                return stale
            return await fresh_get(form_id)

        monkeypatch.setattr(forms, "get", read_then_lose)
        with pytest.raises(VersionConflict) as exc_info:
            await forms.update(form.id, {"title": "loser"})
        assert (exc_info.value.expected, exc_info.value.actual) == (1, 2)

        stored = await fresh_get(form.id)
        assert (stored.version, stored.title) == (2, "winner")

    async def test_lost_race_to_delete_returns_none(self, ddb_table: DynamoTable, monkeypatch):
        """읽은 뒤 폼이 삭제되면 None."""
        forms = FormsDynamoRepository(ddb_table)
        form = await forms.create({"title": "Vanishing"})
        stale = await forms.get(form.id)
        fresh_get = forms.get
        reads: list[str] = []

        async def read_then_vanish(form_id):
            reads.append(form_id)
            if len(reads) == 1:
                await FormsDynamoRepository(ddb_table).remove(form_id)
                return stale
            return await fresh_get(form_id)

        monkeypatch.setattr(forms, "get", read_then_vanish)
        assert await forms.update(form.id, {"title": "late"}) is None
        assert await fresh_get(form.id) is None


class TestTableLifecycle:
    """테이블 수명주기 테스트."""

    async def test_connect_is_idempotent(self, ddb_table: DynamoTable):
        """이미 있는 테이블에 다시 연결."""
        await ddb_table.connect()
        description = ddb_table.client.describe_table(TableName=ddb_table.table_name)["Table"]
        names = {index["IndexName"] for index in description["GlobalSecondaryIndexes"]}
        assert names == {"GSI1", "GSI2"}

    async def test_missing_table_without_create(self, mocked_aws, ddb_settings):
        """자동 생성 꺼짐 + 테이블 없음 → BackendUnavailable."""
        config = ddb_settings.model_copy(update={"DDB_CREATE_TABLES": False})
        with pytest.raises(BackendUnavailable) as exc_info:
            await DynamoTable(config).connect()
        assert exc_info.value.code == "ResourceNotFoundException"

    async def test_wait_for_active_times_out(self, ddb_table: DynamoTable, monkeypatch):
        """ACTIVE가 되지 않으면 제한 시간 후 실패."""
        def creating(**kwargs):
            return {"Table": {"TableStatus": "CREATING", "GlobalSecondaryIndexes": []}}

        monkeypatch.setattr(ddb_table.client, "describe_table", creating)
        with pytest.raises(BackendUnavailable) as exc_info:
            await ddb_table.wait_for_active()
        assert exc_info.value.code == "TableNotActive"

    async def test_increment_missing_item(self, ddb_table: DynamoTable):
        """없는 아이템 증가 시 None, 아이템 생성 안 함."""
        assert await ddb_table.increment(form_key("ghost"), "version") is None
        assert await ddb_table.get(form_key("ghost")) is None

    async def test_field_change_on_missing_form(self, ddb_table: DynamoTable):
        """폼 없이 필드 생성 — 폼 아이템이 생기지 않음."""
        forms = FormsDynamoRepository(ddb_table)
        await forms.create_field("ghost", {"label": "X", "type": "text"})
        assert await forms.get("ghost") is None
        assert len(await forms.list_fields("ghost")) == 1


class TestAuditTrail:
    """감사 로그 테스트."""

    async def test_record_and_list_for_date(self, ddb_table: DynamoTable):
        """기록 후 날짜별 조회 — 시각순."""
        audit = AuditDynamoRepository(ddb_table)
        first = await audit.record("form.create", "u-clin", {"formId": "f1"})
        second = await audit.record("form.update", "u-clin", {"formId": "f1", "version": 2})

        records = await audit.list_for_date(first.date)
        assert [r.action for r in records] == ["form.create", "form.update"]
        assert records[1].details == {"formId": "f1", "version": 2}
        assert records[0].actor_id == "u-clin"
        assert second.timestamp > first.timestamp

    async def test_other_day_is_empty(self, ddb_table: DynamoTable):
        """다른 날짜는 비어 있음."""
        audit = AuditDynamoRepository(ddb_table)
        await audit.record("form.create", "u-clin")
        assert await audit.list_for_date("1999-01-01") == []
