"""폼 API 테스트 — 폼/필드 CRUD, 버전, 역할 권한.

Forms API tests — form and field CRUD, versioning, and role checks.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

URL = "/api/forms"


async def _create_form(client: AsyncClient, token: str, **body) -> dict:
    res = await client.post(URL, json={"title": "Baseline", **body}, headers=auth_header(token))
    assert res.status_code == 201
    return res.json()


class TestFormCreate:
    """폼 생성 테스트."""

    async def test_create_form(self, client: AsyncClient, clin_token):
        """폼 생성 성공 — id 생성, version=1."""
        res = await client.post(
            URL, json={"title": "Baseline", "status": "active"}, headers=auth_header(clin_token)
        )
        assert res.status_code == 201
        data = res.json()
        assert data["id"]
        assert data["version"] == 1
        assert data["status"] == "active"
        assert data["createdBy"] == "clin@example.com"

    async def test_teacher_cannot_create(self, client: AsyncClient, teach_token):
        """교사는 폼 생성 불가 — 403."""
        res = await client.post(URL, json={"title": "Nope"}, headers=auth_header(teach_token))
        assert res.status_code == 403

    async def test_requires_auth(self, client: AsyncClient):
        """토큰 없이 401."""
        res = await client.post(URL, json={"title": "Nope"})
        assert res.status_code == 401

    async def test_empty_title_rejected(self, client: AsyncClient, clin_token):
        """빈 제목 — 422."""
        res = await client.post(URL, json={"title": ""}, headers=auth_header(clin_token))
        assert res.status_code == 422


class TestFormRead:
    """폼 조회 테스트."""

    async def test_list_forms_as_teacher(self, client: AsyncClient, teach_token):
        """교사도 폼 목록 조회 가능."""
        res = await client.get(URL, headers=auth_header(teach_token))
        assert res.status_code == 200
        assert "f-1" in [f["id"] for f in res.json()]

    async def test_get_missing_form(self, client: AsyncClient, teach_token):
        """없는 폼 — 404."""
        res = await client.get(f"{URL}/nope", headers=auth_header(teach_token))
        assert res.status_code == 404


class TestFormUpdate:
    """폼 수정 테스트."""

    async def test_archive_bumps_version(self, client: AsyncClient, clin_token):
        """상태 변경 시 version 정확히 1 증가."""
        form = await _create_form(client, clin_token)
        res = await client.put(
            f"{URL}/{form['id']}", json={"status": "archived"}, headers=auth_header(clin_token)
        )
        assert res.status_code == 200
        assert res.json()["version"] == form["version"] + 1

        fetched = await client.get(f"{URL}/{form['id']}", headers=auth_header(clin_token))
        assert fetched.json()["status"] == "archived"
        assert fetched.json()["title"] == "Baseline"

    async def test_stale_version_conflicts(self, client: AsyncClient, clin_token):
        """오래된 version 전송 시 409."""
        form = await _create_form(client, clin_token)
        first = await client.put(
            f"{URL}/{form['id']}", json={"title": "One", "version": 1},
            headers=auth_header(clin_token),
        )
        assert first.status_code == 200
        second = await client.put(
            f"{URL}/{form['id']}", json={"title": "Two", "version": 1},
            headers=auth_header(clin_token),
        )
        assert second.status_code == 409
        assert second.json()["actual"] == 2

    async def test_update_missing_form(self, client: AsyncClient, sys_token):
        """없는 폼 수정 — 404."""
        res = await client.put(f"{URL}/nope", json={"title": "x"}, headers=auth_header(sys_token))
        assert res.status_code == 404

    async def test_clear_description(self, client: AsyncClient, clin_token):
        """description은 null로 지울 수 있음."""
        form = await _create_form(client, clin_token, description="old")
        res = await client.put(
            f"{URL}/{form['id']}", json={"description": None}, headers=auth_header(clin_token)
        )
        assert res.status_code == 200
        assert res.json().get("description") is None


class TestFormDelete:
    """폼 삭제 테스트."""

    async def test_delete_twice(self, client: AsyncClient, clin_token):
        """첫 삭제는 폼 반환, 두 번째는 404."""
        form = await _create_form(client, clin_token)
        first = await client.delete(f"{URL}/{form['id']}", headers=auth_header(clin_token))
        assert first.status_code == 200
        assert first.json()["id"] == form["id"]
        second = await client.delete(f"{URL}/{form['id']}", headers=auth_header(clin_token))
        assert second.status_code == 404


class TestFormFields:
    """폼 필드 API 테스트."""

    async def test_create_and_list_field(self, client: AsyncClient, clin_token):
        """필드 생성 후 목록에 하나, order=1."""
        form = await _create_form(client, clin_token)
        res = await client.post(
            f"{URL}/{form['id']}/fields",
            json={
                "label": "Context",
                "type": "select",
                "required": True,
                "options": ["class", "recess"],
                "order": 1,
            },
            headers=auth_header(clin_token),
        )
        assert res.status_code == 201
        assert res.json()["fieldId"]

        listed = await client.get(f"{URL}/{form['id']}/fields", headers=auth_header(clin_token))
        assert listed.status_code == 200
        assert len(listed.json()) == 1
        assert listed.json()[0]["order"] == 1

        fetched = await client.get(f"{URL}/{form['id']}", headers=auth_header(clin_token))
        assert fetched.json()["version"] == 2

    async def test_select_without_options_rejected(self, client: AsyncClient, clin_token):
        """선택지 없는 select — 422."""
        res = await client.post(
            f"{URL}/f-1/fields", json={"label": "C", "type": "select"},
            headers=auth_header(clin_token),
        )
        assert res.status_code == 422

    async def test_field_on_missing_form(self, client: AsyncClient, clin_token):
        """없는 폼에 필드 추가 — 404."""
        res = await client.post(
            f"{URL}/nope/fields", json={"label": "C", "type": "text"},
            headers=auth_header(clin_token),
        )
        assert res.status_code == 404

    async def test_update_field(self, client: AsyncClient, clin_token):
        """필드 부분 수정."""
        res = await client.put(
            f"{URL}/f-1/fields/fld-notes", json={"required": True},
            headers=auth_header(clin_token),
        )
        assert res.status_code == 200
        assert res.json()["required"] is True
        assert res.json()["label"] == "Notes"

    async def test_update_field_to_invalid_state(self, client: AsyncClient, clin_token):
        """text → select 변경 시 선택지 없으면 400."""
        res = await client.put(
            f"{URL}/f-1/fields/fld-notes", json={"type": "select"},
            headers=auth_header(clin_token),
        )
        assert res.status_code == 400

    async def test_delete_field(self, client: AsyncClient, clin_token):
        """필드 삭제 후 조회 404."""
        res = await client.delete(f"{URL}/f-1/fields/fld-notes", headers=auth_header(clin_token))
        assert res.status_code == 200
        missing = await client.get(f"{URL}/f-1/fields/fld-notes", headers=auth_header(clin_token))
        assert missing.status_code == 404

    async def test_replace_fields(self, client: AsyncClient, sys_token):
        """필드 집합 교체."""
        res = await client.put(
            f"{URL}/f-1/fields",
            json={"fields": [
                {"fieldId": "mood", "label": "Mood", "type": "scale",
                 "validation": {"min": 1, "max": 5}},
                {"fieldId": "place", "label": "Place", "type": "radio", "options": ["in", "out"]},
            ]},
            headers=auth_header(sys_token),
        )
        assert res.status_code == 200
        assert [f["fieldId"] for f in res.json()] == ["mood", "place"]
        assert [f["order"] for f in res.json()] == [1, 2]

    async def test_replace_with_duplicate_ids(self, client: AsyncClient, sys_token):
        """중복 fieldId — 400."""
        res = await client.put(
            f"{URL}/f-1/fields",
            json={"fields": [
                {"fieldId": "a", "label": "A", "type": "text"},
                {"fieldId": "a", "label": "B", "type": "text"},
            ]},
            headers=auth_header(sys_token),
        )
        assert res.status_code == 400

    async def test_teacher_cannot_change_fields(self, client: AsyncClient, teach_token):
        """교사는 필드 변경 불가 — 403."""
        res = await client.delete(f"{URL}/f-1/fields/fld-notes", headers=auth_header(teach_token))
        assert res.status_code == 403
