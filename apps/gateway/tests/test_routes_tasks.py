"""任务路由测试 -- camelCase 载荷 + 错误信封"""

from httpx import AsyncClient
from nexus.provider import ModelUnavailable


async def _create(client: AsyncClient, **fields) -> dict:
    body = {"title": "고객 인터뷰 정리", "priority": "HIGH", **fields}
    resp = await client.post("/api/tasks", json=body)
    assert resp.status_code == 201
    return resp.json()


class TestTaskCrud:
    async def test_create_and_get(self, client: AsyncClient):
        created = await _create(client, assigneeId="u-7", dueDate="2026-11-01")

        assert created["id"]
        assert created["assigneeId"] == "u-7"
        assert created["status"] == "REQUESTED"
        assert created["createdAt"] == created["updatedAt"]

        resp = await client.get(f"/api/tasks/{created['id']}")
        assert resp.status_code == 200
        assert resp.json() == created

    async def test_list(self, client: AsyncClient):
        await _create(client, title="A")
        await _create(client, title="B")

        resp = await client.get("/api/tasks")

        assert [t["title"] for t in resp.json()["tasks"]] == ["A", "B"]

    async def test_put_replaces_fields(self, client: AsyncClient):
        created = await _create(client)
        body = {**created, "title": "인터뷰 결과 보고", "priority": "LOW"}

        resp = await client.put(f"/api/tasks/{created['id']}", json=body)

        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "인터뷰 결과 보고"
        assert data["priority"] == "LOW"
        assert data["createdAt"] == created["createdAt"]

    async def test_patch_status(self, client: AsyncClient):
        created = await _create(client)

        resp = await client.patch(
            f"/api/tasks/{created['id']}/status", json={"status": "FEEDBACK"}
        )

        assert resp.json()["status"] == "FEEDBACK"

    async def test_patch_invalid_status_is_422(self, client: AsyncClient):
        created = await _create(client)
        resp = await client.patch(f"/api/tasks/{created['id']}/status", json={"status": "PAUSED"})
        assert resp.status_code == 422

    async def test_delete(self, client: AsyncClient):
        created = await _create(client)

        resp = await client.delete(f"/api/tasks/{created['id']}")
        assert resp.status_code == 204

        resp = await client.get(f"/api/tasks/{created['id']}")
        assert resp.status_code == 404

    async def test_not_found_envelope(self, client: AsyncClient):
        resp = await client.get("/api/tasks/01JNONEXISTENT0000000000")

        assert resp.status_code == 404
        error = resp.json()["error"]
        assert error["code"] == "ENTITY_NOT_FOUND"
        assert "01JNONEXISTENT0000000000" in error["message"]

    async def test_duplicate_id_is_409(self, client: AsyncClient):
        await _create(client, id="fixed-id")
        resp = await client.post("/api/tasks", json={"id": "fixed-id", "title": "중복"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "DUPLICATE_ENTITY"


class TestTaskAi:
    async def test_drafts_and_apply(self, client: AsyncClient, fake_client, draft_reply):
        fake_client.queue_reply(draft_reply)

        resp = await client.post("/api/tasks/drafts", json={"rawInput": "예산 검토"})

        assert resp.status_code == 200
        drafts = resp.json()["drafts"]
        assert len(drafts) == 3
        assert drafts[1]["styleTag"] == "상세"
        assert drafts[2]["priority"] == "MEDIUM"

        resp = await client.post(
            "/api/tasks/drafts/apply",
            json={"draft": drafts[0], "assigneeId": "u-1"},
        )
        assert resp.status_code == 201
        task = resp.json()
        assert task["title"] == drafts[0]["title"]
        assert task["assigneeId"] == "u-1"

    async def test_draft_malformed_is_502(self, client: AsyncClient, fake_client):
        fake_client.queue_reply("초안을 만들 수 없습니다")

        resp = await client.post("/api/tasks/drafts", json={"rawInput": "예산 검토"})

        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == "MALFORMED_RESPONSE"

    async def test_model_unavailable_is_502(self, client: AsyncClient, fake_client):
        fake_client.queue_reply(ModelUnavailable("gemini/test-flash", ConnectionError("refused"), True))

        resp = await client.post("/api/tasks/drafts", json={"rawInput": "예산 검토"})

        assert resp.status_code == 502
        error = resp.json()["error"]
        assert error["code"] == "MODEL_UNAVAILABLE"
        # 原始错误细节不暴露给前端
        assert "refused" not in error["message"]

    async def test_empty_raw_input_is_422(self, client: AsyncClient):
        resp = await client.post("/api/tasks/drafts", json={"rawInput": ""})
        assert resp.status_code == 422

    async def test_analysis(self, client: AsyncClient, fake_client, analysis_reply):
        created = await _create(client)
        fake_client.queue_reply(analysis_reply)

        resp = await client.post(f"/api/tasks/{created['id']}/analysis")

        assert resp.status_code == 200
        analysis = resp.json()["aiAnalysis"]
        assert analysis["strategy"].startswith("### 핵심 목표")
        assert analysis["suggestedResources"][0]["title"] == "예산 관리 가이드"
        assert analysis["lastUpdated"]

    async def test_subtasks_flow(self, client: AsyncClient, fake_client, subtask_reply):
        created = await _create(client)
        fake_client.queue_reply(subtask_reply)

        resp = await client.post(f"/api/tasks/{created['id']}/subtasks/generate")
        proposals = resp.json()["subtasks"]
        assert [s["title"] for s in proposals] == ["자료 수집", "초안 작성", "검토 요청"]

        resp = await client.post(
            f"/api/tasks/{created['id']}/subtasks", json={"subtasks": proposals[:2]}
        )
        task = resp.json()
        assert [s["title"] for s in task["subtasks"]] == ["자료 수집", "초안 작성"]

        sub_id = task["subtasks"][0]["id"]
        resp = await client.post(f"/api/tasks/{created['id']}/subtasks/{sub_id}/toggle")
        assert resp.json()["subtasks"][0]["completed"] is True

    async def test_toggle_unknown_subtask_is_404(self, client: AsyncClient):
        created = await _create(client)
        resp = await client.post(f"/api/tasks/{created['id']}/subtasks/nope/toggle")
        assert resp.status_code == 404

    async def test_chat(self, client: AsyncClient, fake_client):
        created = await _create(client)
        fake_client.queue_reply("인터뷰 질문지를 먼저 정리하세요.")

        resp = await client.post(
            f"/api/tasks/{created['id']}/chat",
            json={
                "history": [{"role": "user", "content": "안녕하세요"}, {"role": "model", "content": "네"}],
                "message": "무엇부터 할까요?",
            },
        )

        assert resp.status_code == 200
        assert resp.json() == {"reply": "인터뷰 질문지를 먼저 정리하세요."}
        assert len(fake_client.calls[0]["history"]) == 2

    async def test_chat_rejects_unknown_role(self, client: AsyncClient):
        created = await _create(client)
        resp = await client.post(
            f"/api/tasks/{created['id']}/chat",
            json={"history": [{"role": "system", "content": "x"}], "message": "hi"},
        )
        assert resp.status_code == 422


class TestModels:
    async def test_list_models(self, client: AsyncClient):
        resp = await client.get("/api/models")

        models = resp.json()["models"]
        assert {m["id"] for m in models} == {"smart", "fast"}
        assert any(m["isPro"] for m in models)
