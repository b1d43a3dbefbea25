import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.dependencies import get_group_store
from app.main import app

from tests.conftest import TEST_API_KEY, InMemoryGroupStore

AUTH = {"x-api-key": TEST_API_KEY}


@pytest.mark.asyncio
async def test_status_needs_no_key(api_client):
    resp = await api_client.get("/api/status")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "online"
    assert body["version"] == "1.0.0"
    assert body["activeConnections"] == 0
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_health(api_client):
    resp = await api_client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", [
    "/api/grupo/G1",
    "/api/buscar-grupo?nome=sul",
    "/api/membro/m1",
    "/api/ranking",
])
@pytest.mark.parametrize("headers", [{}, {"x-api-key": "wrong"}])
async def test_guarded_routes_reject_before_touching_store(api_client, store, path, headers):
    resp = await api_client.get(path, headers=headers)

    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"
    assert store.calls == []


@pytest.mark.asyncio
async def test_key_accepted_from_query_parameter(api_client):
    resp = await api_client.get(f"/api/ranking?apiKey={TEST_API_KEY}")

    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_group_view_wire_format(api_client):
    resp = await api_client.get("/api/grupo/G1", headers=AUTH)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["fallback"] is False
    assert body["grupo"]["id"] == "G1"
    assert body["grupo"]["nome"] == "Guerreiros do Sul"
    assert body["grupo"]["privacidade"] == "publico"
    assert body["estatisticas"] == {
        "totalMembros": 3, "membrosAtivos": 3, "totalContribuicao": 600, "mediaNivel": 20.0,
    }
    assert [c["nome"] for c in body["cargos"]] == ["Dono", "Veterano", "Membro"]
    assert {m["usuarioId"] for m in body["membros"]} == {"m1", "m2", "m3"}
    assert all(m["ativo"] for m in body["membros"])


@pytest.mark.asyncio
async def test_group_view_level_filter(api_client):
    resp = await api_client.get("/api/grupo/G1?nivelMaximo=15", headers=AUTH)

    body = resp.json()
    assert [m["nivel"] for m in body["membros"]] == [10]
    assert body["estatisticas"]["mediaNivel"] == 10.0


@pytest.mark.asyncio
async def test_unknown_group_is_404(api_client):
    resp = await api_client.get("/api/grupo/G404", headers=AUTH)

    assert resp.status_code == 404
    assert resp.json()["error"] == "Not Found"


@pytest.mark.asyncio
async def test_search_without_name_is_400(api_client):
    resp = await api_client.get("/api/buscar-grupo", headers=AUTH)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad Request"


@pytest.mark.asyncio
async def test_search_with_invalid_limit_is_400(api_client):
    resp = await api_client.get("/api/buscar-grupo?nome=sul&limite=abc", headers=AUTH)

    assert resp.status_code == 400
    assert "limite" in resp.json()["message"]


@pytest.mark.asyncio
async def test_search_results(api_client):
    resp = await api_client.get("/api/buscar-grupo?nome=SUL&limite=5", headers=AUTH)

    body = resp.json()
    assert body["query"] == "SUL"
    assert body["resultados"] == len(body["grupos"]) == 2
    assert all("sul" in g["nome"].lower() for g in body["grupos"])


@pytest.mark.asyncio
async def test_ranking_wire_format(api_client):
    resp = await api_client.get("/api/ranking?tipo=contribuicoes&limite=2", headers=AUTH)

    body = resp.json()
    assert body["tipo"] == "contribuicoes"
    assert body["limite"] == 2
    assert [(r["posicao"], r["id"]) for r in body["ranking"]] == [(1, "G3"), (2, "G1")]


@pytest.mark.asyncio
async def test_ranking_unknown_type_defaults_to_members(api_client):
    resp = await api_client.get("/api/ranking?tipo=whatever", headers=AUTH)

    assert resp.json()["tipo"] == "membros"


@pytest.mark.asyncio
async def test_member_in_group(api_client):
    resp = await api_client.get("/api/membro/m2?grupoId=G1", headers=AUTH)

    body = resp.json()
    assert body["usuarioId"] == "m2"
    assert body["totalGrupos"] == 1
    assert body["grupos"][0]["cargo"] == "Veterano"
    assert body["estatisticas"]["totalXP"] == 20


@pytest.mark.asyncio
async def test_member_missing_in_group_is_404(api_client):
    resp = await api_client.get("/api/membro/nobody?grupoId=G1", headers=AUTH)

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unknown_route_is_404_json(api_client):
    resp = await api_client.get("/api/nada", headers=AUTH)

    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found", "message": "Route /api/nada not found"}


@pytest.mark.asyncio
async def test_unexpected_failure_is_500():
    class BrokenStore(InMemoryGroupStore):
        async def fetch_group(self, group_id):
            raise RuntimeError("boom")

    app.dependency_overrides[get_group_store] = lambda: BrokenStore()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            resp = await client.get("/api/grupo/G1", headers=AUTH)
    finally:
        app.dependency_overrides.pop(get_group_store, None)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Internal Server Error"


@pytest.mark.asyncio
async def test_blank_level_bounds_skip_the_filter(api_client):
    resp = await api_client.get("/api/grupo/G1?nivelMinimo=&nivelMaximo=", headers=AUTH)

    assert resp.status_code == 200
    assert len(resp.json()["membros"]) == 3


@pytest.mark.asyncio
async def test_non_numeric_level_bound_is_400(api_client):
    resp = await api_client.get("/api/grupo/G1?nivelMinimo=alto", headers=AUTH)

    assert resp.status_code == 400
    assert "nivelMinimo" in resp.json()["message"]


@pytest.mark.asyncio
async def test_oversized_limit_is_capped(api_client, monkeypatch):
    monkeypatch.setattr(settings, "max_limit", 2)

    resp = await api_client.get("/api/ranking?limite=500", headers=AUTH)

    assert resp.status_code == 200
    body = resp.json()
    assert body["limite"] == 2
    assert len(body["ranking"]) == 2

    resp = await api_client.get("/api/buscar-grupo?nome=sul&limite=500", headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["resultados"] == 2
