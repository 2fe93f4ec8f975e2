"""Unit tests for the FastAPI web interface."""

from contextlib import asynccontextmanager
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from laundry_rag.errors import (
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    RateLimitError,
    UpstreamError,
)
from laundry_rag.models import ChatReply, PartnerShop, ResponseMetadata, RiskLevel


@asynccontextmanager
async def _noop_lifespan(app):
    yield


@pytest.fixture(autouse=True)
def _mock_state():
    """Inject mock collections into app.state and disable the real lifespan."""
    import laundry_rag.web as web

    knowledge = MagicMock()
    knowledge.count.return_value = 12
    partners = MagicMock()
    partners.count.return_value = 3

    original_lifespan = web.app.router.lifespan_context
    web.app.router.lifespan_context = _noop_lifespan
    web.app.state.knowledge = knowledge
    web.app.state.partners = partners

    yield web, knowledge, partners

    web.app.router.lifespan_context = original_lifespan


@pytest.fixture
def client():
    import laundry_rag.web as web

    with TestClient(web.app, raise_server_exceptions=False) as c:
        yield c


# ---------- Health endpoint ----------


class TestHealth:
    def test_healthy(self, client):
        with patch("laundry_rag.web.llm_client.ping", return_value=True):
            resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        assert resp.json() == {
            "status": "healthy",
            "llm_connected": True,
            "knowledge_records": 12,
            "partner_shops": 3,
        }

    def test_degraded(self, client):
        with patch("laundry_rag.web.llm_client.ping", return_value=False):
            resp = client.get("/api/v1/health")

        assert resp.json()["status"] == "degraded"


# ---------- Chat endpoint ----------


class TestChat:
    @patch("laundry_rag.web.pipeline.process_chat")
    def test_returns_reply(self, mock_process, client, _mock_state):
        _, knowledge, partners = _mock_state
        mock_process.return_value = ChatReply(
            answer="전문점에 맡기세요.",
            metadata=ResponseMetadata(success_rate="30~40%", risk_level=RiskLevel.HIGH),
            recommended_shops=[
                PartnerShop(shop_name="A", zipcode="06236", specialty=("실크",), rating=4.5),
                PartnerShop(shop_name="B", zipcode="06236"),
            ],
        )

        resp = client.post("/api/v1/chat", json={"message": "실크 얼룩", "zipcode": "06236"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["answer"] == "전문점에 맡기세요."
        assert data["success_rate"] == "30~40%"
        assert data["risk_level"] == "high"
        assert data["recommended_shops"][0]["rating"] == 4.5
        assert "rating" not in data["recommended_shops"][1]
        assert data["disclaimer"]

        args, kwargs = mock_process.call_args
        assert args == ("실크 얼룩", "06236")
        assert kwargs["knowledge"] is knowledge
        assert kwargs["partners"] is partners

    @patch("laundry_rag.web.pipeline.process_chat")
    def test_unknown_fields_omitted(self, mock_process, client):
        mock_process.return_value = ChatReply(answer="답변")

        data = client.post("/api/v1/chat", json={"message": "질문"}).json()

        assert "success_rate" not in data
        assert "risk_level" not in data
        assert data["recommended_shops"] == []

    def test_rejects_empty_message(self, client):
        assert client.post("/api/v1/chat", json={"message": ""}).status_code == 422

    def test_rejects_missing_message(self, client):
        assert client.post("/api/v1/chat", json={"zipcode": "06236"}).status_code == 422

    def test_rejects_long_message(self, client):
        resp = client.post("/api/v1/chat", json={"message": "가" * 1001})
        assert resp.status_code == 422

    @patch("laundry_rag.web.pipeline.process_chat", return_value=ChatReply(answer="ok"))
    def test_accepts_max_length_message(self, mock_process, client):
        resp = client.post("/api/v1/chat", json={"message": "가" * 1000})
        assert resp.status_code == 200


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (ConfigurationError("LLM_API_KEY is not configured"), 400),
            (AuthenticationError("bad key", status_code=401, detail="invalid"), 400),
            (AuthenticationError("no credits", status_code=402, detail="balance"), 400),
            (RateLimitError("slow down", status_code=429), 503),
            (BadRequestError("bad model", status_code=400), 502),
            (UpstreamError("boom", status_code=500, detail="stack trace here"), 502),
        ],
    )
    def test_completion_errors(self, client, error, status):
        with patch("laundry_rag.web.pipeline.process_chat", side_effect=error):
            resp = client.post("/api/v1/chat", json={"message": "질문"})

        assert resp.status_code == status
        assert "error" in resp.json()

    def test_detail_not_leaked(self, client):
        error = UpstreamError("boom", status_code=500, detail="secret internal trace")
        with patch("laundry_rag.web.pipeline.process_chat", side_effect=error):
            resp = client.post("/api/v1/chat", json={"message": "질문"})

        assert "secret internal trace" not in resp.text

    def test_unexpected_error_is_generic_500(self, client):
        with patch(
            "laundry_rag.web.pipeline.process_chat",
            side_effect=RuntimeError("database password=hunter2"),
        ):
            resp = client.post("/api/v1/chat", json={"message": "질문"})

        assert resp.status_code == 500
        assert "hunter2" not in resp.text
        assert resp.json()["error"] == "죄송합니다. 잠시 후 다시 시도해주세요."


class TestResponseSchema:
    def test_enumerated_fields(self, client):
        schemas = client.get("/api/openapi.json").json()["components"]["schemas"]

        subscription = schemas["ShopResponse"]["properties"]["subscription"]
        assert subscription["enum"] == ["active", "inactive"]

        risk_level = schemas["ChatResponse"]["properties"]["risk_level"]
        enums = [s["enum"] for s in risk_level["anyOf"] if "enum" in s]
        assert enums == [["low", "medium", "high"]]
