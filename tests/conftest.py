"""Shared fixtures for the test suite."""

import json
from pathlib import Path

import pytest

from laundry_rag.config import AppConfig, LLMConfig
from laundry_rag.models import KnowledgeRecord


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_key="test-key", model="test-model")


@pytest.fixture
def app_config(llm_config: LLMConfig) -> AppConfig:
    return AppConfig(llm=llm_config)


@pytest.fixture
def knowledge_records() -> list[KnowledgeRecord]:
    return [
        KnowledgeRecord(
            id="k1",
            score=0.91,
            metadata={
                "title": "실크 커피 얼룩",
                "success_rate": 40,
                "content": "실크는 문지르면 광택이 죽습니다.",
            },
        ),
        KnowledgeRecord(
            id="k2",
            score=0.77,
            metadata={"stain_type": "혈흔", "content": "찬물로만 처리하세요."},
        ),
    ]


@pytest.fixture
def knowledge_results() -> dict:
    """Raw ChromaDB query result for the knowledge collection."""
    return {
        "ids": [["k1", "k2"]],
        "documents": [["실크는 문지르면 광택이 죽습니다.", "찬물로만 처리하세요."]],
        "metadatas": [
            [
                {"title": "실크 커피 얼룩", "success_rate": 40.0},
                {"stain_type": "혈흔", "content": "찬물로만 처리하세요."},
            ]
        ],
        "distances": [[0.1, 0.3]],
    }


@pytest.fixture
def partner_results() -> dict:
    """Raw ChromaDB query result for the partner collection."""
    return {
        "ids": [["p1", "p2"]],
        "documents": [["크린토피아 강남점", "명품세탁 역삼"]],
        "metadatas": [
            [
                {
                    "shop_name": "크린토피아 강남점",
                    "zipcode": "06236",
                    "subscription": "active",
                    "specialty": "실크,캐시미어",
                    "rating": 4.7,
                },
                {
                    "shop_name": "명품세탁 역삼",
                    "zipcode": "06236",
                    "subscription": "active",
                    "specialty": "가죽",
                },
            ]
        ],
        "distances": [[0.2, 0.4]],
    }


@pytest.fixture
def answer_with_metadata() -> str:
    return (
        "실크에 묻은 커피 얼룩은 집에서 건드리면 거의 망가집니다.\n"
        "성공률은 30~40% 정도입니다.\n\n"
        "```json\n"
        '{"success_rate": "30~40%", "risk_level": "high", "recommend_shop": true}\n'
        "```"
    )


@pytest.fixture
def seed_dir(tmp_path: Path) -> Path:
    """Write small knowledge and partner seed files."""
    (tmp_path / "knowledge.json").write_text(
        json.dumps(
            [
                {
                    "id": "silk-coffee",
                    "stain_type": "커피",
                    "fabric": "실크",
                    "success_rate": 40,
                    "risk": "high",
                    "content": "실크는 문지르지 말고 전문점에 맡기세요.",
                },
                {
                    "stain_type": "땀",
                    "fabric": "면",
                    "success_rate": 85,
                    "risk": "low",
                    "content": "과탄산소다로 불림 세탁하세요.",
                },
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    (tmp_path / "partners.json").write_text(
        json.dumps(
            [
                {
                    "id": "shop-1",
                    "shop_name": "크린토피아 강남점",
                    "zipcode": "06236",
                    "subscription": "active",
                    "specialty": ["실크", "캐시미어"],
                    "rating": 4.7,
                },
                {
                    "shop_name": "동네세탁",
                    "zipcode": "04524",
                    "subscription": "inactive",
                },
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return tmp_path
