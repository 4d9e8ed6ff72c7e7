"""Shared fixtures: sample talent/request data and small model builders."""

import json
from pathlib import Path

import pytest

from cvengine.config import LayoutConfig
from cvengine.model import build_document_model

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def _load_json(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def config():
    return LayoutConfig()


@pytest.fixture
def talent():
    return _load_json(DATA_DIR / "talents.json")["talents"][0]


@pytest.fixture
def sample_request():
    return _load_json(DATA_DIR / "sample_request.json")


@pytest.fixture
def full_model(talent, sample_request):
    return build_document_model(
        talent, sample_request,
        summary="Data engineer with five years of pipeline work across batch and streaming systems.",
        career_path_title="Data Engineering",
    )


@pytest.fixture
def minimal_talent():
    return {"talentId": "t-min", "fullname": "Lee Min", "email": "lee@example.com"}

