import pytest

from config import TestConfig
from fakes import fake_openai_client
from index import create_app
from summary import SummaryService


@pytest.fixture
def openai_client():
    return fake_openai_client('{"summary": "Bob pays Alice 50.00.", "insights": ["Alice paid most"]}')


@pytest.fixture
def app(openai_client):
    service = SummaryService(openai_client, model="test-model")
    return create_app(TestConfig, summary_service=service)


@pytest.fixture
def client(app):
    return app.test_client()
