"""Root conftest.py: loads .env before any tests run, shares engine fakes."""
import pytest
from dotenv import load_dotenv

load_dotenv()


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the lru_cache on get_settings so monkeypatch.setenv takes effect."""
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class StubExtractor:
    """Stands in for ParameterExtractionAgent: returns canned (value, confidence) pairs."""

    def __init__(self, values=None, error=None):
        self.values = values or {}
        self.error = error
        self.calls = []

    def extract_all(self, utterance, session_id=None):
        from schemas.fields import ExtractedValue

        self.calls.append(utterance)
        if self.error is not None:
            raise self.error
        return {
            field: ExtractedValue(value=value, confidence=confidence)
            for field, (value, confidence) in self.values.items()
        }


@pytest.fixture
def stub_extractor():
    """Factory: stub_extractor({IssueField.TYPE: ("Bug", 0.9)}) or stub_extractor(error=...)."""
    return StubExtractor
