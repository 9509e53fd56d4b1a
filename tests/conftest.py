import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Environnement de test, défini avant l'import de l'application
os.environ["ENVIRONMENT"] = "development"
os.environ["HTTPS_REDIRECT"] = "false"
os.environ["OPENAI__DEPLOYMENT_NAME"] = "test-deployment"

from config import OpenAISettings, PromptSettings, Settings
from schemas import ChatCompletion, Subtitle, SubtitleItem, SummaryRequest
from services import YouTubeSummariser


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        openai=OpenAISettings(
            endpoint="https://example.openai.azure.com/",
            api_key="test-key",
            deployment_name="test-deployment",
        ),
        prompt=PromptSettings(system="You are a helpful summarisation assistant"),
    )


@pytest.fixture
def subtitle() -> Subtitle:
    return Subtitle(
        video_id="dQw4w9WgXcQ",
        language_code="en",
        content=[
            SubtitleItem(text="Hello", start=0.0, duration=1.5),
            SubtitleItem(text="world", start=1.5, duration=1.0),
        ],
    )


@pytest.fixture
def mock_youtube(subtitle):
    """Mocks the subtitle extractor."""
    youtube = MagicMock()
    youtube.extract_subtitle = AsyncMock(return_value=subtitle)
    return youtube


@pytest.fixture
def mock_chat_client():
    """Mocks a chat client bound to a deployment."""
    chat = MagicMock()
    chat.complete_chat = AsyncMock(return_value=ChatCompletion(candidates=["- point 1\n- point 2"]))
    return chat


@pytest.fixture
def mock_openai(mock_chat_client):
    """Mocks the chat client provider."""
    provider = MagicMock()
    provider.get_chat_client.return_value = mock_chat_client
    return provider


@pytest.fixture
def summariser(mock_youtube, mock_openai, test_settings) -> YouTubeSummariser:
    return YouTubeSummariser(youtube=mock_youtube, openai=mock_openai, settings=test_settings)


@pytest.fixture
def summary_request() -> SummaryRequest:
    return SummaryRequest.model_validate(
        {
            "youTubeLinkUrl": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "videoLanguageCode": "en",
            "summaryLanguageCode": "ko",
        }
    )
