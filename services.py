import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol, Union

from openai import AsyncAzureOpenAI, AsyncOpenAI
from youtube_transcript_api import YouTubeTranscriptApi

from config import OpenAISettings, Settings, settings
from errors import (
    CompletionFailedError,
    CompletionUnavailableError,
    EmptyCompletionError,
    EmptySubtitlesError,
    InvalidRequestError,
    SubtitleExtractionError,
)
from schemas import (
    ChatCompletion,
    ChatCompletionOptions,
    ChatMessage,
    Subtitle,
    SubtitleItem,
    SummaryRequest,
)

logger = logging.getLogger(__name__)

SUMMARY_INSTRUCTION = (
    "Here's the transcript. Summarise it in 5 bullet point items "
    "in the given language code of \"{summary_language_code}\"."
)

# youtube-transcript-api est synchrone (requests) : ce pool évite de bloquer l'Event Loop.
# Il est partagé entre les requêtes et fermé par le lifespan de l'application.
extraction_executor = ThreadPoolExecutor(max_workers=settings.extraction_workers, thread_name_prefix="subtitles")


class SubtitleExtractor(Protocol):
    async def extract_subtitle(self, url: str, language_code: str) -> Optional[Subtitle]: ...


class ChatClient(Protocol):
    async def complete_chat(
        self, messages: List[ChatMessage], options: ChatCompletionOptions
    ) -> Optional[ChatCompletion]: ...


class ChatClientProvider(Protocol):
    def get_chat_client(self, deployment_name: Optional[str]) -> Optional[ChatClient]: ...


def extract_video_id(url: str) -> str:
    """Extraire l'ID de la vidéo depuis l'URL YouTube (ou accepter un ID brut)."""
    url = url.strip()
    if re.fullmatch(r'[0-9A-Za-z_-]{11}', url):
        return url
    match = re.search(r'(?:v=|youtu\.be/|embed/|shorts/|/v/)([0-9A-Za-z_-]{11})', url)
    if not match:
        raise ValueError("URL YouTube invalide ou ID de vidéo introuvable.")
    return match.group(1)


class YouTubeVideo:
    """
    Extracteur de sous-titres basé sur youtube-transcript-api,
    avec prise en charge optionnelle d'un proxy pour éviter les bans IP des Datacenters.
    """

    def __init__(self, proxy_url: str = "", executor: Optional[ThreadPoolExecutor] = None):
        self.proxy_url = proxy_url
        self.executor = executor or extraction_executor

    def _build_api(self) -> YouTubeTranscriptApi:
        if not self.proxy_url:
            return YouTubeTranscriptApi()

        from youtube_transcript_api.proxies import GenericProxyConfig
        # On formate l'URL "http://" si seuls les identifiants bruts ont été fournis
        formatted_proxy = self.proxy_url if self.proxy_url.startswith("http") else f"http://{self.proxy_url}"
        proxy = GenericProxyConfig(http_url=formatted_proxy, https_url=formatted_proxy)
        return YouTubeTranscriptApi(proxy_config=proxy)

    def extract_subtitle_sync(self, url: str, language_code: str) -> Subtitle:
        video_id = extract_video_id(url)
        transcript = self._build_api().list(video_id).find_transcript([language_code])
        fetched = transcript.fetch()

        content = [
            SubtitleItem(text=snippet.text, start=snippet.start, duration=snippet.duration)
            for snippet in fetched
        ]
        return Subtitle(video_id=video_id, language_code=transcript.language_code, content=content)

    async def extract_subtitle(self, url: str, language_code: str) -> Subtitle:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.extract_subtitle_sync, url, language_code)


class OpenAIChatClient:
    def __init__(self, client: Union[AsyncAzureOpenAI, AsyncOpenAI], deployment_name: str):
        self.client = client
        self.deployment_name = deployment_name

    async def complete_chat(self, messages: List[ChatMessage], options: ChatCompletionOptions) -> Optional[ChatCompletion]:
        completion = await self.client.chat.completions.create(
            model=self.deployment_name,
            messages=[message.model_dump() for message in messages],
            max_tokens=options.max_tokens,
            temperature=options.temperature,
        )
        if completion is None:
            return None

        # Liste positionnelle : un choix sans texte (refus, appel d'outil) devient ""
        candidates = [
            (choice.message.content if choice.message is not None else None) or ""
            for choice in completion.choices or []
        ]
        return ChatCompletion(candidates=candidates)


class OpenAIChatProvider:
    """
    Fournit des clients de chat liés à un déploiement. Le client SDK est créé
    une seule fois, à la première demande, puis partagé par toutes les requêtes.
    """

    def __init__(self, openai_settings: OpenAISettings):
        self.settings = openai_settings
        self._client: Optional[Union[AsyncAzureOpenAI, AsyncOpenAI]] = None

    def _get_client(self) -> Union[AsyncAzureOpenAI, AsyncOpenAI]:
        if self._client is not None:
            return self._client

        if not self.settings.endpoint:
            raise CompletionUnavailableError("OPENAI__ENDPOINT n'est pas configuré.")
        if not self.settings.api_key:
            raise CompletionUnavailableError("OPENAI__API_KEY n'est pas configurée.")

        if self.settings.api_version:
            self._client = AsyncAzureOpenAI(
                azure_endpoint=self.settings.endpoint,
                api_key=self.settings.api_key,
                api_version=self.settings.api_version,
                timeout=self.settings.timeout,
            )
        else:
            self._client = AsyncOpenAI(
                base_url=self.settings.endpoint,
                api_key=self.settings.api_key,
                timeout=self.settings.timeout,
            )
        return self._client

    def get_chat_client(self, deployment_name: Optional[str]) -> OpenAIChatClient:
        if not deployment_name:
            raise CompletionUnavailableError("OPENAI__DEPLOYMENT_NAME n'est pas configuré.")
        return OpenAIChatClient(self._get_client(), deployment_name)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class YouTubeSummariser:
    def __init__(self, youtube: SubtitleExtractor, openai: ChatClientProvider, settings: Settings):
        self.youtube = youtube
        self.openai = openai
        self.settings = settings

    @staticmethod
    def validate(request: Optional[SummaryRequest]) -> SummaryRequest:
        """Première violation gagnante : aucun appel externe n'est fait pour une requête invalide."""
        if request is None:
            raise InvalidRequestError("request", "Request cannot be null")
        if _is_blank(request.youtube_link_url):
            raise InvalidRequestError("youtubeLinkUrl")
        if _is_blank(request.video_language_code):
            raise InvalidRequestError("videoLanguageCode")
        if _is_blank(request.summary_language_code):
            raise InvalidRequestError("summaryLanguageCode")
        return request

    @staticmethod
    def build_transcript(subtitle: Subtitle) -> str:
        return "\n".join(item.text for item in subtitle.content)

    def build_messages(self, transcript: str, summary_language_code: str) -> List[ChatMessage]:
        return [
            ChatMessage(role="system", content=self.settings.prompt.system),
            ChatMessage(
                role="system",
                content=SUMMARY_INSTRUCTION.format(summary_language_code=summary_language_code),
            ),
            ChatMessage(role="user", content=transcript),
        ]

    def build_options(self) -> ChatCompletionOptions:
        return ChatCompletionOptions(
            max_tokens=self.settings.prompt.max_tokens,
            temperature=self.settings.prompt.temperature,
        )

    async def summarise(self, request: Optional[SummaryRequest]) -> str:
        """
        Orchestre l'extraction des sous-titres et l'appel au LLM pour obtenir
        un résumé en 5 points. Tout ou rien : aucune relance, aucun résultat partiel.
        """
        request = self.validate(request)
        logger.info(
            "Résumé demandé pour %s (sous-titres: %s, résumé: %s)",
            request.youtube_link_url, request.video_language_code, request.summary_language_code,
        )

        # 1. Extraire les sous-titres
        try:
            subtitle = await self.youtube.extract_subtitle(request.youtube_link_url, request.video_language_code)
        except Exception as e:
            raise SubtitleExtractionError(f"Impossible d'extraire les sous-titres : {e}") from e

        if subtitle is None or not subtitle.content:
            raise EmptySubtitlesError("Les sous-titres extraits sont vides.")

        transcript = self.build_transcript(subtitle)
        logger.info("%d segments de sous-titres, %d caractères", len(subtitle.content), len(transcript))

        # 2. Obtenir le client de chat avant tout appel
        try:
            chat = self.openai.get_chat_client(self.settings.openai.deployment_name)
        except CompletionUnavailableError:
            raise
        except Exception as e:
            raise CompletionUnavailableError(f"Impossible de créer le client de chat : {e}") from e

        if chat is None:
            raise CompletionUnavailableError("Impossible de créer le client de chat.")

        # 3. Appel LLM
        messages = self.build_messages(transcript, request.summary_language_code)
        try:
            completion = await chat.complete_chat(messages, self.build_options())
        except Exception as e:
            raise CompletionFailedError(f"Erreur lors de l'appel LLM : {e}") from e

        if completion is None or not completion.candidates or not completion.candidates[0]:
            raise EmptyCompletionError("La réponse du LLM est vide.")

        logger.info("Résumé généré (%d candidats reçus)", len(completion.candidates))
        # Contrat à résumé unique : les candidats suivants sont ignorés
        return completion.candidates[0]


summariser = YouTubeSummariser(
    youtube=YouTubeVideo(proxy_url=settings.proxy_url),
    openai=OpenAIChatProvider(settings.openai),
    settings=settings,
)


def get_summariser() -> YouTubeSummariser:
    return summariser
