from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

class SummaryRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    youtube_link_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("youTubeLinkUrl", "youtubeLinkUrl", "youtube_link_url"),
        serialization_alias="youTubeLinkUrl",
        description="L'URL de la vidéo YouTube, ex: https://www.youtube.com/watch?v=... ou https://youtu.be/...",
    )
    video_language_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("videoLanguageCode", "video_language_code"),
        serialization_alias="videoLanguageCode",
        description="Le code langue des sous-titres à extraire, ex: 'en'.",
    )
    summary_language_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("summaryLanguageCode", "summary_language_code"),
        serialization_alias="summaryLanguageCode",
        description="Le code langue dans lequel rédiger le résumé, ex: 'ko'.",
    )

class SubtitleItem(BaseModel):
    text: str
    start: float = 0.0
    duration: float = 0.0

class Subtitle(BaseModel):
    video_id: str
    language_code: str
    content: List[SubtitleItem] = Field(default_factory=list)

class ChatMessage(BaseModel):
    role: Literal["system", "user"]
    content: str

class ChatCompletionOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_tokens: int = 3000
    temperature: float = 0.7

class ChatCompletion(BaseModel):
    candidates: List[str] = Field(default_factory=list, description="Les textes candidats, dans l'ordre renvoyé par le modèle.")
