"""
Hiérarchie d'erreurs du résumeur. Chaque erreur porte le code HTTP
sous lequel l'endpoint la renvoie.
"""
from typing import Optional

class SummariserError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class InvalidRequestError(SummariserError):
    """Entrée client invalide : le champ fautif est conservé dans `field`."""
    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} ne peut pas être vide.")
        self.field = field

class SubtitleExtractionError(SummariserError):
    status_code = 502

class EmptySubtitlesError(SummariserError):
    status_code = 502

class CompletionUnavailableError(SummariserError):
    status_code = 503

class CompletionFailedError(SummariserError):
    status_code = 502

class EmptyCompletionError(SummariserError):
    status_code = 502
