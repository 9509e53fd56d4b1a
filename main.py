import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware

from config import settings
from errors import InvalidRequestError, SummariserError
from schemas import SummaryRequest
from services import YouTubeSummariser, extraction_executor, get_summariser

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Swagger uniquement en développement
is_development = settings.environment.lower() == "development"


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield

    # Les extractions encore en file d'attente sont abandonnées
    logger.info("Arrêt du pool d'extraction des sous-titres...")
    extraction_executor.shutdown(wait=False, cancel_futures=True)


app = FastAPI(
    title="YouTube Summariser API",
    description="API permettant d'extraire les sous-titres d'une vidéo YouTube et d'en générer un résumé en 5 points dans la langue demandée.",
    version="1.0.0",
    docs_url="/docs" if is_development else None,
    redoc_url=None,
    openapi_url="/openapi.json" if is_development else None,
    lifespan=lifespan,
)

if settings.https_redirect:
    app.add_middleware(HTTPSRedirectMiddleware)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Un corps mal formé (JSON invalide, tableau, champ mal typé) sur /summarise
    est une erreur client comme un champ vide : 400 au lieu du 422 de FastAPI.
    """
    if request.url.path == "/summarise":
        logger.warning("Corps de requête invalide : %s", exc.errors())
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})
    return await request_validation_exception_handler(request, exc)

@app.get("/", include_in_schema=False)
async def root():
    if not is_development:
        raise HTTPException(status_code=404, detail="Not Found")
    return RedirectResponse(url="/docs")

@app.get("/health", response_class=PlainTextResponse, include_in_schema=False)
async def health():
    return "Healthy"

@app.get("/alive", response_class=PlainTextResponse, include_in_schema=False)
async def alive():
    return "Healthy"

@app.post("/summarise", response_model=str, name="GetSummary")
async def summarise_endpoint(
    request: Optional[SummaryRequest] = None,
    summariser: YouTubeSummariser = Depends(get_summariser),
):
    """
    Endpoint principal : résume en 5 points les sous-titres de la vidéo YouTube fournie.
    """
    if request is None:
        return JSONResponse(status_code=400, content="Request cannot be null")

    try:
        return await summariser.summarise(request)
    except InvalidRequestError as e:
        logger.warning("Requête invalide (%s): %s", e.field, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except SummariserError as e:
        # Erreurs de dépendances amont (sous-titres, LLM)
        logger.exception("Échec du résumé")
        raise HTTPException(status_code=e.status_code, detail=e.message)

# Point d'entrée pour le démarrage via uvicorn (utilisé principalement en dev, en prod on lance directement uvicorn main:app)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
