"""
kn_interpreter/api/app.py
==========================
HTTP / WebSocket surface — Kannada Interpreter

Endpoints:
    GET  /api/v1/health     liveness + configured languages
    POST /api/v1/translate  run the translation cascade on one string
    WS   /ws                one capture-and-respond session per connection
"""

import logging

from fastapi import Depends, FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from kn_interpreter import __version__
from kn_interpreter.api.connection import InterpreterConnection
from kn_interpreter.config import MAX_SENTENCES, REPLY_LANGUAGE, SOURCE_LANGUAGE
from kn_interpreter.errors import TranslationUnavailable
from kn_interpreter.session.controller import ERR_TRANSLATION
from kn_interpreter.translation.cascade import TranslationCascade, build_default_cascade

logger = logging.getLogger("kn_interpreter.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Kannada Interpreter",
    description="Speak Kannada, read English, reply in English, hear Kannada.",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class TranslateBody(BaseModel):
    text: str
    source: str = SOURCE_LANGUAGE
    target: str = REPLY_LANGUAGE


def get_cascade() -> TranslationCascade:
    return build_default_cascade()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/api/v1/health")
async def health():
    return {
        "status": "ok",
        "version": __version__,
        "source_language": SOURCE_LANGUAGE,
        "reply_language": REPLY_LANGUAGE,
        "max_sentences": MAX_SENTENCES,
    }


@app.post("/api/v1/translate")
async def translate(
    body: TranslateBody,
    cascade: TranslationCascade = Depends(get_cascade),
):
    """
    Translate one string through the provider cascade.

    Returns:
        {"translatedText": str}

    Raises:
        422 if the text is empty, 502 if every provider failed.
    """
    if not body.text.strip():
        raise HTTPException(status_code=422, detail="Text to translate is required.")

    try:
        translated = await cascade.translate(body.text, body.source, body.target)
    except TranslationUnavailable as exc:
        logger.error("Translate endpoint failed: %s", exc)
        raise HTTPException(status_code=502, detail=ERR_TRANSLATION)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return {"translatedText": translated}


@app.websocket("/ws")
async def interpreter_socket(websocket: WebSocket):
    await websocket.accept()
    logger.info("Browser connected.")
    connection = InterpreterConnection(websocket, cascade=build_default_cascade())
    await connection.run()
