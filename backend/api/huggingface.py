"""
Hugging Face relay endpoint.

Forwards ``{text, apiKey}`` to the Hugging Face Inference API with
multi-model fallback and returns the mapped sentiment.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from data.sentiment import AllProvidersFailedError, HuggingFaceInferenceClient
from data.sentiment.huggingface import ALL_MODELS_FAILED_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()

_inference_client: HuggingFaceInferenceClient | None = None


def get_inference_client() -> HuggingFaceInferenceClient:
    """Get or create the shared inference client."""
    global _inference_client
    if _inference_client is None:
        _inference_client = HuggingFaceInferenceClient()
    return _inference_client


def _error(message: str, code: int) -> JSONResponse:
    return JSONResponse(status_code=code, content={"error": message})


@router.post("/huggingface-sentiment")
async def huggingface_sentiment(
    client: Annotated[HuggingFaceInferenceClient, Depends(get_inference_client)],
    payload: Annotated[dict, Body()],
):
    """
    Classify text with the first Hugging Face model that answers.

    Returns ``{sentiment, model, success}`` or ``{error}`` with a non-2xx
    status.
    """
    api_key = payload.get("apiKey")
    text = payload.get("text")

    if not api_key:
        return _error("API key is required", status.HTTP_400_BAD_REQUEST)

    if not text:
        return _error("Text is required", status.HTTP_400_BAD_REQUEST)

    try:
        sentiment, model = await client.classify(str(text), str(api_key))
    except AllProvidersFailedError:
        return _error(ALL_MODELS_FAILED_MESSAGE, status.HTTP_503_SERVICE_UNAVAILABLE)
    except Exception as e:
        logger.error(f"Hugging Face relay error: {e}")
        return _error(
            "Internal server error while processing sentiment analysis",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return {"sentiment": sentiment.to_dict(), "model": model, "success": True}
