from fastapi import APIRouter, Depends, HTTPException, Request
from app.config import settings
from app.core.rate_limit import limiter, generate_limit
from app.modules.generation.client import ChatCompletionClient, ChatCompletionError, ChatCompletionNotConfigured
from app.modules.generation.schemas import GenerateRequest, GenerateResponse
from app.core.dependencies import get_current_user
from typing import Dict

router = APIRouter(prefix="/generate", tags=["generation"])


def get_chat_client() -> ChatCompletionClient:
    return ChatCompletionClient()


@router.post("", response_model=GenerateResponse)
@limiter.limit(generate_limit)
async def generate(
    request: Request,
    generate_request: GenerateRequest,
    user_data: Dict = Depends(get_current_user),
    client: ChatCompletionClient = Depends(get_chat_client)
):
    """Generate a sample response for prompt content. Limited per caller by GENERATE_RATE_LIMIT."""
    if not generate_request.prompt.strip():
        raise HTTPException(status_code=400, detail="Please provide prompt content before generating a response.")
    try:
        content = await client.generate_response(
            generate_request.prompt,
            model=generate_request.model,
            temperature=generate_request.temperature,
            max_tokens=generate_request.max_tokens,
        )
    except ChatCompletionNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ChatCompletionError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return GenerateResponse(content=content, model=generate_request.model or settings.openrouter_default_model)
