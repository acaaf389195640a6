from fastapi import APIRouter, Depends, Request

from app.core.errors import MethodNotAllowedAppError
from app.core.rate_limit import get_client_id
from app.schemas.simplify import SimplifyRequest, SimplifyResponse
from app.services.simplify_service import SimplifyService

router = APIRouter(tags=["Simplify"])


def get_simplify_service(request: Request) -> SimplifyService:
    """Return the service instance owned by the running application."""
    return request.app.state.simplify_service


@router.post(
    "/simplify",
    response_model=SimplifyResponse,
    responses={
        400: {"description": "Missing or invalid fields"},
        429: {"description": "Premium model usage limit reached for this hour"},
        500: {"description": "Missing upstream credential or upstream failure"},
    },
)
async def simplify(
    payload: SimplifyRequest,
    client_id: str = Depends(get_client_id),
    service: SimplifyService = Depends(get_simplify_service),
) -> SimplifyResponse:
    """Simplify and translate text.

    Sends the input to the language model with an instruction built from the
    requested level and target language. Premium model calls are limited per
    client per hour; unknown model ids are served by the standard model.

    Args:
        payload: `{input, level, targetLanguage, model}`.

    Returns:
        SimplifyResponse: `{output, model}`.
    """
    return await service.simplify(payload, client_id)


@router.api_route(
    "/simplify",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def simplify_wrong_method(request: Request) -> None:
    raise MethodNotAllowedAppError(
        code="method_not_allowed",
        message="Method not allowed",
        details={"allowed_methods": ["POST"]},
    )
