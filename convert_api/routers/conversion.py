"""API route for currency conversion."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from convert_api.models.conversion import ConversionResponse, ErrorResponse
from convert_api.services.currency_service import ConversionError, CurrencyService

router = APIRouter(tags=["conversion"])


def get_currency_service(request: Request) -> CurrencyService:
    """Get the process-wide currency service built during startup."""
    return request.app.state.currency_service


@router.post(
    "/convert",
    response_model=ConversionResponse,
    responses={400: {"model": ErrorResponse}},
)
async def convert_currency(
    request: Request, currency_service: CurrencyService = Depends(get_currency_service)
) -> ConversionResponse | JSONResponse:
    """Convert a tagged amount into the reference currency.

    The body is decoded here rather than by FastAPI so that malformed input
    is answered with 400 and the service's error payload.

    Args:
        request: FastAPI request object carrying the raw JSON body
        currency_service: Shared currency service

    Returns:
        Conversion response, or a 400 error response
    """
    body = await request.body()

    try:
        conversion_request = currency_service.decode_request(body)
        answer = currency_service.convert(conversion_request.value)
    except ConversionError as e:
        error_response = ErrorResponse(message=str(e))
        return JSONResponse(status_code=400, content=error_response.model_dump())

    return ConversionResponse(answer=answer)
