"""The fixed set of JSON:API errors and the response writer for them."""

from starlette.responses import JSONResponse, Response

from teapot.schemas.error import ApiError, ErrorResponse

MEDIA_TYPE = "application/vnd.api+json"


class JSONAPIResponse(JSONResponse):
    media_type = MEDIA_TYPE


BAD_REQUEST = ApiError(
    id="bad_request",
    status=400,
    title="Bad request",
    detail="Request body is not well-formed. It must be JSON.",
)
NOT_FOUND = ApiError(
    id="not_found",
    status=404,
    title="Not Found",
    detail="The requested resource does not exist.",
)
NOT_ACCEPTABLE = ApiError(
    id="not_acceptable",
    status=406,
    title="Not Acceptable",
    detail=f"Accept header must be set to '{MEDIA_TYPE}'.",
)
UNSUPPORTED_MEDIA_TYPE = ApiError(
    id="unsupported_media_type",
    status=415,
    title="Unsupported Media Type",
    detail=f"Content-Type header must be set to: '{MEDIA_TYPE}'.",
)
INTERNAL_SERVER_ERROR = ApiError(
    id="internal_server_error",
    status=500,
    title="Internal Server Error",
    detail="Something went wrong.",
)


def write_error(error: ApiError) -> Response:
    """Build the complete response for ``error``.

    The returned response is final: status, media type and body
    (``{"errors": [error]}``) are all set, and callers return it as is.
    """
    return JSONAPIResponse(
        status_code=error.status,
        content=ErrorResponse(errors=[error]).model_dump(),
    )
