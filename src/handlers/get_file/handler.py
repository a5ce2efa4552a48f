"""
Lambda handler responsible for serving stored files.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from uploader.models.errors import NotFoundError, StorageError, ValidationError
from uploader.utils.decorators import api_gateway_handler
from uploader.utils.response import ResponseBuilder
from uploader.utils.validators import sanitize_validation_errors, validate_request

from .models import GetFileRequest
from .service import get_file_service

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Return the content of a stored file as a binary response.

    The file is addressed by its `name` path parameter (the locator returned
    by an upload, without the base URL). `download=true` asks the client to
    save the file instead of displaying it.

    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        API Gateway-compatible response dictionary.
    """
    logger.info(
        "Received file download request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    try:
        request = validate_request(
            GetFileRequest,
            {
                "name": path_params.get("name"),
                "download": query_params.get("download", "false").lower() == "true",
            },
        )
    except PydanticValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors()},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(list(exc.errors()))},
        )

    try:
        stored = get_file_service().read_file(request.name)

    except ValidationError as exc:
        return ResponseBuilder.bad_request(exc.message, details=exc.details)

    except NotFoundError:
        logger.warning("File not found", extra={"name": request.name})
        return ResponseBuilder.not_found(f"File not found: {request.name}")

    except StorageError as exc:
        logger.exception("Reading file failed", extra={"name": request.name})
        return ResponseBuilder.internal_error(exc.message)

    disposition = "attachment" if request.download else "inline"

    return ResponseBuilder.binary_response(
        stored.content,
        content_type=stored.content_type,
        headers={"Content-Disposition": f'{disposition}; filename="{stored.filename}"'},
    )
