"""
Lambda handler responsible for deleting a stored file.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from uploader.models.errors import NotFoundError, StorageError, ValidationError
from uploader.utils.decorators import api_gateway_handler
from uploader.utils.response import ResponseBuilder
from uploader.utils.validators import sanitize_validation_errors, validate_request

from .models import DeleteFileRequest, DeleteFileResponse
from .service import DeleteNotSupportedError, get_delete_service

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle file deletion requests.

    The file is identified by the `locator` query parameter, exactly as it
    was returned by the upload.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    logger.info(
        "Received file delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    query_params = event.get("queryStringParameters") or {}

    try:
        request = validate_request(
            DeleteFileRequest,
            {"locator": query_params.get("locator")},
        )
    except PydanticValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors()},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request payload",
            details={"errors": sanitize_validation_errors(list(exc.errors()))},
        )

    try:
        result = get_delete_service().delete_file(request.locator)

    except DeleteNotSupportedError as exc:
        return ResponseBuilder.error(
            status=HTTPStatus.METHOD_NOT_ALLOWED,
            error=exc.error_code,
            message=exc.message,
        )

    except ValidationError as exc:
        return ResponseBuilder.bad_request(exc.message, details=exc.details)

    except NotFoundError:
        logger.warning("File not found during delete", extra={"locator": request.locator})
        return ResponseBuilder.not_found(f"File not found: {request.locator}")

    except StorageError as exc:
        logger.exception("Deletion failed", extra={"locator": request.locator})
        return ResponseBuilder.internal_error(exc.message)

    response = DeleteFileResponse(
        locator=result["locator"],
        message="File deleted successfully",
        deleted_at=result["deleted_at"],
    )

    return ResponseBuilder.ok(response.model_dump())
