"""
Lambda handler responsible for multi-file uploads.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from uploader.models.errors import (
    StorageError,
    UnsupportedFormatError,
    UploadFailedError,
    ValidationError,
    WatermarkSizeError,
)
from uploader.utils.constants import DEFAULT_UPLOAD_FIELD
from uploader.utils.decorators import api_gateway_handler
from uploader.utils.response import ResponseBuilder
from uploader.utils.validators import sanitize_validation_errors, validate_request

from .models import UploadFilesRequest, UploadFilesResponse
from .service import get_upload_service

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle multi-file upload requests.

    The JSON body maps form field names to lists of files; each file carries
    its client file name and Base64 content. The `field` query parameter
    selects which field is uploaded (default: "files").

    Expected API Gateway event structure:
    {
        "queryStringParameters": {"field": "files"},
        "body": "{\"files\": [{\"filename\": \"a.png\", \"content\": \"...\"}]}"
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload form
        context: AWS Lambda execution context

    Returns:
        201 with the stored file locators, or an error response. A failed
        batch reports the files stored before the failure under
        `details.saved`.
    """
    logger.info(
        "Received file upload request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )

    query_params = event.get("queryStringParameters") or {}

    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as exc:
        logger.exception("Invalid JSON body received", exc_info=exc)
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    if not isinstance(body, dict):
        return ResponseBuilder.bad_request(message="Request body must be a JSON object")

    try:
        request = validate_request(
            UploadFilesRequest,
            {"field": query_params.get("field") or DEFAULT_UPLOAD_FIELD, "form": body},
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
        saved = get_upload_service().upload_files(request.field, request.to_form())

    except (ValidationError, UnsupportedFormatError, WatermarkSizeError) as exc:
        logger.warning(
            "Upload rejected",
            extra={"field": request.field, "error_code": exc.error_code, "saved": exc.saved},
        )
        metrics.add_metric(name="UploadRejected", unit=MetricUnit.Count, value=1)
        return ResponseBuilder.from_service_error(exc)

    except (StorageError, UploadFailedError) as exc:
        logger.exception(
            "Upload failed",
            extra={"field": request.field, "saved": exc.saved},
        )
        return ResponseBuilder.from_service_error(exc)

    metrics.add_metric(name="FilesUploaded", unit=MetricUnit.Count, value=len(saved))

    response = UploadFilesResponse(
        files=saved,
        count=len(saved),
        message="Files uploaded successfully",
    )

    return ResponseBuilder.created(response.model_dump())
