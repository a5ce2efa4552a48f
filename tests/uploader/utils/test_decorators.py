import json

from uploader.models.errors import NotAllowSizeError
from uploader.utils.decorators import api_gateway_handler


class TestApiGatewayHandler:
    def test_options_preflight(self, lambda_context) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise AssertionError("must not be called")

        response = handler({"httpMethod": "OPTIONS"}, lambda_context)

        assert response["statusCode"] == 204
        assert "Access-Control-Allow-Methods" in response["headers"]

    def test_passes_through_result(self, lambda_context) -> None:
        @api_gateway_handler
        def handler(event, context):
            return {"statusCode": 200, "body": "ok"}

        assert handler({"httpMethod": "GET"}, lambda_context)["body"] == "ok"

    def test_service_error_keeps_code_and_saved(self, lambda_context) -> None:
        @api_gateway_handler
        def handler(event, context):
            exc = NotAllowSizeError()
            exc.saved = ["first.txt"]
            raise exc

        response = handler({}, lambda_context)
        body = json.loads(response["body"])

        assert response["statusCode"] == 422
        assert body["error"] == "NOT_ALLOW_SIZE"
        assert body["details"]["saved"] == ["first.txt"]
        assert body["request_id"] == "test-request-id"

    def test_value_error_is_bad_request(self, lambda_context) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise ValueError("broken")

        assert handler({}, lambda_context)["statusCode"] == 400

    def test_unexpected_error_is_500(self, lambda_context) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise RuntimeError("boom")

        response = handler({}, lambda_context)
        body = json.loads(response["body"])

        assert response["statusCode"] == 500
        assert "boom" not in body["message"]
