"""AWS Lambda entry point.

Configure the function with the handler `lambda_function.handler`. API
Gateway delivers the AdmissionReview in the body of a proxy event; the
verdict goes back as the body of a proxy response. Requests that cannot be
answered raise an InvalidRequestError, which the Lambda runtime reports as a
function error instead of a verdict.
"""

import base64
import binascii
import logging

import pydantic

from models import APIGatewayProxyRequest, APIGatewayProxyResponse
from exc import DecodeEnvelopeFailed, InvalidRequestError
from validate import encode_review, load_config, log_invalid_request, review_pod

LOG = logging.getLogger(__name__)

CONFIG = load_config()
DECODER = CONFIG["DECODER"]()


def event_body(event: APIGatewayProxyRequest) -> str | None:
    if not event.body or not event.isBase64Encoded:
        return event.body

    try:
        return base64.b64decode(event.body, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as err:
        raise DecodeEnvelopeFailed(f"invalid base64 body: {err}") from err


def handle(event: dict, decoder=None, max_env_vars=None) -> dict:
    decoder = decoder or DECODER
    if max_env_vars is None:
        max_env_vars = CONFIG["MAX_ENV_VARS"]

    try:
        proxy_request = APIGatewayProxyRequest.model_validate(event)
    except pydantic.ValidationError as err:
        raise DecodeEnvelopeFailed(str(err)) from err

    LOG.info("Processing Lambda request %s", proxy_request.requestContext.requestId)

    review = review_pod(event_body(proxy_request), decoder, max_env_vars)

    return APIGatewayProxyResponse(
        statusCode=200,
        headers={"Content-Type": "application/json"},
        body=encode_review(review),
    ).model_dump()


def handler(event, context):
    try:
        return handle(event)
    except InvalidRequestError as err:
        log_invalid_request(err)
        raise
