import logging
import os

import pydantic
from pydantic_core import PydanticSerializationError
from flask import Config, Flask, request, current_app
from kubernetes import client

from models import (
    AdmissionReview,
    AdmissionResponse,
    POD_RESOURCE,
    Status,
)

from decoder import KubernetesPodDecoder
from exc import (
    ApplicationError,
    DecodeEnvelopeFailed,
    DecodeObjectFailed,
    EmptyBody,
    InvalidRequestError,
    ResponseEncodingError,
    UnsupportedResource,
)

LOG = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

ALLOWED_MESSAGE = "Allowed if there is no envvars"
DENIED_MESSAGE = "Has env vars so not allowing !! Allowed if there is no envvars"


class DEFAULTS:
    MAX_ENV_VARS = 1
    LOG_LEVEL = "INFO"
    DECODER = KubernetesPodDecoder


def load_config(**overrides) -> Config:
    """Build the webhook configuration.

    Values come from DEFAULTS, then from ENVGUARD_* environment variables,
    then from keyword arguments.
    """

    config = Config(os.path.dirname(os.path.abspath(__file__)))
    config.from_object(DEFAULTS)
    config.from_prefixed_env("ENVGUARD")
    if overrides:
        config.update(overrides)

    max_env_vars = config["MAX_ENV_VARS"]
    if isinstance(max_env_vars, str) and max_env_vars.isdigit():
        max_env_vars = int(max_env_vars)
    if (
        isinstance(max_env_vars, bool)
        or not isinstance(max_env_vars, int)
        or max_env_vars < 0
    ):
        LOG.error("MAX_ENV_VARS must be a non-negative integer, got %r", max_env_vars)
        exit(1)
    config["MAX_ENV_VARS"] = max_env_vars

    logging.getLogger().setLevel(config["LOG_LEVEL"])
    return config


def decode_review(body: str | None) -> AdmissionReview:
    if not body:
        raise EmptyBody("request body is empty")

    try:
        review = AdmissionReview.model_validate_json(body)
    except pydantic.ValidationError as err:
        LOG.error("Couldn't decode the admission review: %s", err)
        raise DecodeEnvelopeFailed(str(err)) from err

    if review.request is None:
        raise DecodeEnvelopeFailed("admission review has no request")

    return review


def evaluate_pod(pod: client.V1Pod, uid: str, max_env_vars: int = 1) -> AdmissionResponse:
    """Deny the pod if any of its containers has more than `max_env_vars`
    environment variables.

    Containers are checked in the order they are declared and evaluation
    stops at the first one that fails.
    """

    containers = pod.spec.containers if pod.spec and pod.spec.containers else []

    for container in containers:
        LOG.info("Looping through container %s in the pod", container.name)
        if len(container.env or []) > max_env_vars:
            LOG.info("Container %s has environment variables", container.name)
            return AdmissionResponse(
                uid=uid,
                allowed=False,
                status=Status(
                    message=DENIED_MESSAGE,
                    code=200,
                    reason=DENIED_MESSAGE,
                    status=DENIED_MESSAGE,
                ),
            )

    return AdmissionResponse(
        uid=uid,
        allowed=True,
        status=Status(message=ALLOWED_MESSAGE, code=200),
    )


def review_pod(body: str | None, decoder, max_env_vars: int = 1) -> AdmissionReview:
    """Run an admission review through the env var policy.

    Returns the review with its response attached and the embedded objects
    cleared. Raises an InvalidRequestError subclass if no verdict can be
    given.
    """

    LOG.info("Processing admission review %s", body)

    review = decode_review(body)
    admission_request = review.request

    if admission_request.resource != POD_RESOURCE:
        raise UnsupportedResource(
            "expected {}, got {}".format(
                POD_RESOURCE.model_dump(), admission_request.resource.model_dump()
            )
        )

    # The embedded object must be inline JSON; a quoted string is not a pod.
    if admission_request.object is not None and not isinstance(
        admission_request.object, dict
    ):
        raise DecodeObjectFailed(
            f"expected an embedded object, got {type(admission_request.object).__name__}"
        )

    pod = decoder.decode(admission_request.object)
    LOG.info("Able to deserialize pod %s", pod.metadata.name if pod.metadata else None)

    review.response = evaluate_pod(pod, admission_request.uid, max_env_vars)
    admission_request.object = None
    admission_request.oldObject = None

    return review


def encode_review(review: AdmissionReview) -> str:
    try:
        return review.model_dump_json(exclude_none=True)
    except PydanticSerializationError as err:
        LOG.error("failed to serialize admission review: %s", err)
        raise ResponseEncodingError("failed to serialize admission review")


def log_invalid_request(err: InvalidRequestError):
    LOG.warning("rejecting request (%s): %s", err.reason, err.detail)


def validate_pod():
    try:
        review = review_pod(
            request.get_data(as_text=True),
            current_app.decoder,
            current_app.config["MAX_ENV_VARS"],
        )
    except InvalidRequestError as err:
        log_invalid_request(err)
        raise

    return encode_review(review), 200, {"content-type": "application/json"}


def handle_invalidrequesterror(err):
    return str(err), 400, {"content-type": "text/plain"}


def handle_applicationerror(err):
    return str(err), 500, {"content-type": "text/plain"}


def health():
    return "OK", 200, {"content-type": "text/plain"}


def create_app(**config) -> Flask:
    """Create a Flask app that serves the webhook over plain HTTP.

    The Lambda entry point in lambda_function uses the same pipeline; this is
    for running the webhook in a cluster or locally.
    """

    app = Flask(__name__)
    app.config.update(load_config(**config))
    app.decoder = app.config["DECODER"]()

    app.errorhandler(InvalidRequestError)(handle_invalidrequesterror)
    app.errorhandler(ApplicationError)(handle_applicationerror)
    app.add_url_rule("/healthz", view_func=health)
    app.add_url_rule("/validate", view_func=validate_pod, methods=["POST"])

    return app
