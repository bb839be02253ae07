import json
import logging
from collections.abc import Mapping
from typing import Any

import yaml
from kubernetes import client
from kubernetes.client.rest import ApiException
from typing_extensions import Protocol, override

from exc import DecodeObjectFailed

LOG = logging.getLogger(__name__)

POD_API_VERSION = "v1"
POD_KIND = "Pod"


class Decoder(Protocol):
    def decode(self, raw: bytes | str | Mapping[str, Any] | None) -> client.V1Pod: ...


def load_object(raw: bytes | str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Turn a raw Kubernetes object into a plain dictionary.

    Documents that start with `{` are parsed as JSON, anything else as YAML.
    A mapping that has already been parsed (e.g. the embedded object of an
    AdmissionReview) is used as-is.
    """

    if raw is None:
        raise DecodeObjectFailed("object is missing")

    if isinstance(raw, Mapping):
        return dict(raw)

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecodeObjectFailed(f"object is not valid UTF-8: {err}") from err

    if not raw.strip():
        raise DecodeObjectFailed("object is empty")

    try:
        if raw.lstrip().startswith("{"):
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (ValueError, yaml.YAMLError) as err:
        raise DecodeObjectFailed(f"unable to parse object: {err}") from err

    if not isinstance(data, dict):
        raise DecodeObjectFailed(f"expected an object, got {type(data).__name__}")

    return data


class KubernetesPodDecoder(Decoder):
    def __init__(self, api_client: client.ApiClient | None = None):
        """Use the Kubernetes client's model deserializer to build V1Pod objects.

        No cluster configuration is loaded; the client is only used for its
        knowledge of the core/v1 schema.
        """

        super().__init__()
        self._client = api_client or client.ApiClient()

    @override
    def decode(self, raw):
        data = load_object(raw)

        # Empty or missing type fields are filled in from the target type.
        api_version = data["apiVersion"] = data.get("apiVersion") or POD_API_VERSION
        kind = data["kind"] = data.get("kind") or POD_KIND
        if (api_version, kind) != (POD_API_VERSION, POD_KIND):
            raise DecodeObjectFailed(
                f"expected {POD_API_VERSION}/{POD_KIND}, got {api_version}/{kind}"
            )

        try:
            pod = self._client.deserialize(
                json.dumps(data, default=str), "V1Pod", "application/json"
            )
        except (ValueError, TypeError, AttributeError, ApiException) as err:
            raise DecodeObjectFailed(f"unable to deserialize pod: {err}") from err

        LOG.debug("decoded pod %s", pod.metadata.name if pod.metadata else None)
        return pod
