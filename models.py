from typing import Any
from pydantic import BaseModel, field_validator
from enum import StrEnum


class ApiVersion(StrEnum):
    V1BETA1 = "admission.k8s.io/v1beta1"


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#groupversionresource-v1-meta
class GroupVersionResource(BaseModel):
    group: str = ""
    version: str = ""
    resource: str = ""


POD_RESOURCE = GroupVersionResource(group="", version="v1", resource="pods")


class GroupVersionKind(BaseModel):
    group: str = ""
    version: str = ""
    kind: str = ""


class UserInfo(BaseModel):
    username: str | None = None
    uid: str | None = None
    groups: list[str] | None = None
    extra: dict[str, list[str]] | None = None


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#status-v1-meta
class Status(BaseModel):
    metadata: dict[str, Any] = {}
    status: str | None = None
    message: str | None = None
    reason: str | None = None
    code: int | None = None


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionResponse
class AdmissionResponse(BaseModel):
    uid: str = ""
    allowed: bool
    status: Status | None = None
    warnings: list[str] | None = None
    auditAnnotations: dict[str, str] | None = None


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionRequest
class AdmissionRequest(BaseModel):
    uid: str = ""
    kind: GroupVersionKind = GroupVersionKind()
    resource: GroupVersionResource = GroupVersionResource()
    subResource: str | None = None
    requestKind: GroupVersionKind | None = None
    requestResource: GroupVersionResource | None = None
    requestSubResource: str | None = None
    name: str | None = None
    namespace: str | None = None
    operation: str | None = None
    userInfo: UserInfo = UserInfo()
    object: Any = None
    oldObject: Any = None
    dryRun: bool | None = None
    options: Any = None

    @field_validator("uid", "kind", "resource", "userInfo", mode="before")
    @classmethod
    def validate_null(cls, val, info):
        # null decodes to the zero value, as it does for the API server
        if val is None:
            return "" if info.field_name == "uid" else {}
        return val


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionReview
class AdmissionReview(BaseModel):
    apiVersion: str = ApiVersion.V1BETA1
    kind: str = "AdmissionReview"
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None


class RequestContext(BaseModel):
    requestId: str = ""


# https://docs.aws.amazon.com/apigateway/latest/developerguide/set-up-lambda-proxy-integrations.html
class APIGatewayProxyRequest(BaseModel):
    body: str | None = None
    isBase64Encoded: bool = False
    httpMethod: str | None = None
    path: str | None = None
    headers: dict[str, str] | None = None
    requestContext: RequestContext = RequestContext()


class APIGatewayProxyResponse(BaseModel):
    statusCode: int
    headers: dict[str, str] = {}
    body: str = ""
    isBase64Encoded: bool = False
