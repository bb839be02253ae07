import base64
import json

import pytest

import validate
from decoder import KubernetesPodDecoder


POD_RESOURCE = {"group": "", "version": "v1", "resource": "pods"}


def _container(name, env_count):
    return {
        "name": name,
        "image": "busybox",
        "env": [{"name": f"VAR{i}", "value": str(i)} for i in range(env_count)],
    }


def _pod(*env_counts, name="testpod"):
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": name, "namespace": "default"},
        "spec": {
            "containers": [
                _container(f"container{i}", count)
                for i, count in enumerate(env_counts)
            ]
        },
    }


def _review(pod, uid="1234", resource=POD_RESOURCE, old_pod=None):
    return {
        "apiVersion": "admission.k8s.io/v1beta1",
        "kind": "AdmissionReview",
        "request": {
            "uid": uid,
            "kind": {"group": "", "version": "v1", "kind": "Pod"},
            "resource": resource,
            "namespace": "default",
            "operation": "CREATE",
            "userInfo": {"username": "testuser"},
            "object": pod,
            "oldObject": old_pod,
        },
    }


def _event(body, base64_encoded=False):
    if isinstance(body, dict):
        body = json.dumps(body)
    if base64_encoded:
        body = base64.b64encode(body.encode()).decode()
    return {
        "httpMethod": "POST",
        "path": "/validate",
        "headers": {"content-type": "application/json"},
        "requestContext": {"requestId": "test-request"},
        "body": body,
        "isBase64Encoded": base64_encoded,
    }


@pytest.fixture()
def decoder():
    return KubernetesPodDecoder()


@pytest.fixture()
def app():
    app = validate.create_app(TESTING=True)
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_pod():
    return _pod


@pytest.fixture()
def make_review():
    return _review


@pytest.fixture()
def make_event():
    return _event
