"""Tests for the Secrets Manager credential lookup."""

import json

import pytest
from botocore.exceptions import ClientError

from nl_explorer.credentials.secret_store import SecretStore
from nl_explorer.exceptions.errors import ExecutionError


class FakeSecretsManager:
    def __init__(self, secret_string=None, error=None):
        self.secret_string = secret_string
        self.error = error
        self.calls = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        if self.error:
            raise self.error
        return {"SecretString": self.secret_string}


def test_reads_username_and_password():
    sm = FakeSecretsManager(json.dumps({"username": "reader", "password": "pw", "engine": "postgres"}))
    creds = SecretStore(client=sm).get_credentials("shop/readonly")
    assert creds.username == "reader"
    assert creds.password == "pw"
    assert sm.calls == ["shop/readonly"]


def test_password_not_in_repr():
    sm = FakeSecretsManager(json.dumps({"username": "reader", "password": "hunter2"}))
    creds = SecretStore(client=sm).get_credentials("x")
    assert "hunter2" not in repr(creds)


def test_access_denied_is_execution_error():
    err = ClientError({"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "GetSecretValue")
    with pytest.raises(ExecutionError) as exc_info:
        SecretStore(client=FakeSecretsManager(error=err)).get_credentials("x")
    assert exc_info.value.__cause__ is err


@pytest.mark.parametrize("secret", ["not json", json.dumps({"username": "only"}), None, json.dumps(["a"])])
def test_malformed_secret_is_execution_error(secret):
    with pytest.raises(ExecutionError):
        SecretStore(client=FakeSecretsManager(secret)).get_credentials("x")
