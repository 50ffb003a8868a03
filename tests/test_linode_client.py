from unittest.mock import MagicMock

import pytest
import requests
from tenacity import wait_none

from linode_node_decorator.core.errors import MetadataError
from linode_node_decorator.lib.metadata.linode_client import LinodeMetadataClient

from conftest import make_snapshot

INSTANCE = {
    "id": 123,
    "label": "my-node",
    "region": "us-east",
    "type": "g6-standard-2",
    "host_uuid": "abc",
    "specs": {"vcpus": 2, "memory": 4096},
    "backups": {"enabled": False},
    "tags": [],
}


def response(status=200, text="", json_body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json_body
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(LinodeMetadataClient._request_token.retry, "wait", wait_none())


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    s.put.return_value = response(text="tok-1\n")
    s.get.return_value = response(json_body=INSTANCE)
    return s


def test_fetch_returns_snapshot(session):
    client = LinodeMetadataClient(session=session)
    assert client.fetch() == make_snapshot()

    put_url = session.put.call_args.args[0]
    assert put_url == "http://169.254.169.254/v1/token"
    assert session.put.call_args.kwargs["headers"] == {"Metadata-Token-Expiry-Seconds": "3600"}

    get_url = session.get.call_args.args[0]
    assert get_url == "http://169.254.169.254/v1/instance"
    assert session.get.call_args.kwargs["headers"]["Metadata-Token"] == "tok-1"
    assert session.headers["User-Agent"].startswith("linode-node-decorator/")


def test_token_reused_until_near_expiry(session):
    clock = Clock()
    client = LinodeMetadataClient(session=session, token_expiry=600, clock=clock)

    client.fetch()
    clock.now = 500
    client.fetch()
    assert session.put.call_count == 1

    clock.now = 545
    client.fetch()
    assert session.put.call_count == 2


def test_token_request_retried_then_fails(session):
    session.put.side_effect = requests.ConnectionError("no route to host")
    client = LinodeMetadataClient(session=session)

    with pytest.raises(MetadataError):
        client.fetch()
    assert session.put.call_count == 3
    session.get.assert_not_called()


def test_token_request_recovers_on_retry(session):
    session.put.side_effect = [requests.ConnectionError("blip"), response(text="tok-2")]
    client = LinodeMetadataClient(session=session)
    assert client.token() == "tok-2"


def test_unauthorized_invalidates_token(session):
    session.get.return_value = response(status=401)
    client = LinodeMetadataClient(session=session)

    with pytest.raises(MetadataError):
        client.fetch()

    session.get.return_value = response(json_body=INSTANCE)
    client.fetch()
    assert session.put.call_count == 2


def test_server_error_raises(session):
    session.get.return_value = response(status=503)
    with pytest.raises(MetadataError):
        LinodeMetadataClient(session=session).fetch()


def test_connection_error_raises(session):
    session.get.side_effect = requests.Timeout("timed out")
    with pytest.raises(MetadataError):
        LinodeMetadataClient(session=session).fetch()


def test_invalid_json_raises(session):
    session.get.return_value = response(text="<html>")
    with pytest.raises(MetadataError):
        LinodeMetadataClient(session=session).fetch()


def test_malformed_instance_raises(session):
    session.get.return_value = response(json_body={"id": 1})
    with pytest.raises(MetadataError):
        LinodeMetadataClient(session=session).fetch()
