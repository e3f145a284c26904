import importlib

import pytest


http_client = importlib.import_module("waterwatch.ingestion.http_client")
errors = importlib.import_module("waterwatch.ingestion.errors")
HttpResponse = http_client.HttpResponse
SimpleHttpClient = http_client.SimpleHttpClient


class SequenceTransport:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def __call__(self, method, url, headers, timeout_seconds):
        self.calls.append((method, url, headers, timeout_seconds))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_http_client_decodes_json_and_passes_timeout():
    transport = SequenceTransport([HttpResponse(status_code=200, body=b'{"ok": true}', headers={})])

    client = SimpleHttpClient(transport=transport, timeout_seconds=3.5)
    result = client.request_json("https://example.com/data")

    assert result["ok"] is True
    method, url, headers, timeout_seconds = transport.calls[0]
    assert method == "GET"
    assert headers["accept"] == "application/json"
    assert timeout_seconds == 3.5


def test_http_client_does_not_retry_non_200():
    transport = SequenceTransport(
        [
            HttpResponse(status_code=503, body=b"{}", headers={}),
            HttpResponse(status_code=200, body=b"[]", headers={}),
        ]
    )

    client = SimpleHttpClient(transport=transport)
    with pytest.raises(errors.NetworkFailure):
        client.request_json("https://example.com/data")

    assert len(transport.calls) == 1


def test_http_client_wraps_transport_errors_as_network_failure():
    transport = SequenceTransport([ConnectionError("refused")])

    client = SimpleHttpClient(transport=transport)
    with pytest.raises(errors.NetworkFailure):
        client.request_json("https://example.com/data")


def test_http_client_rejects_invalid_json_body():
    transport = SequenceTransport([HttpResponse(status_code=200, body=b"<html>", headers={})])

    client = SimpleHttpClient(transport=transport)
    with pytest.raises(errors.ValidationFailure):
        client.request_json("https://example.com/data")


def test_request_json_list_requires_an_array():
    transport = SequenceTransport([HttpResponse(status_code=200, body=b'{"rows": []}', headers={})])

    client = SimpleHttpClient(transport=transport)
    with pytest.raises(errors.ValidationFailure):
        client.request_json_list("https://example.com/data")
