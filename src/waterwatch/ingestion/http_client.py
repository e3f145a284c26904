import json
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

import requests

from .errors import NetworkFailure, ValidationFailure


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str]


Transport = Callable[[str, str, Mapping[str, str], float], HttpResponse]


def requests_transport(
    method: str, url: str, headers: Mapping[str, str], timeout_seconds: float
) -> HttpResponse:
    try:
        response = requests.request(method, url, headers=dict(headers), timeout=timeout_seconds)
    except requests.Timeout as error:
        raise NetworkFailure(f"timed out after {timeout_seconds}s: {url}") from error
    except requests.RequestException as error:
        raise NetworkFailure(str(error)) from error
    return HttpResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers.items()),
    )


class SimpleHttpClient:
    """Single-attempt JSON client.

    Every request is bounded by ``timeout_seconds`` and is never retried; callers
    recover from failures by falling back to cached data.
    """

    def __init__(
        self,
        transport: Transport = requests_transport,
        timeout_seconds: float = 20.0,
    ) -> None:
        self._transport = transport
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def request_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> object:
        request_headers = {"accept": "application/json"}
        request_headers.update(headers or {})

        try:
            response = self._transport("GET", url, request_headers, self._timeout_seconds)
        except NetworkFailure:
            raise
        except Exception as error:
            raise NetworkFailure(str(error)) from error

        if response.status_code != 200:
            raise NetworkFailure(f"request failed with status {response.status_code}")

        try:
            return json.loads(response.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as error:
            raise ValidationFailure(f"response body is not JSON: {error}") from error

    def request_json_list(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> list[object]:
        decoded = self.request_json(url, headers=headers)
        if isinstance(decoded, list):
            return decoded
        raise ValidationFailure("response body is not a JSON array")
