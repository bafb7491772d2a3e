"""
Transport request construction.

Turns an HTTPRequest plus the client configuration into an httpx.Request:
URL joined onto the server URL, flattened query parameters, configuration
headers overridden by request headers, and a JSON or form body for
non-GET requests that carry body parameters.
"""

import json
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx

from network_layer.client.configuration import HTTPClientConfiguration
from network_layer.models.enums import HTTPMethod, ParameterEncoding
from network_layer.models.request import HTTPRequest

CONTENT_TYPE_HEADER = "Content-Type"


def join_url(server_url: str, path: str) -> str:
    """Append `path` to `server_url` with exactly one separating slash."""
    if not path:
        return server_url
    return f"{server_url.rstrip('/')}/{path.lstrip('/')}"


def query_components(parameters: Mapping[str, Any]) -> list[tuple[str, str]]:
    """
    Flatten parameters into (name, value) pairs.

    - nested mappings become `key[nested]`
    - lists of strings are joined with commas (other lists become "")
    - booleans become "true"/"false"
    - None values are omitted
    """
    components: list[tuple[str, str]] = []
    for key, value in parameters.items():
        components += _components_for(key, value)
    return components


def _components_for(key: str, value: Any) -> list[tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        components: list[tuple[str, str]] = []
        for nested_key, nested_value in value.items():
            components += _components_for(f"{key}[{nested_key}]", nested_value)
        return components
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, str) for item in value):
            return [(key, ",".join(value))]
        return [(key, "")]
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return [(key, "true" if value else "false")]
    return [(key, str(value))]


def encode_body(parameters: Mapping[str, Any], encoding: ParameterEncoding) -> bytes:
    if encoding is ParameterEncoding.URL_ENCODED:
        return urlencode(query_components(parameters)).encode("utf-8")
    return json.dumps(parameters).encode("utf-8")


def build_transport_request(
    request: HTTPRequest,
    configuration: HTTPClientConfiguration,
) -> httpx.Request:
    """
    Build the httpx.Request for one attempt of `request`.

    Raises:
        TypeError: Body parameters are not JSON serializable
    """
    url = join_url(configuration.server_url, request.path)
    params = query_components(request.query_parameters) if request.query_parameters else None

    headers = httpx.Headers(configuration.http_headers)
    headers.update(request.headers)

    content = None
    if request.method is not HTTPMethod.GET and request.body_parameters:
        content = encode_body(request.body_parameters, request.encoding)
        headers[CONTENT_TYPE_HEADER] = request.encoding.header_value

    return httpx.Request(
        request.method.value,
        url,
        params=params,
        headers=headers,
        content=content,
        extensions={"timeout": httpx.Timeout(configuration.timeout).as_dict()},
    )
