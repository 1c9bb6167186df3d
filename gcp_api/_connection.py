# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
from collections.abc import Mapping
from typing import Any
from typing import Optional

import requests

from gcp_api._auth import AuthProvider


class GoogleApiConnection:
    """JSON REST API of a single Google Cloud service.

    Errors are reported in the common format:
    {"error": {"code": 404, "message": "...", "status": "NOT_FOUND"}}
    See: https://cloud.google.com/apis/design/errors#http_mapping
    """

    def __init__(self, auth: AuthProvider, base_url: str):
        self._auth = auth
        self._base_url = base_url.rstrip('/')
        self._session = requests.Session()

    def __repr__(self):
        return f'{self.__class__.__name__}({self._base_url!r})'

    def get(self, path: str, params: Optional[Mapping[str, str]] = None) -> Mapping[str, Any]:
        return self._request('GET', path, params=params)

    def post(self, path: str, data: Mapping[str, Any], params: Optional[Mapping[str, str]] = None) -> Mapping[str, Any]:
        return self._request('POST', path, params=params, json=data)

    def delete(self, path: str) -> Mapping[str, Any]:
        return self._request('DELETE', path)

    def _request(self, method, path, **kwargs):
        url = f'{self._base_url}/{path.lstrip("/")}'
        _logger.debug("%s %s", method, url)
        response = self._session.request(
            method,
            url,
            headers={'Authorization': f'Bearer {self._auth.get_access_token()}'},
            timeout=60,
            **kwargs,
            )
        if 200 <= response.status_code <= 299:
            if not response.content:
                return {}
            return response.json()
        try:
            message = response.json()['error']['message']
        except (ValueError, KeyError, TypeError):
            message = response.text
        _logger.debug("%s %s: %d %s", method, url, response.status_code, message)
        if response.status_code == 404:
            raise NotFound(response.status_code, message)
        if response.status_code == 409:
            raise AlreadyExists(response.status_code, message)
        raise GoogleApiError(response.status_code, message)


class GoogleApiError(Exception):

    def __init__(self, status: int, message: str):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.message = message


class NotFound(GoogleApiError):
    pass


class AlreadyExists(GoogleApiError):
    pass


_logger = logging.getLogger(__name__)
