# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import json
import logging
from base64 import b64decode
from typing import NamedTuple

from gcp_api._auth import AuthProvider
from gcp_api._connection import GoogleApiConnection


class SecretManagerApi:
    _default_url = 'https://secretmanager.googleapis.com/v1'

    def __init__(self, auth: AuthProvider, project: str, base_url: str = _default_url):
        self._connection = GoogleApiConnection(auth, base_url)
        self._project = project

    def __repr__(self):
        return f'{SecretManagerApi.__name__}({self._project!r})'

    def access_latest(self, secret: str) -> bytes:
        # See: https://cloud.google.com/secret-manager/docs/reference/rest/v1/projects.secrets.versions/access
        response = self._connection.get(
            f'projects/{self._project}/secrets/{secret}/versions/latest:access')
        _logger.info("%r: secret %s: accessed %s", self, secret, response.get('name'))
        return b64decode(response['payload']['data'])


class AdCredentials(NamedTuple):
    username: str
    password: str

    def __repr__(self):
        return f'{AdCredentials.__name__}({self.username!r}, ***)'

    @classmethod
    def parse(cls, data: bytes) -> 'AdCredentials':
        r"""Parse secret JSON. Strip NetBIOS domain from the username.

        >>> AdCredentials.parse(b'{"username": "MCLOUD\\\\admin", "password": "p@ss"}')
        AdCredentials('admin', ***)
        >>> AdCredentials.parse(b'{"username": "admin", "password": "p@ss"}').password
        'p@ss'
        >>> AdCredentials.parse(b'{"username": "admin"}')
        Traceback (most recent call last):
        ...
        ValueError: Secret has no password
        """
        parsed = json.loads(data)
        for key in ('username', 'password'):
            if not parsed.get(key):
                raise ValueError(f"Secret has no {key}")
        [*_, username] = parsed['username'].split('\\')
        return cls(username, parsed['password'])


_logger = logging.getLogger(__name__)
