# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import json
import logging
import time
from abc import ABCMeta
from abc import abstractmethod
from base64 import urlsafe_b64encode
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from typing import Optional

import requests
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.serialization import load_pem_private_key

CLOUD_PLATFORM_SCOPE = 'https://www.googleapis.com/auth/cloud-platform'


class AuthProvider(metaclass=ABCMeta):

    def __init__(self):
        self._token: Optional[str] = None
        self._expires_at = 0.0

    def get_access_token(self) -> str:
        # Renew a bit earlier so that a token does not expire mid-request.
        if self._token is None or time.monotonic() > self._expires_at - 60:
            self._token, lifetime_sec = self._request_token()
            self._expires_at = time.monotonic() + lifetime_sec
            _logger.debug("%r: access token renewed, valid for %d sec", self, lifetime_sec)
        return self._token

    @abstractmethod
    def _request_token(self) -> tuple[str, int]:
        pass


class GoogleAuthProvider(AuthProvider):

    def __init__(
            self,
            credentials: Mapping[str, Any],
            scope: str = CLOUD_PLATFORM_SCOPE,
            lifetime_duration: int = 3600,
            ):
        # See: https://developers.google.com/identity/protocols/oauth2/service-account#httprest
        super().__init__()
        self._credentials = credentials
        self._scope = scope
        self._lifetime_duration = lifetime_duration

    def __repr__(self):
        return f'{GoogleAuthProvider.__name__}({self._credentials.get("client_email")!r})'

    @classmethod
    def from_file(cls, path: Path) -> 'GoogleAuthProvider':
        return cls(json.loads(path.read_text()))

    def _request_token(self):
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            }
        data = {
            'grant_type': 'urn:ietf:params:oauth:grant-type:jwt-bearer',
            'assertion': self._create_jwt_token(),
            }
        response = requests.post(self._credentials['token_uri'], headers=headers, data=data, timeout=30)
        response_data = response.json()
        if 'access_token' in response_data:
            return response_data['access_token'], int(response_data.get('expires_in', self._lifetime_duration))
        else:
            raise RuntimeError(f"Failed to get access token: {response_data!r}")

    def _create_jwt_token(self) -> str:
        header = {
            'alg': 'RS256',
            'typ': 'JWT',
            }
        now = int(time.time())
        payload = {
            'iss': self._credentials['client_email'],
            'scope': self._scope,
            'aud': self._credentials['token_uri'],
            'iat': now,
            'exp': now + self._lifetime_duration,
            }
        rsa_key = load_pem_private_key(self._credentials['private_key'].encode('ascii'), password=None)
        json_header = json.dumps(header).encode('ascii')
        json_payload = json.dumps(payload).encode('ascii')
        body = _base64url_encode(json_header) + b'.' + _base64url_encode(json_payload)
        signature = rsa_key.sign(body, padding.PKCS1v15(), hashes.SHA256())
        jwt_token = body + b'.' + _base64url_encode(signature)
        return jwt_token.decode('ascii')


class MetadataAuthProvider(AuthProvider):
    """Token of the service account attached to the VM.

    Works only on Compute Engine VMs.
    See: https://cloud.google.com/compute/docs/access/authenticate-workloads#applications
    """

    _default_url = (
        'http://metadata.google.internal/computeMetadata/v1'
        '/instance/service-accounts/default/token')

    def __init__(self, url: str = _default_url):
        super().__init__()
        self._url = url

    def __repr__(self):
        return f'{MetadataAuthProvider.__name__}({self._url!r})'

    def _request_token(self):
        response = requests.get(self._url, headers={'Metadata-Flavor': 'Google'}, timeout=10)
        response.raise_for_status()
        response_data = response.json()
        return response_data['access_token'], int(response_data['expires_in'])


def auth_provider_from_config(credentials_file: str) -> AuthProvider:
    if credentials_file:
        return GoogleAuthProvider.from_file(Path(credentials_file).expanduser())
    return MetadataAuthProvider()


def _base64url_encode(data: bytes) -> bytes:
    return urlsafe_b64encode(data).rstrip(b'=')


_logger = logging.getLogger(__name__)
