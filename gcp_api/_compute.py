# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any
from typing import NamedTuple

from gcp_api._auth import AuthProvider
from gcp_api._connection import AlreadyExists
from gcp_api._connection import GoogleApiConnection
from gcp_api._connection import NotFound
from gcp_api._operations import wait_for_compute_operation


class FirewallRule(NamedTuple):
    """Ingress allow rule.

    >>> rule = FirewallRule('allow-nfs', 'ad-vpc', ['2049'], ['tcp', 'udp'], ['10.0.0.0/8'])
    >>> body = rule.request_body('my-project')
    >>> body['network']
    'projects/my-project/global/networks/ad-vpc'
    >>> body['allowed']
    [{'IPProtocol': 'tcp', 'ports': ['2049']}, {'IPProtocol': 'udp', 'ports': ['2049']}]
    >>> 'targetTags' in body
    False
    """

    name: str
    network: str
    ports: Sequence[str]
    protocols: Sequence[str]
    source_ranges: Sequence[str]
    target_tags: Sequence[str] = ()

    def request_body(self, project: str) -> Mapping[str, Any]:
        # See: https://cloud.google.com/compute/docs/reference/rest/v1/firewalls
        body = {
            'name': self.name,
            'network': f'projects/{project}/global/networks/{self.network}',
            'direction': 'INGRESS',
            'allowed': [
                {'IPProtocol': protocol, 'ports': list(self.ports)}
                for protocol in self.protocols
                ],
            'sourceRanges': list(self.source_ranges),
            }
        if self.target_tags:
            body['targetTags'] = list(self.target_tags)
        return body


class ComputeApi:
    _default_url = 'https://compute.googleapis.com/compute/v1'

    def __init__(self, auth: AuthProvider, project: str, base_url: str = _default_url):
        self._connection = GoogleApiConnection(auth, base_url)
        self._project = project

    def __repr__(self):
        return f'{ComputeApi.__name__}({self._project!r})'

    def get_firewall(self, name: str) -> Mapping[str, Any]:
        return self._connection.get(f'projects/{self._project}/global/firewalls/{name}')

    def ensure_firewall(self, rule: FirewallRule) -> Mapping[str, Any]:
        try:
            existing = self.get_firewall(rule.name)
        except NotFound:
            _logger.info("%r: firewall %s: create", self, rule.name)
        else:
            _logger.info("%r: firewall %s: already exists", self, rule.name)
            return existing
        try:
            operation = self._connection.post(
                f'projects/{self._project}/global/firewalls',
                rule.request_body(self._project),
                )
        except AlreadyExists:
            _logger.info("%r: firewall %s: created concurrently", self, rule.name)
        else:
            wait_for_compute_operation(self._connection, operation)
        return self.get_firewall(rule.name)

    def delete_firewall(self, name: str):
        try:
            operation = self._connection.delete(f'projects/{self._project}/global/firewalls/{name}')
        except NotFound:
            _logger.info("%r: firewall %s: already deleted", self, name)
            return
        wait_for_compute_operation(self._connection, operation)
        _logger.info("%r: firewall %s: deleted", self, name)


_logger = logging.getLogger(__name__)
