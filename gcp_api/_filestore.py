# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import time
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any
from typing import NamedTuple

from gcp_api._auth import AuthProvider
from gcp_api._connection import AlreadyExists
from gcp_api._connection import GoogleApiConnection
from gcp_api._connection import NotFound
from gcp_api._operations import wait_for_operation


class NfsExportOptions(NamedTuple):
    ip_ranges: Sequence[str]
    access_mode: str = 'READ_WRITE'
    squash_mode: str = 'NO_ROOT_SQUASH'


class FilestoreInstance(NamedTuple):
    """Filestore instance with a single file share.

    >>> instance = FilestoreInstance(
    ...     'nfs-server', 'us-central1-b', 'BASIC_HDD', 1024, 'filestore', 'ad-vpc',
    ...     NfsExportOptions(['10.0.0.0/8']))
    >>> body = instance.request_body()
    >>> body['fileShares'][0]['capacityGb']
    '1024'
    >>> body['fileShares'][0]['nfsExportOptions']
    [{'ipRanges': ['10.0.0.0/8'], 'accessMode': 'READ_WRITE', 'squashMode': 'NO_ROOT_SQUASH'}]
    >>> body['networks']
    [{'network': 'ad-vpc', 'modes': ['MODE_IPV4']}]
    """

    name: str
    zone: str
    tier: str
    capacity_gb: int
    share_name: str
    network: str
    export_options: NfsExportOptions

    def request_body(self) -> Mapping[str, Any]:
        # See: https://cloud.google.com/filestore/docs/reference/rest/v1/projects.locations.instances
        return {
            'tier': self.tier,
            'fileShares': [{
                'name': self.share_name,
                # int64 is passed as a string in JSON.
                'capacityGb': str(self.capacity_gb),
                'nfsExportOptions': [{
                    'ipRanges': list(self.export_options.ip_ranges),
                    'accessMode': self.export_options.access_mode,
                    'squashMode': self.export_options.squash_mode,
                    }],
                }],
            'networks': [{
                'network': self.network,
                'modes': ['MODE_IPV4'],
                }],
            }


class FilestoreApi:
    _default_url = 'https://file.googleapis.com/v1'

    def __init__(self, auth: AuthProvider, project: str, base_url: str = _default_url):
        self._connection = GoogleApiConnection(auth, base_url)
        self._project = project

    def __repr__(self):
        return f'{FilestoreApi.__name__}({self._project!r})'

    def get_instance(self, zone: str, name: str) -> Mapping[str, Any]:
        return self._connection.get(self._instance_path(zone, name))

    def ensure_instance(
            self,
            instance: FilestoreInstance,
            timeout_sec: float = 1800,
            poll_interval_sec: float = 10,
            ) -> Mapping[str, Any]:
        """Create instance if absent and wait until it is ready.

        The provider does not allow to change most of the properties in place.
        An existing instance is left as is: differences are logged
        and must be resolved by a human.
        """
        try:
            existing = self.get_instance(instance.zone, instance.name)
        except NotFound:
            _logger.info("%r: %s: create", self, instance.name)
            try:
                operation = self._connection.post(
                    f'projects/{self._project}/locations/{instance.zone}/instances',
                    instance.request_body(),
                    params={'instanceId': instance.name},
                    )
            except AlreadyExists:
                _logger.info("%r: %s: created concurrently", self, instance.name)
            else:
                wait_for_operation(self._connection, operation, timeout_sec, poll_interval_sec)
        else:
            _logger.info("%r: %s: already exists", self, instance.name)
            for difference in instance_differences(instance, existing):
                _logger.warning("%r: %s: %s", self, instance.name, difference)
        return self.wait_until_ready(instance.zone, instance.name, timeout_sec, poll_interval_sec)

    def wait_until_ready(
            self,
            zone: str,
            name: str,
            timeout_sec: float = 1800,
            poll_interval_sec: float = 10,
            ) -> Mapping[str, Any]:
        # An instance left by an interrupted creation is still CREATING
        # and has no IP address.
        started_at = time.monotonic()
        while True:
            instance = self.get_instance(zone, name)
            state = instance.get('state')
            if state == 'READY':
                return instance
            if state in _failed_states:
                raise InstanceNotReady(f"Instance {name} is {state}")
            if time.monotonic() - started_at > timeout_sec:
                raise InstanceNotReady(f"Instance {name} is {state} after {timeout_sec} sec")
            _logger.info("%r: %s: %s, wait", self, name, state)
            time.sleep(poll_interval_sec)

    def delete_instance(self, zone: str, name: str):
        try:
            operation = self._connection.delete(self._instance_path(zone, name))
        except NotFound:
            _logger.info("%r: %s: already deleted", self, name)
            return
        wait_for_operation(self._connection, operation)
        _logger.info("%r: %s: deleted", self, name)

    def get_ip_address(self, zone: str, name: str) -> str:
        return instance_ip_address(self.wait_until_ready(zone, name))

    def _instance_path(self, zone, name):
        return f'projects/{self._project}/locations/{zone}/instances/{name}'


# See: https://cloud.google.com/filestore/docs/reference/rest/v1/projects.locations.instances#State
_failed_states = ('ERROR', 'DELETING', 'SUSPENDED')


class InstanceNotReady(Exception):
    pass


def instance_differences(expected: FilestoreInstance, actual: Mapping[str, Any]) -> Sequence[str]:
    """Compare the properties which are set on creation.

    >>> expected = FilestoreInstance(
    ...     'nfs-server', 'us-central1-b', 'BASIC_HDD', 1024, 'filestore', 'ad-vpc',
    ...     NfsExportOptions(['10.0.0.0/8']))
    >>> instance_differences(expected, expected.request_body())
    []
    >>> actual = {
    ...     'tier': 'BASIC_SSD',
    ...     'fileShares': [{
    ...         'name': 'data',
    ...         'capacityGb': '2560',
    ...         'nfsExportOptions': [{'ipRanges': ['10.1.0.0/16']}],
    ...         }],
    ...     }
    >>> for difference in instance_differences(expected, actual):
    ...     print(difference)
    tier is 'BASIC_SSD', expected 'BASIC_HDD'
    share name is 'data', expected 'filestore'
    capacity is 2560 GB, expected 1024 GB
    export IP ranges are ['10.1.0.0/16'], expected ['10.0.0.0/8']
    """
    [share] = actual.get('fileShares') or [{}]
    [export] = share.get('nfsExportOptions') or [{}]
    capacity_gb = int(share.get('capacityGb', 0))
    ip_ranges = export.get('ipRanges', [])
    differences = []
    if actual.get('tier') != expected.tier:
        differences.append(f"tier is {actual.get('tier')!r}, expected {expected.tier!r}")
    if share.get('name') != expected.share_name:
        differences.append(f"share name is {share.get('name')!r}, expected {expected.share_name!r}")
    if capacity_gb != expected.capacity_gb:
        differences.append(f"capacity is {capacity_gb} GB, expected {expected.capacity_gb} GB")
    if sorted(ip_ranges) != sorted(expected.export_options.ip_ranges):
        differences.append(
            f"export IP ranges are {ip_ranges!r}, expected {list(expected.export_options.ip_ranges)!r}")
    return differences


def instance_ip_address(instance: Mapping[str, Any]) -> str:
    """Return the address NFS clients mount the share from.

    >>> instance_ip_address({'name': 'i', 'networks': [{'ipAddresses': ['10.1.2.3']}]})
    '10.1.2.3'
    >>> instance_ip_address({'name': 'i', 'networks': [{'network': 'n'}]})
    Traceback (most recent call last):
    ...
    RuntimeError: Instance i has no IP address yet
    """
    for network in instance.get('networks', []):
        for address in network.get('ipAddresses', []):
            return address
    raise RuntimeError(f"Instance {instance.get('name')} has no IP address yet")


_logger = logging.getLogger(__name__)
