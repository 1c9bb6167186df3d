# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import time
from collections.abc import Mapping
from typing import Any

from gcp_api._connection import GoogleApiConnection


def wait_for_operation(
        connection: GoogleApiConnection,
        operation: Mapping[str, Any],
        timeout_sec: float = 1800,
        poll_interval_sec: float = 10,
        ) -> Mapping[str, Any]:
    """Wait for google.longrunning.Operation of Filestore.

    Filestore instance creation takes several minutes.
    See: https://cloud.google.com/filestore/docs/reference/rest/v1/projects.locations.operations
    """
    started_at = time.monotonic()
    while True:
        if operation.get('done'):
            if 'error' in operation:
                raise OperationFailed(operation['name'], operation['error'])
            _logger.info("Operation %s: done", operation['name'])
            return operation.get('response', {})
        if time.monotonic() - started_at > timeout_sec:
            raise OperationTimeout(operation['name'], timeout_sec)
        _logger.debug("Operation %s: in progress", operation['name'])
        time.sleep(poll_interval_sec)
        operation = connection.get(operation['name'])


def wait_for_compute_operation(
        connection: GoogleApiConnection,
        operation: Mapping[str, Any],
        timeout_sec: float = 300,
        poll_interval_sec: float = 2,
        ) -> Mapping[str, Any]:
    """Wait for Compute Engine operation, which has its own format.

    See: https://cloud.google.com/compute/docs/reference/rest/v1/globalOperations
    """
    started_at = time.monotonic()
    while True:
        if operation['status'] == 'DONE':
            if 'error' in operation:
                raise OperationFailed(operation['name'], operation['error'])
            _logger.info("Operation %s: done", operation['name'])
            return operation
        if time.monotonic() - started_at > timeout_sec:
            raise OperationTimeout(operation['name'], timeout_sec)
        _logger.debug("Operation %s: %s", operation['name'], operation['status'])
        time.sleep(poll_interval_sec)
        operation = connection.get(operation['selfLink'].split('/compute/v1/', 1)[-1])


class OperationFailed(Exception):

    def __init__(self, name: str, error: Mapping[str, Any]):
        super().__init__(f"Operation {name} failed: {error!r}")
        self.error = error


class OperationTimeout(Exception):

    def __init__(self, name: str, timeout_sec: float):
        super().__init__(f"Operation {name} is not done after {timeout_sec} sec")


_logger = logging.getLogger(__name__)
