# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Minimal clients for Google Cloud REST APIs.

Only the calls needed to describe and look up the file server are
implemented. Resources are reconciled by the provider: the clients create
a resource if it is absent and wait for the operation to finish.
"""
from gcp_api._auth import AuthProvider
from gcp_api._auth import GoogleAuthProvider
from gcp_api._auth import MetadataAuthProvider
from gcp_api._auth import auth_provider_from_config
from gcp_api._compute import ComputeApi
from gcp_api._compute import FirewallRule
from gcp_api._connection import AlreadyExists
from gcp_api._connection import GoogleApiConnection
from gcp_api._connection import GoogleApiError
from gcp_api._connection import NotFound
from gcp_api._filestore import FilestoreApi
from gcp_api._filestore import FilestoreInstance
from gcp_api._filestore import InstanceNotReady
from gcp_api._filestore import NfsExportOptions
from gcp_api._filestore import instance_differences
from gcp_api._filestore import instance_ip_address
from gcp_api._operations import OperationFailed
from gcp_api._operations import OperationTimeout
from gcp_api._operations import wait_for_compute_operation
from gcp_api._operations import wait_for_operation
from gcp_api._secret_manager import AdCredentials
from gcp_api._secret_manager import SecretManagerApi

__all__ = [
    'AdCredentials',
    'AlreadyExists',
    'AuthProvider',
    'ComputeApi',
    'FilestoreApi',
    'FilestoreInstance',
    'FirewallRule',
    'GoogleApiConnection',
    'GoogleApiError',
    'GoogleAuthProvider',
    'InstanceNotReady',
    'MetadataAuthProvider',
    'NfsExportOptions',
    'NotFound',
    'OperationFailed',
    'OperationTimeout',
    'SecretManagerApi',
    'auth_provider_from_config',
    'instance_differences',
    'instance_ip_address',
    'wait_for_compute_operation',
    'wait_for_operation',
    ]
