"""Common types for the archive utility."""

import pathlib
import typing

import aiohttp
import types_aiobotocore_s3


class ArchiveBaseOptions(typing.TypedDict):
    """Type definitions for options shared by every command."""

    action: str
    progress: bool
    debug: bool
    verbose: bool


class SetupCommand(ArchiveBaseOptions):
    """Type definitions for the setup command."""

    config_path: pathlib.Path
    connection_string: str
    container: str


class EncryptCommand(ArchiveBaseOptions):
    """Type definitions for the local encrypt command."""

    input: pathlib.Path
    output: pathlib.Path
    password: str


class DecryptCommand(ArchiveBaseOptions):
    """Type definitions for the local decrypt command."""

    input: pathlib.Path
    output: pathlib.Path
    password: str


class UploadCommand(ArchiveBaseOptions):
    """Type definitions for the upload command."""

    # Input is a local file, output is the blob name
    input: pathlib.Path
    output: str
    password: str
    config_path: pathlib.Path
    no_check_certificate: bool


class DownloadCommand(ArchiveBaseOptions):
    """Type definitions for the download command."""

    # Input is the blob name, output is a local file
    input: str
    output: pathlib.Path
    password: str
    config_path: pathlib.Path
    no_check_certificate: bool


ArchiveCommand = (
    SetupCommand | EncryptCommand | DecryptCommand | UploadCommand | DownloadCommand
)


class StorageConfig(typing.TypedDict):
    """Type definitions for the stored object storage configuration."""

    connection_string: str
    container: str


class StorageConnection(typing.TypedDict):
    """Type definitions for a parsed connection string."""

    backend: str
    endpoint: str
    access_key: str
    secret_key: str
    region: str
    token: str


class ArchiveSession(typing.TypedDict):
    """Type definition for session variables."""

    client: aiohttp.client.ClientSession | None
    s3_client: types_aiobotocore_s3.Client | None
    backend: str
    endpoint: str
    access_key: str
    secret_key: str
    region: str
    token: str
    container: str
    no_check_certificate: bool
