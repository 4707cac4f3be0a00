"""Object storage session handling."""

import contextlib
import typing

import aioboto3
import aiohttp
import click

import archive_utility.config
import archive_utility.exceptions
import archive_utility.types


def open_session(
    config: archive_utility.types.StorageConfig,
    no_check_certificate: bool = False,
) -> archive_utility.types.ArchiveSession:
    """Open a new session for accessing object storage."""
    if not config["connection_string"]:
        raise archive_utility.exceptions.NoConnectionString

    if not config["container"]:
        raise archive_utility.exceptions.NoContainer

    connection = archive_utility.config.parse_connection_string(
        config["connection_string"]
    )

    ret: archive_utility.types.ArchiveSession = {
        "client": None,
        "s3_client": None,
        "backend": connection["backend"],
        "endpoint": connection["endpoint"].rstrip("/"),
        "access_key": connection["access_key"],
        "secret_key": connection["secret_key"],
        "region": connection["region"],
        "token": connection["token"],
        "container": config["container"],
        "no_check_certificate": no_check_certificate,
    }

    if not ret["endpoint"]:
        raise archive_utility.exceptions.NoEndpoint

    if ret["backend"] == "s3":
        if not ret["access_key"]:
            raise archive_utility.exceptions.NoEc2Key
        if not ret["secret_key"]:
            raise archive_utility.exceptions.NoEc2Secret
    elif not ret["token"]:
        raise archive_utility.exceptions.NoToken

    return ret


def load_session(
    opts: archive_utility.types.UploadCommand | archive_utility.types.DownloadCommand,
) -> archive_utility.types.ArchiveSession | None:
    """Load the configuration and open a session, reporting configuration errors."""
    try:
        config = archive_utility.config.load_config(opts["config_path"])
    except (OSError, UnicodeDecodeError):
        click.echo(
            f"Configuration file {opts['config_path']} could not be read.", err=True
        )
        return None

    try:
        return open_session(config, opts["no_check_certificate"])
    except archive_utility.exceptions.NoConnectionString:
        click.echo("Setup required.", err=True)
        click.echo("No connection string was configured.", err=True)
    except archive_utility.exceptions.NoContainer:
        click.echo("Setup required.", err=True)
        click.echo("No container was configured.", err=True)
    except archive_utility.exceptions.InvalidConnectionString:
        click.echo("Configured connection string could not be parsed.", err=True)
    except archive_utility.exceptions.UnknownBackend:
        click.echo(
            "Configured connection string uses an unsupported backend.", err=True
        )
    except archive_utility.exceptions.NoEndpoint:
        click.echo("No object storage endpoint was configured.", err=True)
    except archive_utility.exceptions.NoEc2Key:
        click.echo("Using S3, but EC2 access key was not provided.", err=True)
    except archive_utility.exceptions.NoEc2Secret:
        click.echo("Using S3, but EC2 secret key was not provided.", err=True)
    except archive_utility.exceptions.NoToken:
        click.echo("Using Swift, but no token was provided.", err=True)

    return None


@contextlib.asynccontextmanager
async def session_clients(
    session: archive_utility.types.ArchiveSession,
) -> typing.AsyncGenerator[archive_utility.types.ArchiveSession, None]:
    """Open the HTTP and S3 clients needed by the session."""
    async with aiohttp.ClientSession(raise_for_status=True) as cs:
        session["client"] = cs
        try:
            if session["backend"] == "s3":
                async with aioboto3.Session().client(
                    service_name="s3",
                    endpoint_url=session["endpoint"],
                    region_name=session["region"] or None,
                    aws_access_key_id=session["access_key"],
                    aws_secret_access_key=session["secret_key"],
                    verify=False if session["no_check_certificate"] else None,
                ) as s3:
                    session["s3_client"] = s3
                    yield session
            else:
                yield session
        finally:
            session["client"] = None
            session["s3_client"] = None
