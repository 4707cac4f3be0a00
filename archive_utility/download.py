"""File download operation."""

import asyncio
import typing

import aiohttp
import click
from botocore.exceptions import ClientError

import archive_utility.client
import archive_utility.common
import archive_utility.exceptions
import archive_utility.s3_client
import archive_utility.swift_client
import archive_utility.types


async def download(
    opts: archive_utility.types.DownloadCommand,
    session: archive_utility.types.ArchiveSession,
) -> int:
    """Download and decrypt a blob into a local file."""
    ret = 0
    if session["backend"] == "s3":
        archive_utility.common.conditional_echo_debug(opts, "Using s3 for file download")
        ret = await archive_utility.s3_client.s3_download_opened_object_wrap_progress(
            opts, session
        )
    else:
        archive_utility.common.conditional_echo_debug(
            opts, "Using swift for file download"
        )
        ret = await archive_utility.swift_client.swift_download_opened_object_wrap_progress(
            opts, session
        )

    archive_utility.common.conditional_echo_verbose(
        opts, f"Decrypted {session['container']}/{opts['input']} to {opts['output']}"
    )
    return ret


async def wrap_download_exceptions(opts: archive_utility.types.DownloadCommand) -> int:
    """Wrap the download operation with required exception handling."""
    session = archive_utility.client.load_session(opts)
    if session is None:
        return -1

    exc: typing.Any = None
    ret = 0
    try:
        async with archive_utility.client.session_clients(session):
            ret = await download(opts, session)
    except asyncio.CancelledError:
        click.echo("Received a keyboard interrupt, aborting...", err=True)
        archive_utility.common.discard_partial_output(opts["output"])
        return 0
    except archive_utility.exceptions.FormatError:
        click.echo(
            f"Could not decrypt {opts['input']}, the blob is too short to be encrypted.",
            err=True,
        )
        archive_utility.common.discard_partial_output(opts["output"])
        ret = 1
    except archive_utility.exceptions.DecryptionError:
        click.echo(f"Could not decrypt {opts['input']}.", err=True)
        click.echo("Check that the password is correct.", err=True)
        archive_utility.common.discard_partial_output(opts["output"])
        ret = 1
    except archive_utility.exceptions.NoBlob:
        click.echo(
            f"Blob {opts['input']} does not exist in {session['container']}.", err=True
        )
        ret = 2
    except archive_utility.exceptions.NoContainerAccess:
        click.echo(f"Could not access container {session['container']}.", err=True)
        ret = 2
    except aiohttp.ClientResponseError as cex:
        if cex.status in {401, 403} and not opts["debug"]:
            click.echo("Authentication was not successful.", err=True)
            click.echo("Check that the configured token is still valid.", err=True)
            ret = 2
        else:
            exc = cex
    except ClientError as cex:
        if (
            cex.response.get("Error", {}).get("Code")
            in archive_utility.s3_client.S3_AUTH_ERROR_CODES
            and not opts["debug"]
        ):
            click.echo("Authentication was not successful.", err=True)
            click.echo("Check that the configured EC2 credentials are correct.", err=True)
            ret = 2
        else:
            exc = cex
    except Exception as e:
        exc = e
    finally:
        if exc is not None:
            archive_utility.common.discard_partial_output(opts["output"])
            archive_utility.common.echo_unhandled_exception()
            raise exc

    return ret
