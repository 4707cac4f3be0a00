"""File upload operation."""

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

async def process_file_upload(
    session: archive_utility.types.ArchiveSession,
    opts: archive_utility.types.UploadCommand,
    bar: typing.Any,
) -> int:
    """Process file encryption and upload with the configured backend."""
    if session["backend"] == "s3":
        archive_utility.common.conditional_echo_debug(opts, "Using s3 for file upload")
        await archive_utility.s3_client.s3_upload_sealed_file(opts, session, bar)
    else:
        archive_utility.common.conditional_echo_debug(
            opts, "Using swift for file upload"
        )
        await archive_utility.swift_client.swift_upload_sealed_file(opts, session, bar)

    return 0


async def upload(
    opts: archive_utility.types.UploadCommand,
    session: archive_utility.types.ArchiveSession,
) -> int:
    """Encrypt and upload a local file."""
    size: int = opts["input"].stat().st_size
    ret = 0
    # Print progress by default
    if opts["progress"]:
        # Can't annotate progress bar without using click internal vars
        with click.progressbar(  # type: ignore
            length=size, label=f"Uploading {opts['input']}"
        ) as bar:
            ret = await process_file_upload(session, opts, bar)
    else:
        ret = await process_file_upload(session, opts, None)

    archive_utility.common.conditional_echo_verbose(
        opts, f"Uploaded {opts['input']} to {session['container']}/{opts['output']}"
    )
    return ret


async def wrap_upload_exceptions(opts: archive_utility.types.UploadCommand) -> int:
    """Wrap the upload operation with required exception handling."""
    session = archive_utility.client.load_session(opts)
    if session is None:
        return -1

    exc: typing.Any = None
    ret = 0
    try:
        async with archive_utility.client.session_clients(session):
            ret = await upload(opts, session)
    except asyncio.CancelledError:
        click.echo("Received a keyboard interrupt, aborting...", err=True)
        return 0
    except archive_utility.exceptions.ContainerCreationFailed:
        click.echo("Could not create container/bucket for upload.", err=True)
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
            archive_utility.common.echo_unhandled_exception()
            raise exc

    return ret
