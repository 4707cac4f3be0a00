"""Functions for accessing Openstack Swift object storage."""

import typing
import urllib.parse

import aiohttp
import click

import archive_utility.common
import archive_utility.exceptions
import archive_utility.types

DOWNLOAD_CHUNK_SIZE: int = 65536


def swift_object_url(
    session: archive_utility.types.ArchiveSession, blob: str = ""
) -> str:
    """Get the URL for the session container, or an object within it."""
    url = f"{session['endpoint']}/{urllib.parse.quote(session['container'])}"
    if blob:
        url += f"/{urllib.parse.quote(blob)}"
    return url


def swift_get_client(
    session: archive_utility.types.ArchiveSession,
) -> aiohttp.ClientSession:
    """Get the HTTP client for the session."""
    if session["client"] is None:
        raise archive_utility.exceptions.NoClient
    return session["client"]


async def swift_check_container(session: archive_utility.types.ArchiveSession) -> None:
    """Check the container can be accessed."""
    async with swift_get_client(session).head(
        swift_object_url(session),
        headers={
            "Content-Length": "0",
            "X-Auth-Token": session["token"],
        },
        ssl=not session["no_check_certificate"],
        raise_for_status=False,
    ) as resp:
        if resp.status not in {200, 204}:
            raise archive_utility.exceptions.NoContainerAccess


async def swift_create_container(
    session: archive_utility.types.ArchiveSession,
    opts: archive_utility.types.ArchiveBaseOptions,
) -> None:
    """Ensure the upload container exists."""
    try:
        archive_utility.common.conditional_echo_debug(
            opts, f"Checking access to container {session['container']}"
        )
        await swift_check_container(session)
    except archive_utility.exceptions.NoContainerAccess:
        archive_utility.common.conditional_echo_debug(
            opts, f"Could not access container {session['container']}, trying to create"
        )
        async with swift_get_client(session).put(
            swift_object_url(session),
            headers={
                "Content-Length": "0",
                "X-Auth-Token": session["token"],
            },
            ssl=not session["no_check_certificate"],
            raise_for_status=False,
        ) as resp_put:
            if resp_put.status not in {201, 202}:
                raise archive_utility.exceptions.ContainerCreationFailed


async def swift_upload_sealed_file(
    opts: archive_utility.types.UploadCommand,
    session: archive_utility.types.ArchiveSession,
    bar: typing.Any,
) -> None:
    """Encrypt and upload a file to object storage in a single chunked request."""
    await swift_create_container(session, opts)

    archive_utility.common.conditional_echo_debug(
        opts, f"Uploading {opts['input']} to {session['container']}/{opts['output']}"
    )
    async with swift_get_client(session).put(
        swift_object_url(session, opts["output"]),
        data=archive_utility.common.seal_file_chunks(
            opts["input"], opts["password"], bar
        ),
        headers={
            "X-Auth-Token": session["token"],
            "Content-Type": "application/octet-stream",
        },
        ssl=not session["no_check_certificate"],
    ):
        pass


async def swift_buffered_reader(
    body: aiohttp.StreamReader,
) -> typing.AsyncGenerator[bytes, None]:
    """Yield the contents of a response body as chunks."""
    async for chunk in body.iter_chunked(DOWNLOAD_CHUNK_SIZE):
        yield chunk


async def swift_download_opened_object_wrap_progress(
    opts: archive_utility.types.DownloadCommand,
    session: archive_utility.types.ArchiveSession,
) -> int:
    """Download and decrypt an object from storage with optional progress bar."""
    archive_utility.common.conditional_echo_debug(
        opts, f"Downloading and decrypting {session['container']}/{opts['input']}"
    )
    async with swift_get_client(session).get(
        swift_object_url(session, opts["input"]),
        headers={
            "X-Auth-Token": session["token"],
        },
        ssl=not session["no_check_certificate"],
        raise_for_status=False,
    ) as resp:
        if resp.status == 404:
            raise archive_utility.exceptions.NoBlob
        resp.raise_for_status()

        size: int = int(resp.headers.get("Content-Length", 0))

        if opts["progress"]:
            # Can't annotate progress bar without using click internal vars
            with click.progressbar(  # type: ignore
                length=size, label=f"Downloading and decrypting {opts['input']}"
            ) as bar:
                await archive_utility.common.open_chunks_to_file(
                    swift_buffered_reader(resp.content),
                    opts["output"],
                    opts["password"],
                    bar,
                )
        else:
            await archive_utility.common.open_chunks_to_file(
                swift_buffered_reader(resp.content),
                opts["output"],
                opts["password"],
                None,
            )

    return 0
