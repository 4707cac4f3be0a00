"""Common miscellaneous functions for the archive utility."""

import pathlib
import typing

import aiofiles
import click

import archive_utility.codec
import archive_utility.types


def conditional_echo_verbose(
    opts: archive_utility.types.ArchiveBaseOptions, message: str
) -> None:
    """Echo verbose messages if verbose level is configured."""
    if opts["verbose"]:
        click.echo(message)


def conditional_echo_debug(
    opts: archive_utility.types.ArchiveBaseOptions, message: str
) -> None:
    """Echo debug messages if debug level is configured."""
    if opts["debug"]:
        click.echo(message)


def echo_unhandled_exception() -> None:
    """Print the banner preceding an unhandled exception traceback."""
    click.echo("Program encountered an unhandled exception.", err=True)
    click.echo(
        "If you think there's a mistake, copy this message and lines after it, and include it in your support request for diagnostic purposes.",
        err=True,
    )
    click.echo(
        "If possible, include instructions on how to replicate the issue (what you did in order to make this happen)",
        err=True,
    )
    click.echo("Exception details:", err=True)
    click.echo(
        "-------------------------- BEGIN EXCEPTION TRACEBACK --------------------------"
    )


def discard_partial_output(path: pathlib.Path) -> None:
    """Remove an output file left behind by a failed operation."""
    if path.is_file():
        path.unlink()


async def seal_file_chunks(
    path: pathlib.Path,
    password: str,
    bar: typing.Any,
) -> typing.AsyncGenerator[bytes, None]:
    """Encrypt a file into an async generator of encrypted chunks."""
    sealer = archive_utility.codec.Sealer(password)
    yield sealer.header

    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(archive_utility.codec.CHUNK_SIZE):
            segment = sealer.update(chunk)
            if bar:
                bar.update(len(chunk))
            if segment:
                yield segment

    yield sealer.finalize()


async def open_chunks_to_file(
    chunks: typing.AsyncIterator[bytes],
    path: pathlib.Path,
    password: str,
    bar: typing.Any,
) -> None:
    """Decrypt an async stream of encrypted chunks into a file."""
    header = bytearray()
    opener: archive_utility.codec.Opener | None = None

    async with aiofiles.open(path, "wb") as out_f:
        async for chunk in chunks:
            if bar:
                bar.update(len(chunk))

            # Chunk boundaries are arbitrary, collect the header first
            if opener is None:
                header.extend(chunk)
                if len(header) < archive_utility.codec.HEADER_LENGTH:
                    continue
                opener = archive_utility.codec.Opener(
                    password, bytes(header[: archive_utility.codec.HEADER_LENGTH])
                )
                chunk = bytes(header[archive_utility.codec.HEADER_LENGTH :])

            await out_f.write(opener.update(chunk))

        if opener is None:
            # Stream ended before a full header, raises FormatError
            opener = archive_utility.codec.Opener(password, bytes(header))

        await out_f.write(opener.finalize())
