"""Functions for accessing S3 compatible object storage."""

import asyncio
import hashlib
from io import BytesIO
import pathlib
import typing

import aiobotocore.response
import click
from botocore.exceptions import ClientError
from types_aiobotocore_s3.type_defs import CompletedPartTypeDef

import archive_utility.common
import archive_utility.exceptions
import archive_utility.types

# Minimum part size allowed by S3 is 5 MiB for all but the last part
MULTIPART_UPLOAD_SIZE: int = 8 * 1024 * 1024

DOWNLOAD_CHUNK_SIZE: int = 65536

# S3 error codes signifying a credentials problem
S3_AUTH_ERROR_CODES: set[str] = {
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
}


async def s3_check_container(
    session: archive_utility.types.ArchiveSession,
    container: str,
) -> None:
    """Check the container can be accessed."""
    if session["s3_client"] is None:
        raise archive_utility.exceptions.NoS3Client

    try:
        await session["s3_client"].head_bucket(Bucket=container)
    except ClientError:
        raise archive_utility.exceptions.NoContainerAccess


async def s3_create_container(
    session: archive_utility.types.ArchiveSession,
    opts: archive_utility.types.ArchiveBaseOptions,
) -> None:
    """Ensure the upload container exists."""
    if session["s3_client"] is None:
        raise archive_utility.exceptions.NoS3Client

    container = session["container"]
    try:
        archive_utility.common.conditional_echo_debug(
            opts, f"Checking access to container {container}"
        )
        await s3_check_container(session, container)
    except archive_utility.exceptions.NoContainerAccess:
        archive_utility.common.conditional_echo_debug(
            opts, f"Could not access container {container}, trying to create"
        )
        try:
            await session["s3_client"].create_bucket(Bucket=container)
        except ClientError:
            raise archive_utility.exceptions.ContainerCreationFailed


async def slice_sealed_file(
    path: pathlib.Path,
    password: str,
    bar: typing.Any,
) -> typing.AsyncGenerator[bytes, None]:
    """Slice an encrypted file stream into parts ready for multipart upload."""
    multipart_chunk = bytearray()
    async for segment in archive_utility.common.seal_file_chunks(path, password, bar):
        multipart_chunk.extend(segment)
        if len(multipart_chunk) >= MULTIPART_UPLOAD_SIZE:
            yield bytes(multipart_chunk)
            multipart_chunk = bytearray()

    if multipart_chunk:
        yield bytes(multipart_chunk)


async def s3_upload_sealed_file(
    opts: archive_utility.types.UploadCommand,
    session: archive_utility.types.ArchiveSession,
    bar: typing.Any,
) -> None:
    """Encrypt and upload a file to S3 using multipart upload."""
    if session["s3_client"] is None:
        raise archive_utility.exceptions.NoS3Client

    bucket: str = session["container"]
    key: str = opts["output"]
    await s3_create_container(session, opts)
    archive_utility.common.conditional_echo_debug(
        opts, f"Starting multipart upload for {bucket}/{key}"
    )

    mpu = await session["s3_client"].create_multipart_upload(Bucket=bucket, Key=key)
    upload_id = mpu["UploadId"]
    try:
        parts: list[CompletedPartTypeDef] = []

        part_number: int = 1
        async for chunk in slice_sealed_file(opts["input"], opts["password"], bar):
            archive_utility.common.conditional_echo_debug(
                opts, f"Uploading a chunk of size {len(chunk)}"
            )
            resp = await session["s3_client"].upload_part(
                ContentLength=len(chunk),
                Bucket=bucket,
                Key=key,
                PartNumber=part_number,
                UploadId=upload_id,
                Body=BytesIO(chunk),
            )
            digest = hashlib.md5(chunk).hexdigest()  # nosec
            if digest not in resp["ETag"]:
                archive_utility.common.conditional_echo_debug(
                    opts,
                    f"Calculated ETag {digest} and response ETag {resp['ETag']} mismatch",
                )
            parts.append({"PartNumber": part_number, "ETag": str(resp["ETag"])})
            part_number += 1

        archive_utility.common.conditional_echo_debug(
            opts, f"Attempting to complete multipart upload for {key}"
        )
        await session["s3_client"].complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={"Parts": parts},
        )
        archive_utility.common.conditional_echo_debug(opts, f"Upload complete for {key}")

    except (asyncio.CancelledError, Exception) as e:
        archive_utility.common.conditional_echo_debug(
            opts, f"Encountered an exception: {e}"
        )
        await session["s3_client"].abort_multipart_upload(
            Bucket=bucket, Key=key, UploadId=upload_id
        )
        archive_utility.common.conditional_echo_debug(
            opts, f"Multipart upload aborted for {key}"
        )
        raise


async def s3_buffered_reader(
    body: aiobotocore.response.StreamingBody,
) -> typing.AsyncGenerator[bytes, None]:
    """Yield the contents of an object body as chunks."""
    async for chunk in body.iter_chunks(DOWNLOAD_CHUNK_SIZE):
        yield chunk


async def s3_download_opened_object_wrap_progress(
    opts: archive_utility.types.DownloadCommand,
    session: archive_utility.types.ArchiveSession,
) -> int:
    """Download and decrypt an object from storage with optional progress bar."""
    if session["s3_client"] is None:
        raise archive_utility.exceptions.NoS3Client

    archive_utility.common.conditional_echo_debug(
        opts, f"Downloading and decrypting {session['container']}/{opts['input']}"
    )
    try:
        resp = await session["s3_client"].get_object(
            Bucket=session["container"], Key=opts["input"]
        )
    except ClientError as cex:
        if cex.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
            raise archive_utility.exceptions.NoBlob
        if cex.response.get("Error", {}).get("Code") == "NoSuchBucket":
            raise archive_utility.exceptions.NoContainerAccess
        raise
    size: int = resp["ContentLength"]

    async with resp["Body"] as body:
        if opts["progress"]:
            # Can't annotate progress bar without using click internal vars
            with click.progressbar(  # type: ignore
                length=int(size), label=f"Downloading and decrypting {opts['input']}"
            ) as bar:
                await archive_utility.common.open_chunks_to_file(
                    s3_buffered_reader(body), opts["output"], opts["password"], bar
                )
        else:
            await archive_utility.common.open_chunks_to_file(
                s3_buffered_reader(body), opts["output"], opts["password"], None
            )

    return 0
