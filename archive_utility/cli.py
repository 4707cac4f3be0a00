"""CLI for encrypting files locally or into object storage."""

import asyncio
import os
import pathlib
import sys
import traceback

import click

import archive_utility.config
import archive_utility.download
import archive_utility.local
import archive_utility.types
import archive_utility.upload


def validate(
    input: str,
    output: str,
    password: str,
    local_input: bool = True,
    local_output: bool = True,
) -> bool:
    """Validate command parameters, reporting every problem found."""
    valid = True

    if not input:
        click.echo("input file is required.", err=True)
        valid = False
    elif local_input and not pathlib.Path(input).is_file():
        click.echo("input file does not exist.", err=True)
        valid = False

    if not output:
        click.echo("output file is required.", err=True)
        valid = False
    elif (
        local_input
        and local_output
        and input
        and pathlib.Path(input).resolve() == pathlib.Path(output).resolve()
    ):
        click.echo("input and output must be different files.", err=True)
        valid = False

    if not password:
        click.echo("password is required.", err=True)
        valid = False

    return valid


def run_command(opts: archive_utility.types.ArchiveCommand) -> int:
    """Run a resolved command, returning the exit code."""
    ret = 0
    try:
        if opts["action"] == "setup":
            ret = archive_utility.config.setup(opts)  # type: ignore
        elif opts["action"] == "encrypt":
            ret = archive_utility.local.wrap_encrypt_exceptions(opts)  # type: ignore
        elif opts["action"] == "decrypt":
            ret = archive_utility.local.wrap_decrypt_exceptions(opts)  # type: ignore
        elif opts["action"] == "upload":
            ret = asyncio.run(
                archive_utility.upload.wrap_upload_exceptions(opts)  # type: ignore
            )
        elif opts["action"] == "download":
            ret = asyncio.run(
                archive_utility.download.wrap_download_exceptions(opts)  # type: ignore
            )
    except KeyboardInterrupt:
        ret = 0
    except Exception:
        # Actions print the support banner before re-raising
        click.echo(traceback.format_exc(), err=True)
        ret = 42
    return ret


@click.command()
@click.option("--config", default="", help="Configuration file to write.")
@click.option(
    "--connection-string",
    prompt="Enter the connection string for object storage",
    hide_input=True,
    help="Connection string, e.g. Backend=s3;Endpoint=...;AccessKey=...;SecretKey=...",
)
@click.option(
    "--container",
    prompt="Enter the container name for object storage",
    help="Container where the files will be stored.",
)
@click.option("--debug", is_flag=True, help="Print debug information.")
def setup(
    config: str,
    connection_string: str,
    container: str,
    debug: bool,
) -> None:
    """Store the object storage connection settings."""
    opts: archive_utility.types.SetupCommand = {
        "action": "setup",
        "config_path": archive_utility.config.get_config_path(config),
        "connection_string": connection_string,
        "container": container,
        "progress": False,
        "debug": debug,
        "verbose": False,
    }

    sys.exit(run_command(opts))


@click.command()
@click.option("--input", "input_", default="", help="File to encrypt.")
@click.option("--output", default="", help="Location of the encrypted file.")
@click.option(
    "--password",
    default="",
    help="Password used to generate the encryption key. Defaults to $ARCHIVE_PASSWORD.",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Print more information.",
)
@click.option("--debug", is_flag=True, help="Print debug information.")
@click.option(
    "--progress/--no-progress", default=True, help="Display file progress information."
)
def encrypt(
    input_: str,
    output: str,
    password: str,
    verbose: bool,
    debug: bool,
    progress: bool,
) -> None:
    """Encrypt a local file into a local file."""
    password = password if password else os.environ.get("ARCHIVE_PASSWORD", "")
    if not validate(input_, output, password):
        sys.exit(-1)

    opts: archive_utility.types.EncryptCommand = {
        "action": "encrypt",
        "input": pathlib.Path(input_),
        "output": pathlib.Path(output),
        "password": password,
        "progress": progress if not debug else False,
        "debug": debug,
        "verbose": verbose,
    }

    sys.exit(run_command(opts))


@click.command()
@click.option("--input", "input_", default="", help="Encrypted file to decrypt.")
@click.option("--output", default="", help="Location of the decrypted file.")
@click.option(
    "--password",
    default="",
    help="Password used to generate the encryption key. Defaults to $ARCHIVE_PASSWORD.",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Print more information.",
)
@click.option("--debug", is_flag=True, help="Print debug information.")
@click.option(
    "--progress/--no-progress", default=True, help="Display file progress information."
)
def decrypt(
    input_: str,
    output: str,
    password: str,
    verbose: bool,
    debug: bool,
    progress: bool,
) -> None:
    """Decrypt a local file into a local file."""
    password = password if password else os.environ.get("ARCHIVE_PASSWORD", "")
    if not validate(input_, output, password):
        sys.exit(-1)

    opts: archive_utility.types.DecryptCommand = {
        "action": "decrypt",
        "input": pathlib.Path(input_),
        "output": pathlib.Path(output),
        "password": password,
        "progress": progress if not debug else False,
        "debug": debug,
        "verbose": verbose,
    }

    sys.exit(run_command(opts))


@click.command()
@click.option("--input", "input_", default="", help="File to archive.")
@click.option("--output", default="", help="Name of the blob to store the file in.")
@click.option(
    "--password",
    default="",
    help="Password used to generate the encryption key. Defaults to $ARCHIVE_PASSWORD.",
)
@click.option("--config", default="", help="Configuration file created with setup.")
@click.option(
    "--no-check-certificate",
    is_flag=True,
    help="Don't check TLS certificate for authenticity. (development use only)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Print more information.",
)
@click.option("--debug", is_flag=True, help="Print debug information.")
@click.option(
    "--progress/--no-progress", default=True, help="Display file progress information."
)
def upload(
    input_: str,
    output: str,
    password: str,
    config: str,
    no_check_certificate: bool,
    verbose: bool,
    debug: bool,
    progress: bool,
) -> None:
    """Encrypt a local file and upload it to object storage."""
    password = password if password else os.environ.get("ARCHIVE_PASSWORD", "")
    if not validate(input_, output, password, local_output=False):
        sys.exit(-1)

    if progress and debug:
        click.echo("Progress can't be reliably printed with debug information.", err=True)
        click.echo("Progress will not be displayed while debug mode is used.", err=True)

    opts: archive_utility.types.UploadCommand = {
        "action": "upload",
        "input": pathlib.Path(input_),
        "output": output,
        "password": password,
        "config_path": archive_utility.config.get_config_path(config),
        "no_check_certificate": no_check_certificate,
        "progress": progress if not debug else False,
        "debug": debug,
        "verbose": verbose,
    }

    sys.exit(run_command(opts))


@click.command()
@click.option("--input", "input_", default="", help="Name of the blob to download.")
@click.option("--output", default="", help="Location of the decrypted file.")
@click.option(
    "--password",
    default="",
    help="Password used to generate the encryption key. Defaults to $ARCHIVE_PASSWORD.",
)
@click.option("--config", default="", help="Configuration file created with setup.")
@click.option(
    "--no-check-certificate",
    is_flag=True,
    help="Don't check TLS certificate for authenticity. (development use only)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Print more information.",
)
@click.option("--debug", is_flag=True, help="Print debug information.")
@click.option(
    "--progress/--no-progress", default=True, help="Display file progress information."
)
def download(
    input_: str,
    output: str,
    password: str,
    config: str,
    no_check_certificate: bool,
    verbose: bool,
    debug: bool,
    progress: bool,
) -> None:
    """Download a file from object storage and decrypt it."""
    password = password if password else os.environ.get("ARCHIVE_PASSWORD", "")
    if not validate(input_, output, password, local_input=False):
        sys.exit(-1)

    if progress and debug:
        click.echo("Progress can't be reliably printed with debug information.", err=True)
        click.echo("Progress will not be displayed while debug mode is used.", err=True)

    opts: archive_utility.types.DownloadCommand = {
        "action": "download",
        "input": input_,
        "output": pathlib.Path(output),
        "password": password,
        "config_path": archive_utility.config.get_config_path(config),
        "no_check_certificate": no_check_certificate,
        "progress": progress if not debug else False,
        "debug": debug,
        "verbose": verbose,
    }

    sys.exit(run_command(opts))


@click.group(invoke_without_command=True)
@click.pass_context
def wrap(ctx: click.Context) -> None:
    """Archive - secure file storage."""
    if ctx.invoked_subcommand is None:
        click.echo("action is required.", err=True)
        click.echo(ctx.get_help(), err=True)
        sys.exit(-1)


wrap.add_command(setup)
wrap.add_command(encrypt)
wrap.add_command(decrypt)
wrap.add_command(upload)
wrap.add_command(download)


if __name__ == "__main__":
    wrap()
