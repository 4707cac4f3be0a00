"""Local file encrypt and decrypt operations."""

import typing

import click

import archive_utility.codec
import archive_utility.common
import archive_utility.exceptions
import archive_utility.types


def process_file_encrypt(
    opts: archive_utility.types.EncryptCommand,
    bar: typing.Any,
) -> int:
    """Encrypt the input file into the output file."""
    with opts["input"].open("rb") as f, opts["output"].open("wb") as out_f:
        archive_utility.codec.seal_stream(f, out_f, opts["password"], bar)
    return 0


def process_file_decrypt(
    opts: archive_utility.types.DecryptCommand,
    bar: typing.Any,
) -> int:
    """Decrypt the input file into the output file."""
    with opts["input"].open("rb") as f:
        # An existing output file is only replaced once the header is valid
        archive_utility.codec.parse_header(
            archive_utility.codec.read_exactly(f, archive_utility.codec.HEADER_LENGTH)
        )
        f.seek(0)
        with opts["output"].open("wb") as out_f:
            archive_utility.codec.open_stream(f, out_f, opts["password"], bar)
    return 0


def encrypt(opts: archive_utility.types.EncryptCommand) -> int:
    """Encrypt a local file."""
    archive_utility.common.conditional_echo_debug(
        opts, f"Encrypting {opts['input']} to {opts['output']}"
    )
    size: int = opts["input"].stat().st_size
    ret = 0
    if opts["progress"]:
        # Can't annotate progress bar without using click internal vars
        with click.progressbar(  # type: ignore
            length=size, label=f"Encrypting {opts['input']}"
        ) as bar:
            ret = process_file_encrypt(opts, bar)
    else:
        ret = process_file_encrypt(opts, None)

    archive_utility.common.conditional_echo_verbose(
        opts, f"Encrypted {opts['input']} to {opts['output']}"
    )
    return ret


def decrypt(opts: archive_utility.types.DecryptCommand) -> int:
    """Decrypt a local file."""
    archive_utility.common.conditional_echo_debug(
        opts, f"Decrypting {opts['input']} to {opts['output']}"
    )
    size: int = opts["input"].stat().st_size
    ret = 0
    if opts["progress"]:
        # Can't annotate progress bar without using click internal vars
        with click.progressbar(  # type: ignore
            length=size, label=f"Decrypting {opts['input']}"
        ) as bar:
            ret = process_file_decrypt(opts, bar)
    else:
        ret = process_file_decrypt(opts, None)

    archive_utility.common.conditional_echo_verbose(
        opts, f"Decrypted {opts['input']} to {opts['output']}"
    )
    return ret


def wrap_encrypt_exceptions(opts: archive_utility.types.EncryptCommand) -> int:
    """Wrap the encrypt operation with required exception handling."""
    exc: typing.Any = None
    ret = 0
    try:
        ret = encrypt(opts)
    except KeyboardInterrupt:
        click.echo("Received a keyboard interrupt, aborting...", err=True)
        archive_utility.common.discard_partial_output(opts["output"])
        return 0
    except Exception as e:
        archive_utility.common.discard_partial_output(opts["output"])
        exc = e
    finally:
        # Unhandled exceptions are re-raised after the support banner
        if exc is not None:
            archive_utility.common.echo_unhandled_exception()
            raise exc

    return ret


def wrap_decrypt_exceptions(opts: archive_utility.types.DecryptCommand) -> int:
    """Wrap the decrypt operation with required exception handling."""
    exc: typing.Any = None
    ret = 0
    try:
        ret = decrypt(opts)
    except KeyboardInterrupt:
        click.echo("Received a keyboard interrupt, aborting...", err=True)
        archive_utility.common.discard_partial_output(opts["output"])
        return 0
    except archive_utility.exceptions.FormatError:
        click.echo(
            f"Could not decrypt {opts['input']}, the file is too short to be encrypted.",
            err=True,
        )
        ret = 1
    except archive_utility.exceptions.DecryptionError:
        click.echo(f"Could not decrypt {opts['input']}.", err=True)
        click.echo("Check that the password is correct.", err=True)
        archive_utility.common.discard_partial_output(opts["output"])
        ret = 1
    except Exception as e:
        archive_utility.common.discard_partial_output(opts["output"])
        exc = e
    finally:
        if exc is not None:
            archive_utility.common.echo_unhandled_exception()
            raise exc

    return ret
