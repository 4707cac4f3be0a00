"""Local configuration for object storage access."""

import os
import pathlib

import click

import archive_utility.common
import archive_utility.exceptions
import archive_utility.types

CONFIG_FILENAME: str = "archive.conf"

SUPPORTED_BACKENDS: set[str] = {"s3", "swift"}

# Connection string keys, matched case-insensitively
CONNECTION_STRING_KEYS: dict[str, str] = {
    "backend": "backend",
    "endpoint": "endpoint",
    "accesskey": "access_key",
    "secretkey": "secret_key",
    "region": "region",
    "token": "token",
}


def get_config_path(path: str = "") -> pathlib.Path:
    """Get the location of the configuration file."""
    if path:
        return pathlib.Path(path)
    if os.environ.get("ARCHIVE_CONFIG_FILE", ""):
        return pathlib.Path(os.environ["ARCHIVE_CONFIG_FILE"])
    return pathlib.Path.home() / CONFIG_FILENAME


def load_config(path: pathlib.Path) -> archive_utility.types.StorageConfig:
    """Read the connection string and container name from the configuration file."""
    lines: list[str] = []
    if path.is_file():
        with path.open("r", encoding="utf-8") as f:
            lines = f.read().splitlines()

    connection_string = lines[0].strip() if len(lines) > 0 else ""
    container = lines[1].strip() if len(lines) > 1 else ""

    return {
        "connection_string": (
            connection_string
            if connection_string
            else os.environ.get(
                "ARCHIVE_CONNECTION_STRING",
                "",
            )
        ),
        "container": (
            container
            if container
            else os.environ.get(
                "ARCHIVE_CONTAINER",
                "",
            )
        ),
    }


def write_config(
    path: pathlib.Path, config: archive_utility.types.StorageConfig
) -> None:
    """Write the connection string and container name to the configuration file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(config["connection_string"] + "\n")
        f.write(config["container"] + "\n")
    # The connection string contains credentials
    path.chmod(0o600)


def parse_connection_string(value: str) -> archive_utility.types.StorageConnection:
    """Parse a ``Key=Value;Key=Value`` connection string."""
    ret: archive_utility.types.StorageConnection = {
        "backend": "s3",
        "endpoint": "",
        "access_key": "",
        "secret_key": "",
        "region": "",
        "token": "",
    }

    for part in value.split(";"):
        if not part.strip():
            continue
        if "=" not in part:
            raise archive_utility.exceptions.InvalidConnectionString
        key, _, val = part.partition("=")
        key = key.strip().lower()
        if key not in CONNECTION_STRING_KEYS:
            raise archive_utility.exceptions.InvalidConnectionString
        ret[CONNECTION_STRING_KEYS[key]] = val.strip()  # type: ignore

    ret["backend"] = ret["backend"].lower()
    if ret["backend"] not in SUPPORTED_BACKENDS:
        raise archive_utility.exceptions.UnknownBackend

    return ret


def setup(opts: archive_utility.types.SetupCommand) -> int:
    """Store the object storage configuration."""
    archive_utility.common.conditional_echo_debug(
        opts, f"Writing configuration to {opts['config_path']}"
    )
    write_config(
        opts["config_path"],
        {
            "connection_string": opts["connection_string"],
            "container": opts["container"],
        },
    )
    click.echo("Setup completed.")
    return 0
