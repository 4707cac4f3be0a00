"""Archive utility exceptions."""


class FormatError(Exception):
    """Encrypted stream was too short to contain the salt and IV header."""


class DecryptionError(Exception):
    """Encrypted stream could not be decrypted (wrong password or corrupted data)."""


class NoConnectionString(Exception):
    """No connection string was configured for object storage."""


class InvalidConnectionString(Exception):
    """Configured connection string could not be parsed."""


class UnknownBackend(Exception):
    """Connection string referred to an unsupported storage backend."""


class NoContainer(Exception):
    """No container was configured."""


class NoEndpoint(Exception):
    """No object storage endpoint was provided in the connection string."""


class NoEc2Key(Exception):
    """Using S3, but no EC2 key was provided."""


class NoEc2Secret(Exception):
    """Using S3, but no EC2 secret was provided."""


class NoToken(Exception):
    """Using Swift, but no token was provided."""


class NoClient(Exception):
    """For some reason the session didn't have a ClientSession available."""


class NoS3Client(Exception):
    """For some reason the session didn't have a S3Client available."""


class NoContainerAccess(Exception):
    """Could not access the required container."""


class ContainerCreationFailed(Exception):
    """Could not access or create the required container for upload."""


class NoBlob(Exception):
    """Requested blob does not exist in the container."""
