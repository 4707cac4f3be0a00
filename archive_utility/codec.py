"""Password based streaming file encryption.

Encrypted files consist of a fixed size header followed by the ciphertext:

    [32-byte salt][16-byte IV][AES-256-CBC ciphertext with PKCS#7 padding]

The key is derived from the password and the salt with PBKDF2-HMAC-SHA256.
The format carries no authentication tag, so the padding check on the final
block is the only indication of a wrong password or corrupted data.
"""

import secrets
import typing

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

import archive_utility.exceptions

# Format constants, changing any of these breaks compatibility with
# previously encrypted files.
SALT_LENGTH: int = 32
IV_LENGTH: int = 16
KEY_LENGTH: int = 32
HEADER_LENGTH: int = SALT_LENGTH + IV_LENGTH
ITERATIONS: int = 1000

CHUNK_SIZE: int = 65536


class Reader(typing.Protocol):
    """Minimal binary reader used by the codec."""

    def read(self, size: int = -1, /) -> bytes: ...


class Writer(typing.Protocol):
    """Minimal binary writer used by the codec."""

    def write(self, data: bytes, /) -> typing.Any: ...

    def flush(self) -> typing.Any: ...


def generate_salt() -> bytes:
    """Generate a fresh random salt."""
    return secrets.token_bytes(SALT_LENGTH)


def derive_key(password: str, salt: bytes) -> bytes:
    """Derive the file key from a password and salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def parse_header(header: bytes) -> tuple[bytes, bytes]:
    """Split an encrypted file header into the salt and the IV."""
    if len(header) < HEADER_LENGTH:
        raise archive_utility.exceptions.FormatError
    return header[:SALT_LENGTH], header[SALT_LENGTH:HEADER_LENGTH]


class Sealer:
    """Incremental encryptor producing the encrypted file format.

    The header must be written before any output of ``update``, and the
    output of ``finalize`` last.
    """

    def __init__(
        self,
        password: str,
        salt: bytes | None = None,
        iv: bytes | None = None,
    ) -> None:
        self.salt = salt if salt is not None else generate_salt()
        self.iv = iv if iv is not None else secrets.token_bytes(IV_LENGTH)

        cipher = Cipher(
            algorithms.AES(derive_key(password, self.salt)),
            modes.CBC(self.iv),
        )
        self._encryptor = cipher.encryptor()
        self._padder = padding.PKCS7(algorithms.AES.block_size).padder()

    @property
    def header(self) -> bytes:
        """Return the plain-text header for the encrypted stream."""
        return self.salt + self.iv

    def update(self, chunk: bytes) -> bytes:
        """Encrypt a chunk of plain-text, returning the finished blocks."""
        return self._encryptor.update(self._padder.update(chunk))

    def finalize(self) -> bytes:
        """Pad and encrypt the remaining plain-text."""
        last = self._padder.finalize()
        return self._encryptor.update(last) + self._encryptor.finalize()


class Opener:
    """Incremental decryptor for the encrypted file format."""

    def __init__(self, password: str, header: bytes) -> None:
        self.salt, self.iv = parse_header(header)

        cipher = Cipher(
            algorithms.AES(derive_key(password, self.salt)),
            modes.CBC(self.iv),
        )
        self._decryptor = cipher.decryptor()
        self._unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()

    def update(self, chunk: bytes) -> bytes:
        """Decrypt a chunk of ciphertext, returning the plain-text known to be final."""
        return self._unpadder.update(self._decryptor.update(chunk))

    def finalize(self) -> bytes:
        """Decrypt the last block and verify its padding."""
        try:
            last = self._decryptor.finalize()
            return self._unpadder.update(last) + self._unpadder.finalize()
        except ValueError as e:
            # Raised both for invalid padding and for a truncated last block
            raise archive_utility.exceptions.DecryptionError from e


def read_exactly(reader: Reader, size: int) -> bytes:
    """Read up to size bytes, only returning less when the stream ends."""
    buffer = bytearray()
    while len(buffer) < size:
        chunk = reader.read(size - len(buffer))
        if not chunk:
            break
        buffer.extend(chunk)
    return bytes(buffer)


def seal_stream(
    reader: Reader,
    writer: Writer,
    password: str,
    bar: typing.Any = None,
) -> int:
    """Encrypt everything from reader into writer, return the plain-text size."""
    sealer = Sealer(password)
    writer.write(sealer.header)

    total: int = 0
    while chunk := reader.read(CHUNK_SIZE):
        writer.write(sealer.update(chunk))
        total += len(chunk)
        if bar:
            bar.update(len(chunk))

    writer.write(sealer.finalize())
    writer.flush()

    return total


def open_stream(
    reader: Reader,
    writer: Writer,
    password: str,
    bar: typing.Any = None,
) -> int:
    """Decrypt everything from reader into writer, return the plain-text size."""
    header = read_exactly(reader, HEADER_LENGTH)
    opener = Opener(password, header)
    if bar:
        bar.update(len(header))

    total: int = 0
    while chunk := reader.read(CHUNK_SIZE):
        content = opener.update(chunk)
        writer.write(content)
        total += len(content)
        if bar:
            bar.update(len(chunk))

    content = opener.finalize()
    writer.write(content)
    writer.flush()

    return total + len(content)
