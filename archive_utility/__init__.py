"""CLI utility for password based file encryption and object storage archival.

The tool can either be used to encrypt and decrypt files locally, or as an
upload/download utility that encrypts the file contents on the fly before
they are written to object storage.
"""

__name__ = "archive_utility"
__version__ = "0.1.0"
__author__ = "Archive Utility Developers"
__license__ = "MIT License"
