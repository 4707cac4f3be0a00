"""Test local encrypt and decrypt operations."""

import unittest
import unittest.mock

import archive_utility.local
import archive_utility.types

import tests.mockups


class TestLocal(tests.mockups.ArchiveUtilTestBase):
    """Class for testing local file operations."""

    def setUp(self):
        """."""
        super().setUp()
        self.encrypted_file = self.tmp_path / "plain.txt.enc"
        self.encrypt_opts: archive_utility.types.EncryptCommand = {
            "action": "encrypt",
            "input": self.input_file,
            "output": self.encrypted_file,
            "password": "test-password",
            "progress": False,
            "debug": False,
            "verbose": False,
        }
        self.decrypt_opts: archive_utility.types.DecryptCommand = {
            "action": "decrypt",
            "input": self.encrypted_file,
            "output": self.output_file,
            "password": "test-password",
            "progress": False,
            "debug": False,
            "verbose": False,
        }

        self.mock_echo = unittest.mock.Mock()
        self.patch_echo = unittest.mock.patch(
            "archive_utility.local.click.echo", self.mock_echo
        )

    def test_encrypt_decrypt_round_trip(self):
        """Test that an encrypted file decrypts back to the original."""
        self.assertEqual(
            archive_utility.local.wrap_encrypt_exceptions(self.encrypt_opts), 0
        )
        self.assertEqual(
            archive_utility.local.wrap_decrypt_exceptions(self.decrypt_opts), 0
        )

        self.assertNotEqual(
            self.encrypted_file.read_bytes()[48:], self.input_file.read_bytes()
        )
        self.assertEqual(self.output_file.read_bytes(), self.input_file.read_bytes())

    def test_encrypt_decrypt_with_progress(self):
        """Test that the progress bar is used when requested."""
        self.encrypt_opts["progress"] = True
        self.decrypt_opts["progress"] = True

        mock_bar = unittest.mock.MagicMock()
        mock_progressbar = unittest.mock.MagicMock()
        mock_progressbar.return_value.__enter__.return_value = mock_bar
        patch_progressbar = unittest.mock.patch(
            "archive_utility.local.click.progressbar", mock_progressbar
        )

        with patch_progressbar:
            archive_utility.local.wrap_encrypt_exceptions(self.encrypt_opts)
            archive_utility.local.wrap_decrypt_exceptions(self.decrypt_opts)

        mock_progressbar.assert_any_call(
            length=12000, label=f"Encrypting {self.input_file}"
        )
        mock_bar.update.assert_any_call(12000)
        self.assertEqual(self.output_file.read_bytes(), self.input_file.read_bytes())

    def test_decrypt_truncated_file(self):
        """Test that a truncated file fails with a format error and no output."""
        self.encrypted_file.write_bytes(b"too-short")

        with self.patch_echo:
            ret = archive_utility.local.wrap_decrypt_exceptions(self.decrypt_opts)

        self.assertEqual(ret, 1)
        self.assertFalse(self.output_file.exists())
        self.mock_echo.assert_called_once()

    def test_decrypt_truncated_file_keeps_existing_output(self):
        """Test that a format error leaves an existing output file untouched."""
        self.encrypted_file.write_bytes(b"short")
        self.output_file.write_bytes(b"existing-content")

        with self.patch_echo:
            ret = archive_utility.local.wrap_decrypt_exceptions(self.decrypt_opts)

        self.assertEqual(ret, 1)
        self.assertEqual(self.output_file.read_bytes(), b"existing-content")

    def test_decrypt_corrupted_file(self):
        """Test that a corrupted file fails and its partial output is removed."""
        archive_utility.local.wrap_encrypt_exceptions(self.encrypt_opts)
        self.encrypted_file.write_bytes(self.encrypted_file.read_bytes()[:-1])

        with self.patch_echo:
            ret = archive_utility.local.wrap_decrypt_exceptions(self.decrypt_opts)

        self.assertEqual(ret, 1)
        self.assertFalse(self.output_file.exists())
        self.mock_echo.assert_any_call("Check that the password is correct.", err=True)

    def test_encrypt_unhandled_exception(self):
        """Test that unhandled exceptions are re-raised after cleanup."""
        mock_seal = unittest.mock.Mock(side_effect=OSError("test-failure"))
        patch_seal = unittest.mock.patch(
            "archive_utility.local.archive_utility.codec.seal_stream", mock_seal
        )
        mock_common_echo = unittest.mock.Mock()
        patch_common_echo = unittest.mock.patch(
            "archive_utility.common.click.echo", mock_common_echo
        )

        with patch_seal, patch_common_echo, self.assertRaises(OSError):
            archive_utility.local.wrap_encrypt_exceptions(self.encrypt_opts)

        self.assertFalse(self.encrypted_file.exists())
        mock_common_echo.assert_any_call(
            "Program encountered an unhandled exception.", err=True
        )

    def test_encrypt_keyboard_interrupt(self):
        """Test that an interrupted encryption removes the partial output."""
        mock_seal = unittest.mock.Mock(side_effect=KeyboardInterrupt)
        patch_seal = unittest.mock.patch(
            "archive_utility.local.archive_utility.codec.seal_stream", mock_seal
        )

        with patch_seal, self.patch_echo:
            ret = archive_utility.local.wrap_encrypt_exceptions(self.encrypt_opts)

        self.assertEqual(ret, 0)
        self.assertFalse(self.encrypted_file.exists())
