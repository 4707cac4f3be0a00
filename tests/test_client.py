"""Unit tests for the client functions."""

import os
import unittest
import unittest.mock

import archive_utility.client
import archive_utility.exceptions

import tests.mockups


class TestOpenSession(tests.mockups.ArchiveUtilTestBase):
    """Test opening a storage session."""

    def test_open_session_s3(self):
        """Test that an S3 session carries the parsed connection string."""
        ret = archive_utility.client.open_session(self.test_config, True)

        self.assertEqual(ret["backend"], "s3")
        self.assertEqual(ret["endpoint"], "https://test-endpoint")
        self.assertEqual(ret["access_key"], "test-key")
        self.assertEqual(ret["secret_key"], "test-secret")
        self.assertEqual(ret["container"], "test-container")
        self.assertTrue(ret["no_check_certificate"])
        self.assertIsNone(ret["client"])
        self.assertIsNone(ret["s3_client"])

    def test_open_session_swift_strips_trailing_slash(self):
        """Test that a swift session is opened with a normalized endpoint."""
        self.test_config["connection_string"] = (
            "Backend=swift;Endpoint=https://swift/v1/AUTH_test/;Token=test-token"
        )
        ret = archive_utility.client.open_session(self.test_config)

        self.assertEqual(ret["backend"], "swift")
        self.assertEqual(ret["endpoint"], "https://swift/v1/AUTH_test")
        self.assertEqual(ret["token"], "test-token")

    def test_open_session_should_raise_without_connection_string(self):
        """Test that open_session raises without a connection string."""
        self.test_config["connection_string"] = ""
        with self.assertRaises(archive_utility.exceptions.NoConnectionString):
            archive_utility.client.open_session(self.test_config)

    def test_open_session_should_raise_without_container(self):
        """Test that open_session raises without a container."""
        self.test_config["container"] = ""
        with self.assertRaises(archive_utility.exceptions.NoContainer):
            archive_utility.client.open_session(self.test_config)

    def test_open_session_should_raise_without_endpoint(self):
        """Test that open_session raises without an endpoint."""
        self.test_config["connection_string"] = "AccessKey=a;SecretKey=b"
        with self.assertRaises(archive_utility.exceptions.NoEndpoint):
            archive_utility.client.open_session(self.test_config)

    def test_open_session_should_raise_without_ec2_key(self):
        """Test that open_session raises without an EC2 key."""
        self.test_config["connection_string"] = "Endpoint=https://e;SecretKey=b"
        with self.assertRaises(archive_utility.exceptions.NoEc2Key):
            archive_utility.client.open_session(self.test_config)

    def test_open_session_should_raise_without_ec2_secret(self):
        """Test that open_session raises without an EC2 secret."""
        self.test_config["connection_string"] = "Endpoint=https://e;AccessKey=a"
        with self.assertRaises(archive_utility.exceptions.NoEc2Secret):
            archive_utility.client.open_session(self.test_config)

    def test_open_session_should_raise_without_swift_token(self):
        """Test that open_session raises without a swift token."""
        self.test_config["connection_string"] = "Backend=swift;Endpoint=https://e"
        with self.assertRaises(archive_utility.exceptions.NoToken):
            archive_utility.client.open_session(self.test_config)


class TestLoadSession(tests.mockups.ArchiveUtilTestBase):
    """Test loading the session from configuration."""

    def setUp(self):
        """."""
        super().setUp()
        self.mock_echo = unittest.mock.Mock()
        self.patch_echo = unittest.mock.patch(
            "archive_utility.client.click.echo", self.mock_echo
        )
        self.patch_env = unittest.mock.patch.dict(
            os.environ,
            {"ARCHIVE_CONNECTION_STRING": "", "ARCHIVE_CONTAINER": ""},
        )

    def test_load_session_reports_missing_setup(self):
        """Test that a missing configuration is reported as setup required."""
        with self.patch_echo, self.patch_env:
            ret = archive_utility.client.load_session(self.test_upload_opts)

        self.assertIsNone(ret)
        self.mock_echo.assert_any_call("Setup required.", err=True)

    def test_load_session_reports_invalid_connection_string(self):
        """Test that a broken connection string is reported."""
        self.test_upload_opts["config_path"].write_text("broken\ntest-container\n")
        with self.patch_echo, self.patch_env:
            ret = archive_utility.client.load_session(self.test_upload_opts)

        self.assertIsNone(ret)
        self.mock_echo.assert_called_once_with(
            "Configured connection string could not be parsed.", err=True
        )

    def test_load_session_reports_unreadable_configuration(self):
        """Test that a configuration file that is not text is reported."""
        self.test_upload_opts["config_path"].write_bytes(b"\xff\xfe\x00broken\n")
        with self.patch_echo, self.patch_env:
            ret = archive_utility.client.load_session(self.test_upload_opts)

        self.assertIsNone(ret)
        config_path = self.test_upload_opts["config_path"]
        self.mock_echo.assert_called_once_with(
            f"Configuration file {config_path} could not be read.", err=True
        )

    def test_load_session_success(self):
        """Test that a valid configuration opens a session."""
        self.test_upload_opts["config_path"].write_text(
            self.test_config["connection_string"] + "\ntest-container\n"
        )
        with self.patch_echo, self.patch_env:
            ret = archive_utility.client.load_session(self.test_upload_opts)

        self.assertIsNotNone(ret)
        assert ret is not None
        self.assertEqual(ret["container"], "test-container")
        self.mock_echo.assert_not_called()


class TestSessionClients(tests.mockups.ArchiveUtilTestBase):
    """Test opening the session clients."""

    def setUp(self):
        """."""
        super().setUp()
        self.mock_client_session = unittest.mock.Mock(
            return_value=self.mock_handler("test-client-session")
        )
        self.patch_client_session = unittest.mock.patch(
            "archive_utility.client.aiohttp.ClientSession", self.mock_client_session
        )
        self.mock_s3_client = unittest.mock.Mock(
            return_value=self.mock_handler("test-s3-client")
        )
        self.mock_boto_session = unittest.mock.Mock(
            return_value=unittest.mock.Mock(client=self.mock_s3_client)
        )
        self.patch_boto_session = unittest.mock.patch(
            "archive_utility.client.aioboto3.Session", self.mock_boto_session
        )

    async def test_session_clients_s3(self):
        """Test that an S3 session gets both clients."""
        with self.patch_client_session, self.patch_boto_session:
            async with archive_utility.client.session_clients(
                self.test_session
            ) as session:
                self.assertEqual(session["client"], "test-client-session")
                self.assertEqual(session["s3_client"], "test-s3-client")

        self.mock_client_session.assert_called_once_with(raise_for_status=True)
        self.mock_s3_client.assert_called_once_with(
            service_name="s3",
            endpoint_url="https://test-endpoint",
            region_name=None,
            aws_access_key_id="test-key",
            aws_secret_access_key="test-secret",
            verify=None,
        )
        self.assertIsNone(self.test_session["client"])
        self.assertIsNone(self.test_session["s3_client"])

    async def test_session_clients_swift(self):
        """Test that a swift session only gets the HTTP client."""
        self.test_session["backend"] = "swift"
        with self.patch_client_session, self.patch_boto_session:
            async with archive_utility.client.session_clients(
                self.test_session
            ) as session:
                self.assertEqual(session["client"], "test-client-session")
                self.assertIsNone(session["s3_client"])

        self.mock_boto_session.assert_not_called()
