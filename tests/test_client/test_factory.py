"""Tests for ClientFactory: options derived from a credential record."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from wskauth.auth.cli import CliTokenManager
from wskauth.auth.iam import IamTokenManager
from wskauth.client import ClientFactory, OpenWhiskClient, api_url
from wskauth.exceptions import MissingAuthError, MissingHostError
from wskauth.models import CredentialRecord, ProviderConfig

MANAGED_HOST = "us-south.functions.cloud.ibm.com"


class TestApiUrl:
    def test_adds_scheme_and_path(self) -> None:
        assert api_url("openwhisk.example.com") == "https://openwhisk.example.com/api/v1/"

    def test_keeps_existing_scheme(self) -> None:
        assert api_url("http://localhost:3233/") == "http://localhost:3233/api/v1/"


class TestStaticOptions:
    def test_api_key_set_and_no_handler(self) -> None:
        options = ClientFactory().build_options(
            CredentialRecord(apihost="h", auth="user:pass", namespace="ns")
        )
        assert options.api == "https://h/api/v1/"
        assert options.api_key == "user:pass"
        assert options.auth_handler is None
        assert options.namespace == "ns"
        assert options.api_version == "v1"

    def test_provider_flags_copied(self) -> None:
        config = ProviderConfig(ignore_certs=True, cert="/c.pem", key="/k.pem")
        options = ClientFactory().build_options(CredentialRecord(apihost="h", auth="u:p"), config)
        assert options.ignore_certs is True
        assert options.cert == "/c.pem"
        assert options.key == "/k.pem"

    def test_ignore_certs_defaults_false(self) -> None:
        options = ClientFactory().build_options(CredentialRecord(apihost="h", auth="u:p"))
        assert options.ignore_certs is False


class TestIamOptions:
    def test_iam_handler(self) -> None:
        record = CredentialRecord(apihost="h", iam_namespace_api_key="iam-key", namespace="ns")
        options = ClientFactory().build_options(record)
        assert isinstance(options.auth_handler, IamTokenManager)
        assert options.auth_handler.iam_apikey == "iam-key"
        assert options.auth_handler.namespace == "ns"
        assert options.api_key is None

    def test_iam_key_wins_over_auth(self) -> None:
        record = CredentialRecord(
            apihost="h", auth="u:p", iam_namespace_api_key="iam-key", namespace="ns"
        )
        options = ClientFactory().build_options(record)
        assert isinstance(options.auth_handler, IamTokenManager)
        assert options.api_key is None

    def test_custom_iam_url(self) -> None:
        record = CredentialRecord(apihost="h", iam_namespace_api_key="k", namespace="ns")
        options = ClientFactory().build_options(record, ProviderConfig(iam_url="https://iam.test/t"))
        assert options.auth_handler.iam_url == "https://iam.test/t"

    def test_build_does_not_exchange(self) -> None:
        record = CredentialRecord(apihost="h", iam_namespace_api_key="k", namespace="ns")
        with patch("wskauth.auth.iam.httpx.post") as mock_post:
            ClientFactory().build(record)
        mock_post.assert_not_called()


class TestCliOptions:
    def test_managed_host_gets_cli_handler(self) -> None:
        options = ClientFactory().build_options(CredentialRecord(apihost=MANAGED_HOST, namespace="ns"))
        assert isinstance(options.auth_handler, CliTokenManager)
        assert options.auth_handler.apihost == MANAGED_HOST
        assert options.api_key is None

    def test_cli_config_path_override(self, tmp_path) -> None:
        config = ProviderConfig(cli_config_path=str(tmp_path / "cfg.json"))
        options = ClientFactory().build_options(CredentialRecord(apihost=MANAGED_HOST), config)
        assert options.auth_handler.config_path == tmp_path / "cfg.json"

    def test_build_does_not_run_cli(self) -> None:
        with patch("wskauth.auth.cli.subprocess.run") as mock_run:
            ClientFactory().build(CredentialRecord(apihost=MANAGED_HOST))
        mock_run.assert_not_called()


class TestApiGateway:
    def test_space_guid_from_static_auth(self) -> None:
        record = CredentialRecord(apihost="h", auth="space-guid:secret", apigw_access_token="gw")
        options = ClientFactory().build_options(record)
        assert options.apigw_token == "gw"
        assert options.apigw_space_guid == "space-guid"

    def test_no_space_guid_with_iam(self) -> None:
        record = CredentialRecord(
            apihost="h",
            auth="space-guid:secret",
            iam_namespace_api_key="k",
            namespace="ns",
            apigw_access_token="gw",
        )
        options = ClientFactory().build_options(record)
        assert options.apigw_token == "gw"
        assert options.apigw_space_guid is None

    def test_no_gateway_token(self) -> None:
        options = ClientFactory().build_options(CredentialRecord(apihost="h", auth="a:b"))
        assert options.apigw_token is None
        assert options.apigw_space_guid is None


class TestBuild:
    def test_returns_client_with_options(self) -> None:
        client = ClientFactory().build(CredentialRecord(apihost="h", auth="u:p"))
        assert isinstance(client, OpenWhiskClient)
        assert client.actions.client.options.api_key == "u:p"

    def test_missing_host(self) -> None:
        with pytest.raises(MissingHostError):
            ClientFactory().build_options(CredentialRecord(auth="u:p"))

    def test_missing_auth(self) -> None:
        with pytest.raises(MissingAuthError):
            ClientFactory().build_options(CredentialRecord(apihost="openwhisk.example.com"))
