from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import yaml

from conftest import API_KEY, METADATA_URL, FakeSeaplane, error_response, unauthorized
from seaplanecli.core.command_handler import EXIT_FAILURE, EXIT_SUCCESS, CommandHandler, hint_for, read_value_argument
from seaplanecli.domain.errors import AuthenticationRejected, MissingCredentialInput, ResourceNotFound
from seaplanecli.domain.interfaces.user_interface import UserInterface
from seaplanecli.domain.models.restrict import RestrictionDetails
from seaplanecli.infrastructure.config.settings import SeaplaneSettings


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def settings(tmp_path: Path):
    return SeaplaneSettings(api_key=API_KEY, metadata_url=METADATA_URL, config_file=tmp_path / "config.yaml")


@pytest.fixture
def command_handler(mock_ui, settings, credential_provider, sender, executor):
    """Fixture to create CommandHandler backed by the fake services."""
    return CommandHandler(
        ui=mock_ui,
        settings=settings,
        credential_provider=credential_provider,
        sender=sender,
        executor=executor,
    )


@pytest.fixture
def json_handler(mock_ui, settings, credential_provider, sender, executor):
    return CommandHandler(mock_ui, settings, credential_provider, sender, executor, output_format="json")


def test_account_token_plain(command_handler: CommandHandler, mock_ui: MagicMock):
    assert command_handler.handle_account_token() == EXIT_SUCCESS
    mock_ui.display_output.assert_called_once_with("token-1")


def test_account_token_json(command_handler: CommandHandler, mock_ui: MagicMock):
    assert command_handler.handle_account_token(json_output=True) == EXIT_SUCCESS
    mock_ui.display_json.assert_called_once_with({"token": "token-1", "tenant": "tnt-1", "subdomain": "tnt-1-sub"})


def test_missing_api_key_is_reported_with_hint(mock_ui, credential_provider, sender, tmp_path):
    handler = CommandHandler(mock_ui, SeaplaneSettings(config_file=tmp_path / "c.yaml"), credential_provider, sender)

    assert handler.handle_metadata_get("foo") == EXIT_FAILURE

    message = mock_ui.display_error.call_args.args[0]
    assert message == "no API key was provided"
    assert "SEAPLANE_API_KEY" in mock_ui.display_error.call_args.kwargs["hint"]


def test_metadata_get_prints_decoded_value(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"key": "Zm9v", "value": "YmFy"}))

    assert command_handler.handle_metadata_get("foo") == EXIT_SUCCESS

    mock_ui.display_output.assert_called_once_with("bar")
    assert fake_seaplane.resource_calls[0].url.path == "/v1/config/base64:Zm9v"


def test_metadata_get_base64_keeps_encoding(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"key": "Zm9v", "value": "YmFy"}))
    assert command_handler.handle_metadata_get("Zm9v", base64=True) == EXIT_SUCCESS
    mock_ui.display_output.assert_called_once_with("YmFy")


def test_metadata_get_not_found(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(error_response(404, "Not Found", "no such key"))

    assert command_handler.handle_metadata_get("foo") == EXIT_FAILURE

    mock_ui.display_error.assert_called_once_with("Not Found - no such key", hint=None)


def test_metadata_set_reads_file(command_handler, mock_ui, fake_seaplane: FakeSeaplane, tmp_path: Path):
    value_file = tmp_path / "value.bin"
    value_file.write_bytes(b"\x00binary")
    fake_seaplane.queue(httpx.Response(200))

    assert command_handler.handle_metadata_set("foo", f"@{value_file}") == EXIT_SUCCESS

    request = fake_seaplane.resource_calls[0]
    assert request.method == "PUT"
    assert request.content == b"\x00binary"
    mock_ui.display_info.assert_called_once_with("Success")


def test_metadata_set_with_unreadable_file(command_handler, mock_ui, tmp_path: Path):
    assert command_handler.handle_metadata_set("foo", f"@{tmp_path / 'missing'}") == EXIT_FAILURE
    assert mock_ui.display_error.call_args.args[0].startswith("metadata set failed:")


def test_invalid_base64_input(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    assert command_handler.handle_metadata_delete("not base64!", base64=True) == EXIT_FAILURE
    assert fake_seaplane.resource_calls == []


def test_metadata_list_json(json_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(
        httpx.Response(200, json={"kvs": [{"key": "YQ", "value": "MQ"}], "next_key": "Yg"}),
        httpx.Response(200, json={"kvs": [{"key": "Yg", "value": "Mg"}]}),
    )

    assert json_handler.handle_metadata_list() == EXIT_SUCCESS

    mock_ui.display_json.assert_called_once_with([{"key": "a", "value": "1"}, {"key": "b", "value": "2"}])


def test_metadata_list_single_page_reports_cursor(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"kvs": [{"key": "YQ", "value": "MQ"}], "next_key": "Yg"}))

    assert command_handler.handle_metadata_list("dir", single_page=True) == EXIT_SUCCESS

    assert len(fake_seaplane.resource_calls) == 1
    columns, rows = mock_ui.display_table.call_args.args
    assert columns == ["key", "value"]
    assert rows == [{"key": "a", "value": "1"}]
    mock_ui.display_info.assert_called_once_with("More results are available, continue with --from b")


def test_metadata_list_single_page_base64_cursor(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"kvs": [], "next_key": "Yg"}))

    assert command_handler.handle_metadata_list(single_page=True, base64=True) == EXIT_SUCCESS

    mock_ui.display_info.assert_called_once_with("More results are available, continue with --from Yg --base64")


def test_binary_cursor_is_reported_encoded(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    # "_w" is the single byte 0xff, which is not text.
    fake_seaplane.queue(httpx.Response(200, json={"infos": [], "next": "_w"}))

    assert command_handler.handle_locks_list(single_page=True) == EXIT_SUCCESS

    mock_ui.display_info.assert_called_once_with("More results are available, continue with --from _w --base64")


def test_restrict_list_cursor_keeps_api_plain(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"restrictions": [], "next_api": "locks", "next_key": "bXkgZGly"}))

    assert command_handler.handle_restrict_list(single_page=True) == EXIT_SUCCESS

    mock_ui.display_info.assert_called_once_with(
        "More results are available, continue with --from-api locks --from-dir 'my dir'"
    )


def test_listing_everything_reports_no_cursor(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={"kvs": [{"key": "YQ", "value": "MQ"}]}))

    assert command_handler.handle_metadata_list(single_page=True) == EXIT_SUCCESS

    mock_ui.display_info.assert_not_called()


def test_restrict_set_sends_details(command_handler, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200))
    details = RestrictionDetails(regions_allowed=["XE"], providers_denied=["AWS"])

    assert command_handler.handle_restrict_set("config", "foo", details) == EXIT_SUCCESS

    request = fake_seaplane.resource_calls[0]
    assert request.url.path == "/v1/restrict/config/base64:Zm9v/"
    assert b'"regions_allowed": ["XE"]' in request.content or b'"regions_allowed":["XE"]' in request.content


def test_restrict_get_table_flattens_details(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(httpx.Response(200, json={
        "api": "config", "directory": "Zm9v", "details": {"regions_allowed": ["XE"]}, "state": "enforced",
    }))

    assert command_handler.handle_restrict_get("config", "foo") == EXIT_SUCCESS

    rows = mock_ui.display_table.call_args.args[1]
    assert rows[0]["directory"] == "foo"
    assert rows[0]["regions_allowed"] == ["XE"]
    assert rows[0]["state"] == "enforced"


def test_locks_acquire_conflict_has_hint(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(error_response(409, "Conflict", "lock already held"))

    assert command_handler.handle_locks_acquire("my-lock", 30, "client-a") == EXIT_FAILURE

    assert mock_ui.display_error.call_args.args[0] == "Conflict - lock already held"
    assert mock_ui.display_error.call_args.kwargs["hint"]


def test_locks_status_after_token_refresh(command_handler, mock_ui, fake_seaplane: FakeSeaplane):
    fake_seaplane.queue(
        unauthorized(),
        httpx.Response(200, json={"name": "bXktbG9jaw", "id": "aWQ", "info": {"ttl": 5, "client-id": "c", "ip": "1.2.3.4"}}),
    )

    assert command_handler.handle_locks_status("my-lock") == EXIT_SUCCESS

    rows = mock_ui.display_table.call_args.args[1]
    assert rows[0]["name"] == "my-lock"
    assert rows[0]["client-id"] == "c"


def test_account_login_saves_key(command_handler, mock_ui, settings):
    mock_ui.get_prompt.return_value = "  sk-new-key \n"

    assert command_handler.handle_account_login() == EXIT_SUCCESS

    saved = yaml.safe_load(settings.config_file.read_text())
    assert saved == {"account": {"api_key": "sk-new-key"}}


def test_account_login_refuses_to_overwrite_without_force(command_handler, mock_ui, settings):
    settings.config_file.write_text("account:\n  api_key: old\n")
    mock_ui.get_prompt.return_value = "sk-new-key"

    assert command_handler.handle_account_login() == EXIT_FAILURE
    mock_ui.get_prompt.assert_not_called()

    assert command_handler.handle_account_login(force=True) == EXIT_SUCCESS
    assert yaml.safe_load(settings.config_file.read_text())["account"]["api_key"] == "sk-new-key"


def test_account_login_rejects_empty_key(command_handler, mock_ui):
    mock_ui.get_prompt.return_value = ""
    assert command_handler.handle_account_login() == EXIT_FAILURE


def test_unknown_output_format(mock_ui, settings, credential_provider, sender):
    with pytest.raises(ValueError):
        CommandHandler(mock_ui, settings, credential_provider, sender, output_format="xml")


def test_hint_for():
    assert hint_for(MissingCredentialInput())
    assert "account login" in hint_for(AuthenticationRejected(401, "Unauthorized"))
    assert hint_for(ResourceNotFound(404, "Not Found")) is None


def test_read_value_argument(tmp_path: Path):
    assert read_value_argument("plain") == b"plain"
    assert read_value_argument("YmFy", already_encoded=True) == b"bar"
    path = tmp_path / "v"
    path.write_bytes(b"from file")
    assert read_value_argument(f"@{path}") == b"from file"
