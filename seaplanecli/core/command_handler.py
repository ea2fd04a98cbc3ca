"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), drives the resource
request facades and renders their results through the UserInterface. This
is the only layer that turns errors into user facing messages and exit
codes.
"""

import logging
import shlex
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from seaplanecli.core.services.locks_request import LocksRequest
from seaplanecli.core.services.metadata_request import MetadataRequest
from seaplanecli.core.services.restrict_request import RestrictRequest
from seaplanecli.domain.errors import (
    AuthenticationRejected,
    InsecureUrlRejected,
    MissingCredentialInput,
    ResourceConflict,
    SeaplaneError,
    TransportFailure,
)
from seaplanecli.domain.interfaces.request_family import RequestSender
from seaplanecli.domain.interfaces.user_interface import UserInterface
from seaplanecli.domain.models.common import decode_b64, display_decoded, encode_b64
from seaplanecli.domain.models.request import Page
from seaplanecli.domain.models.restrict import RestrictionDetails
from seaplanecli.infrastructure.config.settings import SeaplaneSettings, read_api_key, save_api_key
from seaplanecli.infrastructure.identity.token_client import CredentialProvider
from seaplanecli.infrastructure.resilience.api_retry import AuthRetryExecutor

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

OUTPUT_FORMATS = ("table", "json")


def hint_for(error: Exception) -> Optional[str]:
    """A short suggestion shown below an error message, if one applies."""
    if isinstance(error, MissingCredentialInput):
        return "pass --api-key, set SEAPLANE_API_KEY or run 'seaplane account login'"
    if isinstance(error, AuthenticationRejected):
        return "check that your API key is valid, or store a new one with 'seaplane account login --force'"
    if isinstance(error, InsecureUrlRejected):
        return "use an https:// URL or set danger_zone.allow_insecure_urls in the configuration"
    if isinstance(error, ResourceConflict):
        return "the resource is held or modified by another client, try again later"
    if isinstance(error, TransportFailure):
        return "check your network connection and the configured service URLs"
    return None


def read_value_argument(value: str, already_encoded: bool = False) -> bytes:
    """Turns a VALUE argument into raw bytes.

    ``@-`` reads stdin, ``@<path>`` reads a file, anything else is taken
    literally. With ``already_encoded`` the result is base64 decoded.
    """
    if value == "@-":
        raw = sys.stdin.buffer.read()
    elif value.startswith("@"):
        raw = Path(value[1:]).read_bytes()
    else:
        raw = value.encode("utf-8")
    if already_encoded:
        return decode_b64(raw.decode("ascii").strip())
    return raw


class CommandHandler:
    """Handles incoming commands and delegates to the resource facades."""

    def __init__(
        self,
        ui: UserInterface,
        settings: SeaplaneSettings,
        credential_provider: CredentialProvider,
        sender: RequestSender,
        executor: Optional[AuthRetryExecutor] = None,
        output_format: str = "table",
    ):
        """Initializes the CommandHandler with its collaborators."""
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"unknown output format '{output_format}'")
        self.ui = ui
        self.settings = settings
        self.credential_provider = credential_provider
        self.sender = sender
        self.executor = executor or AuthRetryExecutor()
        self.output_format = output_format

    # --- Plumbing ---

    def run(self, description: str, action: Callable[[], Optional[int]]) -> int:
        """Runs ``action`` and maps its failure onto an error message and exit code.

        ``action`` may return its own exit code; None means success.
        """
        try:
            status = action()
        except SeaplaneError as e:
            logger.debug(f"{description} failed: {type(e).__name__}: {e}", exc_info=True)
            self.ui.display_error(str(e), hint=hint_for(e))
            return EXIT_FAILURE
        except (ValueError, OSError) as e:
            # Bad user input: invalid base64, unreadable @file, unwritable config.
            logger.debug(f"{description} failed: {type(e).__name__}: {e}", exc_info=True)
            self.ui.display_error(f"{description} failed: {e}")
            return EXIT_FAILURE
        return EXIT_SUCCESS if status is None else status

    def _facade_kwargs(self, base_url: Optional[str]) -> Dict[str, Any]:
        return {
            "executor": self.executor,
            "base_url": base_url,
            "transport": self.settings.transport_options(),
        }

    def metadata_request(self) -> MetadataRequest:
        return MetadataRequest(
            self.settings.api_key, self.credential_provider, self.sender,
            **self._facade_kwargs(self.settings.metadata_url),
        )

    def restrict_request(self) -> RestrictRequest:
        return RestrictRequest(
            self.settings.api_key, self.credential_provider, self.sender,
            **self._facade_kwargs(self.settings.restrict_url or self.settings.metadata_url),
        )

    def locks_request(self) -> LocksRequest:
        return LocksRequest(
            self.settings.api_key, self.credential_provider, self.sender,
            **self._facade_kwargs(self.settings.locks_url or self.settings.metadata_url),
        )

    def _render(self, columns: List[str], records: List[Dict[str, Any]], title: Optional[str] = None) -> None:
        if self.output_format == "json":
            self.ui.display_json(records)
        else:
            self.ui.display_table(columns, records, title=title)

    def _render_one(self, columns: List[str], record: Dict[str, Any]) -> None:
        if self.output_format == "json":
            self.ui.display_json(record)
        else:
            self.ui.display_table(columns, [record])

    def _report_more(self, page: Page, flags: Dict[str, str], base64: bool, plain: Tuple[str, ...] = ()) -> None:
        """Tells the user which options continue a single-page listing.

        Cursor values come back base64 encoded. They are shown decoded, the
        way the listing command accepts them, unless ``base64`` is set or a
        value is not text; then the encoded form is shown with ``--base64``.
        Names in ``plain`` are never encoded on the wire.
        """
        if not page.has_more:
            return
        encoded = base64 or not all(
            _is_text(value) for name, value in page.next_cursor.items() if name not in plain
        )
        arguments = []
        for name, value in page.next_cursor.items():
            shown = value if encoded or name in plain else display_decoded(value)
            arguments.append(f"{flags[name]} {shlex.quote(shown)}")
        if encoded:
            arguments.append("--base64")
        self.ui.display_info(f"More results are available, continue with {' '.join(arguments)}")

    # --- account ---

    def handle_account_token(self, json_output: bool = False) -> int:
        """Prints a fresh access token, optionally with tenant and subdomain."""
        def action() -> None:
            request = self.credential_provider.token_request(self.settings.api_key)
            if json_output:
                self.ui.display_json(request.access_token_json().to_json())
            else:
                self.ui.display_output(request.access_token())

        return self.run("account token", action)

    def handle_account_login(self, force: bool = False) -> int:
        """Reads an API key from the user and stores it in the configuration file."""
        config_file = self.settings.config_file

        def action() -> Optional[int]:
            if read_api_key(config_file) and not force:
                self.ui.display_error(
                    f"an API key is already stored in {config_file}",
                    hint="use --force to overwrite it",
                )
                return EXIT_FAILURE
            key = self.ui.get_prompt("Enter your API key: ").strip()
            if not key:
                raise MissingCredentialInput()
            save_api_key(config_file, key)
            self.ui.display_info(f"Saved API key to {config_file}")
            return None

        return self.run("account login", action)

    # --- metadata ---

    def handle_metadata_get(self, key: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.metadata_request()
            request.set_key(key, already_encoded=base64)
            kv = request.get_value()
            if self.output_format == "json":
                self.ui.display_json(kv.to_json(decode=not base64))
            else:
                self.ui.display_output(kv.value if base64 else display_decoded(kv.value))

        return self.run("metadata get", action)

    def handle_metadata_set(self, key: str, value: str, base64: bool = False) -> int:
        def action() -> None:
            raw = read_value_argument(value, already_encoded=base64)
            request = self.metadata_request()
            request.set_key(key, already_encoded=base64)
            request.put_value(raw)
            self.ui.display_info("Success")

        return self.run("metadata set", action)

    def handle_metadata_delete(self, key: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.metadata_request()
            request.set_key(key, already_encoded=base64)
            request.delete_value()
            self.ui.display_info(f"Deleted {key}")

        return self.run("metadata delete", action)

    def handle_metadata_list(
        self,
        directory: Optional[str] = None,
        from_key: Optional[str] = None,
        single_page: bool = False,
        base64: bool = False,
    ) -> int:
        def action() -> None:
            request = self.metadata_request()
            if directory:
                request.set_directory(directory, already_encoded=base64)
            if from_key:
                request.set_from(from_key, already_encoded=base64)
            if single_page:
                page = request.get_page()
                items = page.items
            else:
                page = None
                items = request.get_all_pages()
            self._render(["key", "value"], [kv.to_json(decode=not base64) for kv in items])
            if page is not None:
                self._report_more(page, {"from": "--from"}, base64)

        return self.run("metadata list", action)

    # --- restrict ---

    def handle_restrict_get(self, api: str, directory: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.restrict_request()
            request.set_api(api)
            request.set_directory(directory, already_encoded=base64)
            restriction = request.get_restriction()
            self._render_one(_RESTRICTION_COLUMNS, _restriction_record(restriction, base64, self.output_format))

        return self.run("restrict get", action)

    def handle_restrict_set(self, api: str, directory: str, details: RestrictionDetails, base64: bool = False) -> int:
        def action() -> None:
            request = self.restrict_request()
            request.set_api(api)
            request.set_directory(directory, already_encoded=base64)
            request.set_restriction(details)
            self.ui.display_info("Success")

        return self.run("restrict set", action)

    def handle_restrict_delete(self, api: str, directory: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.restrict_request()
            request.set_api(api)
            request.set_directory(directory, already_encoded=base64)
            request.delete_restriction()
            self.ui.display_info(f"Deleted restriction on {api}/{directory}")

        return self.run("restrict delete", action)

    def handle_restrict_list(
        self,
        api: Optional[str] = None,
        from_api: Optional[str] = None,
        from_dir: Optional[str] = None,
        single_page: bool = False,
        base64: bool = False,
    ) -> int:
        def action() -> None:
            request = self.restrict_request()
            if api:
                request.set_api(api)
            if from_api:
                request.set_from_api(from_api)
            if from_dir:
                request.set_from_dir(from_dir, already_encoded=base64)
            if single_page:
                page = request.get_page()
                items = page.items
            else:
                page = None
                items = request.get_all_pages()
            records = [_restriction_record(r, base64, self.output_format) for r in items]
            self._render(_RESTRICTION_COLUMNS, records)
            if page is not None:
                self._report_more(page, {"from_api": "--from-api", "from_dir": "--from-dir"}, base64, plain=("from_api",))

        return self.run("restrict list", action)

    # --- locks ---

    def handle_locks_status(self, name: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.locks_request()
            request.set_name(name, already_encoded=base64)
            info = request.get_lock_info()
            self._render_one(_LOCK_COLUMNS, _lock_record(info, base64, self.output_format))

        return self.run("locks status", action)

    def handle_locks_acquire(self, name: str, ttl: int, client_id: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.locks_request()
            request.set_name(name, already_encoded=base64)
            held = request.acquire(ttl, client_id)
            self._render_one(["name", "id", "sequencer"], held.to_json(decode=not base64))

        return self.run("locks acquire", action)

    def handle_locks_release(self, name: str, lock_id: str, base64: bool = False) -> int:
        def action() -> None:
            request = self.locks_request()
            request.set_name(name, already_encoded=base64)
            request.release(lock_id)
            self.ui.display_info(f"Released {name}")

        return self.run("locks release", action)

    def handle_locks_renew(self, name: str, lock_id: str, ttl: int, base64: bool = False) -> int:
        def action() -> None:
            request = self.locks_request()
            request.set_name(name, already_encoded=base64)
            request.renew(lock_id, ttl)
            self.ui.display_info(f"Renewed {name} for {ttl}s")

        return self.run("locks renew", action)

    def handle_locks_list(
        self,
        directory: Optional[str] = None,
        from_name: Optional[str] = None,
        single_page: bool = False,
        base64: bool = False,
    ) -> int:
        def action() -> None:
            request = self.locks_request()
            if directory:
                request.set_directory(directory, already_encoded=base64)
            if from_name:
                request.set_from(from_name, already_encoded=base64)
            if single_page:
                page = request.get_page()
                items = page.items
            else:
                page = None
                items = request.get_all_pages()
            self._render(_LOCK_COLUMNS, [_lock_record(info, base64, self.output_format) for info in items])
            if page is not None:
                self._report_more(page, {"from": "--from"}, base64)

        return self.run("locks list", action)


_RESTRICTION_COLUMNS = [
    "api", "directory", "state",
    "regions_allowed", "regions_denied", "providers_allowed", "providers_denied",
]

_LOCK_COLUMNS = ["name", "id", "ttl", "client-id", "ip"]


def _restriction_record(restriction, base64: bool, output_format: str) -> Dict[str, Any]:
    record = restriction.to_json(decode=not base64)
    if output_format == "json":
        return record
    flat = {key: value for key, value in record.items() if key != "details"}
    flat.update(record["details"])
    return flat


def _lock_record(info, base64: bool, output_format: str) -> Dict[str, Any]:
    record = info.to_json(decode=not base64)
    if output_format == "json":
        return record
    flat = {key: value for key, value in record.items() if key != "info"}
    flat.update(record["info"])
    return flat


def _is_text(encoded: str) -> bool:
    """True when ``encoded`` decodes to UTF-8 text that encodes back to the same value."""
    try:
        raw = decode_b64(encoded)
        raw.decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return False
    return encode_b64(raw) == encoded
