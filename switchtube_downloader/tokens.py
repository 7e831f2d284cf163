"""Access-token management backed by the system keyring."""

from __future__ import annotations

import getpass
from typing import Optional

import keyring
import requests
from keyring.errors import KeyringError, PasswordDeleteError
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from . import prompt
from .config import DEFAULT_BASE_URL
from .logging_utils import get_logger

SERVICE_NAME = "SwitchTube"
CREATE_TOKEN_PATH = "access_tokens"
PROFILE_API = "api/v1/profiles/me"

MASK_THRESHOLD = 10
MASK_VISIBLE = 5

console = Console(highlight=False)


class TokenError(Exception):
    pass


class NoTokenError(TokenError):
    pass


class TokenEmptyError(TokenError):
    pass


class TokenInvalidError(TokenError):
    pass


class TokenAlreadyExistsError(TokenError):
    pass


def mask_token(token: str) -> str:
    if len(token) <= MASK_THRESHOLD:
        return "*" * len(token)
    hidden = "*" * (len(token) - MASK_THRESHOLD)
    return token[:MASK_VISIBLE] + hidden + token[-MASK_VISIBLE:]


class TokenManager:
    """Stores one SwitchTube token per OS user in the system keyring."""

    def __init__(
        self,
        service: str = SERVICE_NAME,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.service = service
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self._log = get_logger()

    @property
    def username(self) -> str:
        return getpass.getuser()

    # Public API
    def get(self) -> str:
        """Return the stored token after checking it against the API."""
        token = self._stored()
        if token is None:
            raise NoTokenError("no token found in keyring - run 'token set' first")
        self.check(token)
        return token

    def set(self) -> None:
        self._confirm_replace()
        self._show_instructions()

        token = prompt.ask("\nEnter your access token: ")
        if not token:
            raise TokenEmptyError("token cannot be empty")

        rprint("\n[cyan][INFO][/cyan] Validating token with SwitchTube API...")
        try:
            self.check(token)
        except TokenError:
            rprint("\n[red][ERROR][/red] Token validation failed")
            self._show_info(token, valid=False)
            raise

        try:
            keyring.set_password(self.service, self.username, token)
        except KeyringError as e:
            raise TokenError(f"failed to store token: {e}") from e
        self._show_info(token, valid=True)
        rprint("[green][SUCCESS][/green] Token is valid and successfully stored in keyring")

    def delete(self) -> None:
        if not prompt.confirm("Are you sure you want to delete the stored token?"):
            rprint("[yellow][CANCELLED][/yellow] Token deletion cancelled")
            return
        try:
            keyring.delete_password(self.service, self.username)
        except PasswordDeleteError as e:
            raise NoTokenError(f"no token found in keyring for {self.service}") from e
        except KeyringError as e:
            raise TokenError(f"failed to delete token: {e}") from e
        rprint("[green][SUCCESS][/green] Token successfully deleted from keyring")

    def validate(self) -> None:
        rprint("\n[cyan][INFO][/cyan] Validating token...")
        try:
            token = self.get()
        except TokenInvalidError:
            self._show_info(self._stored() or "", valid=False)
            raise
        self._show_info(token, valid=True)

    def check(self, token: str) -> None:
        """Raise :class:`TokenInvalidError` unless the API accepts ``token``."""
        url = self.base_url + PROFILE_API
        self._log.debug("Validating token against %s", url)
        try:
            resp = self.session.get(
                url,
                headers={"Authorization": f"Token {token}", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TokenError(f"failed to validate token: {e}") from e
        resp.close()
        if resp.status_code != 200:
            raise TokenInvalidError("token authentication failed")

    # Internal helpers
    def _stored(self) -> Optional[str]:
        try:
            return keyring.get_password(self.service, self.username)
        except KeyringError as e:
            raise TokenError(f"failed to retrieve token: {e}") from e

    def _confirm_replace(self) -> None:
        try:
            existing = self.get()
        except NoTokenError:
            return
        except TokenInvalidError:
            self._show_info(self._stored() or "", valid=False)
        else:
            self._show_info(existing, valid=True)

        console.print()
        if not prompt.confirm("Do you want to replace it?"):
            rprint("[yellow][CANCELLED][/yellow] Operation cancelled")
            raise TokenAlreadyExistsError("token already exists in keyring")

    def _show_instructions(self) -> None:
        table = Table(title="Token Creation Instructions", show_header=False)
        table.add_column()
        table.add_row(f"[bold]1.[/bold] Visit: {self.base_url}{CREATE_TOKEN_PATH}")
        table.add_row("[bold]2.[/bold] Click 'Create New Token'")
        table.add_row("[bold]3.[/bold] Copy the generated token")
        table.add_row("[bold]4.[/bold] Paste it below")
        console.print()
        console.print(table)

    def _show_info(self, token: str, valid: bool) -> None:
        status = "[green]Valid[/green]" if valid else "[red]Invalid[/red]"
        table = Table(title="Token Information", show_header=False)
        table.add_column(justify="right")
        table.add_column(justify="left")
        table.add_row("Service", self.service)
        table.add_row("User", self.username)
        table.add_row("Token", mask_token(token))
        table.add_row("Length", f"{len(token)} characters")
        table.add_row("Status", status)
        console.print(table)


__all__ = [
    "TokenManager",
    "TokenError",
    "NoTokenError",
    "TokenEmptyError",
    "TokenInvalidError",
    "TokenAlreadyExistsError",
    "mask_token",
]
