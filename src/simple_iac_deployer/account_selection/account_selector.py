"""Subscription listing, selection and activation through the Azure CLI."""

from __future__ import annotations

import json
from collections.abc import Sequence

import click

from simple_iac_deployer.deployment_errors import (
    AccountNotFound,
    ActivationFailed,
    AuthenticationFailed,
    NotAuthenticated,
    RunCancelled,
)
from simple_iac_deployer.operator_prompts import Prompter, choose_index
from simple_iac_deployer.run_logging import RunLogger
from simple_iac_deployer.tool_invocation import ToolRunner

from .account_models import Account


class AccountSelector:
    """Resolves and activates the subscription a run deploys into."""

    def __init__(
        self,
        runner: ToolRunner,
        logger: RunLogger,
        *,
        prompter: Prompter | None = None,
        az_binary: str = "az",
    ) -> None:
        self._runner = runner
        self._logger = logger
        self._prompter = prompter
        self._az = az_binary

    def list_accounts(self) -> list[Account]:
        """List accounts, re-authenticating once when no session exists."""
        try:
            return self._list_accounts_once()
        except NotAuthenticated as exc:
            self._logger.warning(f"{exc} Starting interactive login.")
        login = self._runner.run((self._az, "login", "--output", "none"), stream=True)
        if not login.ok:
            raise AuthenticationFailed(f"az login failed: {login.last_error_line()}")
        try:
            return self._list_accounts_once()
        except NotAuthenticated as exc:
            raise AuthenticationFailed(f"Still not authenticated after login: {exc}") from exc

    def select_account(self, explicit_id: str | None = None) -> Account:
        """Resolve the target account and make it the active subscription."""
        accounts = self.list_accounts()
        if explicit_id:
            account = _find_account(accounts, explicit_id)
        else:
            account = self._prompt_for_account(accounts)
        self.activate(account)
        return account

    def activate(self, account: Account) -> None:
        result = self._runner.run((self._az, "account", "set", "--subscription", account.id))
        if not result.ok:
            raise ActivationFailed(
                f"Could not activate subscription {account.display_name} ({account.id}): "
                f"{result.last_error_line()}"
            )
        self._logger.success(f"Active subscription: {account.display_name} ({account.id})")

    def _list_accounts_once(self) -> list[Account]:
        result = self._runner.run((self._az, "account", "list", "--output", "json"))
        if not result.ok:
            raise NotAuthenticated(f"No Azure CLI session ({result.last_error_line()}).")
        try:
            entries = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as exc:
            raise AuthenticationFailed(f"Unreadable account list from az: {exc}") from exc
        if not isinstance(entries, list):
            raise AuthenticationFailed("Unexpected account list format from az.")
        accounts = [Account.from_cli_entry(entry) for entry in entries if isinstance(entry, dict)]
        if not accounts:
            raise NotAuthenticated("No subscriptions are available for the current credential.")
        self._logger.debug(f"Found {len(accounts)} subscription(s)")
        return accounts

    def _prompt_for_account(self, accounts: Sequence[Account]) -> Account:
        if self._prompter is None:
            return _default_account(accounts)
        click.echo("Available subscriptions:")
        for position, account in enumerate(accounts, start=1):
            marker = " (current)" if account.is_default else ""
            click.echo(f"  [{position}] {account.display_name} ({account.id}){marker}")
        index = choose_index(self._prompter, len(accounts), question="Select a subscription")
        if index is None:
            raise RunCancelled("No valid subscription was selected.")
        return accounts[index]


def _default_account(accounts: Sequence[Account]) -> Account:
    for account in accounts:
        if account.is_default:
            return account
    raise AccountNotFound("(current default subscription)")


def _find_account(accounts: Sequence[Account], identifier: str) -> Account:
    for account in accounts:
        if account.id.lower() == identifier.strip().lower():
            return account
    for account in accounts:
        if account.matches(identifier):
            return account
    raise AccountNotFound(identifier)
