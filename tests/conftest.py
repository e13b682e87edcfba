"""
Shared fixtures: an in-memory stand-in for the Azure gateway.
"""

import pytest

from storage_quota_audit.config import AuditConfig
from storage_quota_audit.errors import ContextError, MetricError
from storage_quota_audit.models import StorageAccount, Subscription

GB = 1024 ** 3


class FakeGateway:
    """Serves canned subscriptions, accounts and capacities.

    ``accounts`` maps subscription id to a list of StorageAccount or an
    exception to raise; ``capacities`` maps account name to bytes or an
    exception to raise.
    """

    def __init__(self, subscriptions=(), accounts=None, capacities=None,
                 auth_error=None, list_error=None, context_failures=()):
        self.subscriptions = list(subscriptions)
        self.accounts = accounts or {}
        self.capacities = capacities or {}
        self.auth_error = auth_error
        self.list_error = list_error
        self.context_failures = set(context_failures)
        self.active = None
        self.calls = []

    def authenticate(self):
        self.calls.append(("authenticate",))
        if self.auth_error:
            raise self.auth_error
        return object()

    def list_subscriptions(self):
        self.calls.append(("list_subscriptions",))
        if self.list_error:
            raise self.list_error
        return list(self.subscriptions)

    def set_active_subscription(self, subscription_id):
        self.calls.append(("set_active_subscription", subscription_id))
        if subscription_id in self.context_failures:
            raise ContextError(f"cannot select {subscription_id}")
        self.active = subscription_id

    def list_storage_accounts(self):
        self.calls.append(("list_storage_accounts", self.active))
        accounts = self.accounts.get(self.active, [])
        if isinstance(accounts, Exception):
            raise accounts
        return list(accounts)

    def get_blob_capacity_bytes(self, account):
        self.calls.append(("get_blob_capacity_bytes", account.name))
        value = self.capacities.get(account.name)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise MetricError(f"no data for {account.name}")
        return value


def make_account(name, resource_group="rg-storage", location="westeurope"):
    return StorageAccount(
        name=name,
        resource_group=resource_group,
        location=location,
        id=f"/subscriptions/x/resourceGroups/{resource_group}/providers/Microsoft.Storage/storageAccounts/{name}",
    )


@pytest.fixture
def config():
    return AuditConfig(tag_name="quota", default_threshold_gb=10, log_file=None)


@pytest.fixture
def tagged_subscription():
    return Subscription(id="sub-1", name="Production", tags={"quota": "10"})


