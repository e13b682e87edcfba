# Azure access for the storage quota audit: credentials, subscriptions,
# storage accounts and blob capacity metrics

import logging
from datetime import datetime, timedelta, timezone

from azure.core.exceptions import AzureError
from azure.identity import AzureCliCredential, DefaultAzureCredential
from azure.mgmt.monitor import MonitorManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.storage import StorageManagementClient
from azure.mgmt.subscription import SubscriptionClient

from .errors import AuthError, ContextError, FetchError, MetricError
from .models import StorageAccount, Subscription

logger = logging.getLogger(__name__)

ARM_SCOPE = "https://management.azure.com/.default"
BLOB_CAPACITY_METRIC = "BlobCapacity"
BLOB_SERVICE_NAMESPACE = "Microsoft.Storage/storageAccounts/blobServices"


def resource_group_from_id(resource_id):
    """Extract the resource group name from an ARM resource id"""
    if not resource_id:
        return ""
    parts = resource_id.split('/')
    for i, part in enumerate(parts[:-1]):
        if part.lower() == 'resourcegroups':
            return parts[i + 1]
    return ""


def latest_average(metrics_response):
    """Most recent non-null average across all returned timeseries, or None"""
    for metric in metrics_response.value or []:
        for timeseries in metric.timeseries or []:
            for data in reversed(timeseries.data or []):
                if data.average is not None:
                    return data.average
    return None


class AzureStorageGateway:
    """Thin wrapper around the Azure SDK clients used by the audit.

    Every SDK failure is converted into one of the audit error types so
    callers never need to know about azure.core exceptions.
    """

    def __init__(self, metric_lookback_hours=24, credential=None):
        self.metric_lookback_hours = metric_lookback_hours
        self.credential = credential
        self.subscription_id = None
        self.storage_client = None
        self.monitor_client = None

    def authenticate(self):
        """Get a working credential, preferring the Azure CLI login"""
        if self.credential is not None:
            return self.credential

        failures = []
        for credential_class in (AzureCliCredential, DefaultAzureCredential):
            try:
                credential = credential_class()
                credential.get_token(ARM_SCOPE)
                logger.info(f"Using {credential_class.__name__}")
                self.credential = credential
                return credential
            except AzureError as e:
                logger.warning(f"{credential_class.__name__} login failed: {e}")
                failures.append(f"{credential_class.__name__}: {e}")

        raise AuthError("Azure authentication failed (" + "; ".join(failures) + ")")

    def list_subscriptions(self):
        """Get all accessible, enabled subscriptions"""
        try:
            credential = self._require_credential()
            subscription_client = SubscriptionClient(credential)
            subscriptions = []
            for sub in subscription_client.subscriptions.list():
                state = getattr(sub, 'state', None)
                if state and state.lower() != 'enabled':
                    logger.info(f"Ignoring subscription {sub.display_name} in state {state}")
                    continue
                subscriptions.append(Subscription(
                    id=sub.subscription_id,
                    name=sub.display_name,
                    tags=self._read_subscription_tags(credential, sub.subscription_id),
                ))
        except (AzureError, AttributeError, TypeError) as e:
            raise FetchError(f"Error listing subscriptions: {e}") from e

        logger.info(f"Found {len(subscriptions)} accessible subscriptions")
        return subscriptions

    def set_active_subscription(self, subscription_id):
        """Point the storage and monitor clients at another subscription"""
        try:
            credential = self._require_credential()
            self.storage_client = StorageManagementClient(credential, subscription_id)
            self.monitor_client = MonitorManagementClient(credential, subscription_id)
        except (AzureError, ValueError) as e:
            self.subscription_id = None
            raise ContextError(f"Could not switch to subscription {subscription_id}: {e}") from e
        self.subscription_id = subscription_id

    def list_storage_accounts(self):
        """Get all storage accounts from the active subscription"""
        if self.storage_client is None:
            raise FetchError("No active subscription selected")
        try:
            accounts = [
                StorageAccount(
                    name=account.name,
                    resource_group=resource_group_from_id(account.id),
                    location=account.location,
                    id=account.id,
                )
                for account in self.storage_client.storage_accounts.list()
            ]
        except (AzureError, AttributeError, TypeError) as e:
            raise FetchError(f"Error listing storage accounts in subscription {self.subscription_id}: {e}") from e

        logger.info(f"Found {len(accounts)} storage accounts in subscription {self.subscription_id}")
        return accounts

    def get_blob_capacity_bytes(self, account):
        """Latest average BlobCapacity of an account's blob service, in bytes"""
        if self.monitor_client is None:
            raise MetricError("No active subscription selected")

        end = datetime.now(timezone.utc)
        start = end - timedelta(hours=self.metric_lookback_hours)
        timespan = f"{start.strftime('%Y-%m-%dT%H:%M:%SZ')}/{end.strftime('%Y-%m-%dT%H:%M:%SZ')}"
        try:
            response = self.monitor_client.metrics.list(
                resource_uri=f"{account.id}/blobServices/default",
                timespan=timespan,
                interval="PT1H",
                metricnames=BLOB_CAPACITY_METRIC,
                aggregation="Average",
                metricnamespace=BLOB_SERVICE_NAMESPACE,
            )
        except AzureError as e:
            raise MetricError(f"Error retrieving {BLOB_CAPACITY_METRIC} for {account.name}: {e}") from e

        try:
            average = latest_average(response)
            if average is not None:
                return int(average)
        except (AttributeError, TypeError, ValueError) as e:
            raise MetricError(f"Malformed {BLOB_CAPACITY_METRIC} response for {account.name}: {e}") from e

        raise MetricError(f"No {BLOB_CAPACITY_METRIC} data for {account.name} "
                          f"in the last {self.metric_lookback_hours} hours")

    def _read_subscription_tags(self, credential, subscription_id):
        """Tags set on the subscription itself, or None when they cannot be read"""
        try:
            resource_client = ResourceManagementClient(credential, subscription_id)
            tags_resource = resource_client.tags.get_at_scope(scope=f"/subscriptions/{subscription_id}")
            tags = tags_resource.properties.tags if tags_resource.properties else None
        except (AzureError, AttributeError, TypeError) as e:
            logger.warning(f"Could not read tags for subscription {subscription_id}: {e}")
            return None
        return dict(tags or {})

    def _require_credential(self):
        if self.credential is None:
            raise AuthError("Not authenticated; call authenticate() first")
        return self.credential
