# Per-subscription blob capacity collection

import logging

from .errors import AuditError
from .models import FetchResult, SkippedItem, SubscriptionUsage, UsageRecord
from .utils import bytes_to_gb, format_bytes

logger = logging.getLogger(__name__)


def attempt(operation, *args):
    """Run a gateway call once, capturing audit errors as a FetchResult"""
    try:
        return FetchResult.success(operation(*args))
    except AuditError as e:
        return FetchResult.failure(e)


def fetch_account_usage(gateway, account):
    """Blob capacity of one account in GB, as a FetchResult"""
    result = attempt(gateway.get_blob_capacity_bytes, account)
    if not result.ok:
        return result
    capacity_bytes = result.value
    logger.debug(f"{account.name}: {format_bytes(capacity_bytes)}")
    return FetchResult.success(bytes_to_gb(capacity_bytes))


def collect_subscription_usage(gateway, subscription, threshold_gb, config):
    """Build a UsageRecord for every non-excluded account in a subscription.

    Context switch and account listing failures skip the whole
    subscription; a failed metric read skips only that account.
    """
    usage = SubscriptionUsage()

    context = attempt(gateway.set_active_subscription, subscription.id)
    if not context.ok:
        logger.warning(f"Skipping subscription {subscription.name}: {context.error}")
        usage.skipped.append(SkippedItem("subscription", subscription.name, subscription.id, str(context.error)))
        return usage

    listing = attempt(gateway.list_storage_accounts)
    if not listing.ok:
        logger.warning(f"Skipping subscription {subscription.name}: {listing.error}")
        usage.skipped.append(SkippedItem("subscription", subscription.name, subscription.id, str(listing.error)))
        return usage

    for account in listing.value:
        if config.is_excluded(account.name):
            logger.info(f"Excluding storage account {account.name}")
            continue

        used = fetch_account_usage(gateway, account)
        if not used.ok:
            logger.warning(f"Skipping storage account {account.name} in {subscription.name}: {used.error}")
            usage.skipped.append(SkippedItem("account", subscription.name, account.name, str(used.error)))
            continue

        record = UsageRecord.create(subscription, account, used.value, threshold_gb)
        status = "EXCEEDS" if record.exceeds else "ok"
        logger.info(f"{account.name}: {record.used_gb:.2f} GB / {threshold_gb} GB ({status})")
        usage.records.append(record)

    return usage
