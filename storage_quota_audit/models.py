# Data structures passed between the audit stages

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .errors import AuditError


@dataclass(frozen=True)
class Subscription:
    """Azure subscription as seen by the audit"""
    id: str
    name: str
    tags: Optional[Mapping[str, str]] = None

    def get_tag(self, tag_name):
        """Return the tag value, or None when the tag (or the tag map) is missing"""
        if not self.tags:
            return None
        return self.tags.get(tag_name)

    def has_tag(self, tag_name):
        return bool(self.tags) and tag_name in self.tags


@dataclass(frozen=True)
class StorageAccount:
    name: str
    resource_group: str
    location: str
    id: str = ""


@dataclass(frozen=True)
class UsageRecord:
    """Blob capacity of one storage account compared against its threshold.

    Build instances through ``create`` so that ``exceeds`` is always
    evaluated from the usage and threshold stored alongside it.
    """
    subscription_name: str
    subscription_id: str
    account_name: str
    resource_group: str
    location: str
    used_gb: float
    threshold_gb: int
    exceeds: bool

    @classmethod
    def create(cls, subscription, account, used_gb, threshold_gb):
        return cls(
            subscription_name=subscription.name,
            subscription_id=subscription.id,
            account_name=account.name,
            resource_group=account.resource_group,
            location=account.location,
            used_gb=used_gb,
            threshold_gb=threshold_gb,
            exceeds=used_gb > threshold_gb,
        )


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single best-effort call: a value or a typed failure"""
    value: Any = None
    error: Optional[AuditError] = None

    @classmethod
    def success(cls, value):
        return cls(value=value)

    @classmethod
    def failure(cls, error):
        return cls(error=error)

    @property
    def ok(self):
        return self.error is None


@dataclass(frozen=True)
class SkippedItem:
    scope: str  # "subscription" or "account"
    subscription_name: str
    item_name: str
    reason: str


@dataclass
class SubscriptionUsage:
    """Records and skips produced while collecting one subscription"""
    records: List[UsageRecord] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)


@dataclass
class AuditResult:
    """Aggregated output of a full audit run.

    ``exceeding_records`` only ever receives records that were also
    appended to ``all_records``.
    """
    all_records: List[UsageRecord] = field(default_factory=list)
    exceeding_records: List[UsageRecord] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    subscriptions_processed: int = 0

    def add_record(self, record):
        self.all_records.append(record)
        if record.exceeds:
            self.exceeding_records.append(record)
