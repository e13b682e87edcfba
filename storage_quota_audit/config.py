# Run configuration for the storage quota audit

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from .errors import ConfigError

DEFAULT_TAG_NAME = "StorageQuotaGB"
DEFAULT_THRESHOLD_GB = 1024
DEFAULT_METRIC_LOOKBACK_HOURS = 24
DEFAULT_LOG_FILE = "storage_quota_audit.log"


class SelectionMode(Enum):
    """How subscriptions are chosen for the audit."""
    SPECIFIC_IDS = "specific"
    ALL_SUBSCRIPTIONS = "all"
    TAGGED_ONLY = "tagged"


@dataclass(frozen=True)
class AuditConfig:
    """Immutable settings handed to every stage of the audit."""
    tag_name: str = DEFAULT_TAG_NAME
    default_threshold_gb: int = DEFAULT_THRESHOLD_GB
    selection_mode: SelectionMode = SelectionMode.TAGGED_ONLY
    subscription_ids: FrozenSet[str] = frozenset()
    all_subscriptions_requested: bool = False
    excluded_account_names: FrozenSet[str] = frozenset()
    metric_lookback_hours: int = DEFAULT_METRIC_LOOKBACK_HOURS
    excel_output: Optional[str] = None
    log_file: Optional[str] = DEFAULT_LOG_FILE
    verbose: bool = False

    def __post_init__(self):
        if not self.tag_name:
            raise ConfigError("tag name must not be empty")
        if self.default_threshold_gb < 0:
            raise ConfigError("default threshold must be >= 0 GB")
        if self.metric_lookback_hours <= 0:
            raise ConfigError("metric lookback must be > 0 hours")
        # Azure storage account names are lowercase
        object.__setattr__(self, 'excluded_account_names',
                           frozenset(name.lower() for name in self.excluded_account_names))

    @property
    def conflicting_selection(self):
        """Both specific ids and all subscriptions were asked for"""
        return bool(self.subscription_ids) and self.all_subscriptions_requested

    def is_excluded(self, account_name):
        return account_name.lower() in self.excluded_account_names

    @classmethod
    def from_args(cls, args):
        """Build a config from parsed command line arguments"""
        subscription_ids = frozenset(args.subscription_ids or [])
        if subscription_ids:
            mode = SelectionMode.SPECIFIC_IDS
        elif args.all_subscriptions:
            mode = SelectionMode.ALL_SUBSCRIPTIONS
        else:
            mode = SelectionMode.TAGGED_ONLY

        return cls(
            tag_name=args.tag_name,
            default_threshold_gb=args.default_threshold_gb,
            selection_mode=mode,
            subscription_ids=subscription_ids,
            all_subscriptions_requested=args.all_subscriptions,
            excluded_account_names=frozenset(args.exclude_accounts or []),
            metric_lookback_hours=args.metric_lookback_hours,
            excel_output=args.excel_output,
            log_file=None if args.no_log_file else args.log_file,
            verbose=args.verbose,
        )
