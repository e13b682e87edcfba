# Main audit flow and command line entry point

import argparse
import logging
import sys

from .collector import collect_subscription_usage
from .config import (
    DEFAULT_LOG_FILE, DEFAULT_METRIC_LOOKBACK_HOURS, DEFAULT_TAG_NAME, DEFAULT_THRESHOLD_GB, AuditConfig
)
from .errors import AuditError, ConfigError
from .models import AuditResult
from .reporting import export_excel_report, render_report
from .selection import resolve_threshold, select_subscriptions
from .utils import banner, setup_logging

logger = logging.getLogger(__name__)


def run_audit(config, gateway):
    """Authenticate, select subscriptions and collect usage for each one.

    AuthError, FetchError (subscription listing) and NoMatchingSubscriptions
    propagate to the caller; everything else is logged and skipped.
    """
    gateway.authenticate()
    subscriptions = gateway.list_subscriptions()
    selected = select_subscriptions(subscriptions, config)

    result = AuditResult()
    for subscription in selected:
        print(f"\n📦 AUDITING SUBSCRIPTION: {subscription.name} ({subscription.id})")
        print("-" * 60)
        threshold_gb = resolve_threshold(subscription, config.tag_name, config.default_threshold_gb)
        logger.info(f"Threshold for {subscription.name}: {threshold_gb} GB")

        usage = collect_subscription_usage(gateway, subscription, threshold_gb, config)
        for record in usage.records:
            result.add_record(record)
        result.skipped.extend(usage.skipped)
        result.subscriptions_processed += 1

    logger.info(f"Audited {len(result.all_records)} storage accounts across "
                f"{result.subscriptions_processed} subscriptions; "
                f"{len(result.exceeding_records)} exceed their threshold")
    return result


def build_parser():
    parser = argparse.ArgumentParser(
        description="Report Azure storage accounts whose blob capacity exceeds a per-subscription threshold",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Subscription selection (first match wins):
  --subscription-ids sub1 sub2     Only these subscriptions
  --all-subscriptions              Every accessible subscription
  (default)                        Subscriptions carrying the threshold tag

Examples:
  storage-quota-audit
  storage-quota-audit --all-subscriptions --default-threshold-gb 500
  storage-quota-audit --tag-name {DEFAULT_TAG_NAME} --exclude-accounts logsacct backupacct
  storage-quota-audit --excel-output quota_report.xlsx
        """
    )
    parser.add_argument("--tag-name", default=DEFAULT_TAG_NAME,
                        help=f"Subscription tag holding the threshold in GB (default: {DEFAULT_TAG_NAME})")
    parser.add_argument("--default-threshold-gb", type=int, default=DEFAULT_THRESHOLD_GB,
                        help=f"Threshold used when the tag is missing or invalid (default: {DEFAULT_THRESHOLD_GB})")

    # Not mutually exclusive: specific ids take precedence with a warning
    parser.add_argument("--subscription-ids", nargs="+", metavar="SUB_ID",
                        help="Audit only these subscription IDs")
    parser.add_argument("--all-subscriptions", action="store_true",
                        help="Audit all accessible subscriptions")

    parser.add_argument("--exclude-accounts", nargs="+", metavar="ACCOUNT",
                        help="Storage account names to leave out of the audit")
    parser.add_argument("--metric-lookback-hours", type=int, default=DEFAULT_METRIC_LOOKBACK_HOURS,
                        help="How far back to look for a BlobCapacity datapoint")
    parser.add_argument("--excel-output", metavar="PATH", help="Also write the tables to an Excel workbook")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help="Log file path")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None, gateway=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = AuditConfig.from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    setup_logging(logging.DEBUG if config.verbose else logging.INFO, config.log_file)

    print("\n" + banner("AZURE STORAGE QUOTA AUDIT"))
    print(f"Threshold tag: {config.tag_name}   Default threshold: {config.default_threshold_gb} GB")
    print(f"Subscription selection: {config.selection_mode.value}")
    if config.excluded_account_names:
        print(f"Excluded accounts: {', '.join(sorted(config.excluded_account_names))}")

    if gateway is None:
        from .gateway import AzureStorageGateway
        gateway = AzureStorageGateway(metric_lookback_hours=config.metric_lookback_hours)

    try:
        result = run_audit(config, gateway)
    except AuditError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print("\n" + banner("AUDIT FAILED"))
        sys.exit(1)

    print("\n" + render_report(result))

    if config.excel_output:
        export_excel_report(result, config.excel_output)

    print("\n" + banner("AUDIT COMPLETED"))
    sys.exit(0)
