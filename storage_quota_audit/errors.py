# Error types for the storage quota audit


class AuditError(Exception):
    """Base class for every failure the audit knows how to report"""


class ConfigError(AuditError):
    """Invalid configuration values"""


class AuthError(AuditError):
    """Could not obtain an Azure credential"""


class FetchError(AuditError):
    """Listing subscriptions or storage accounts failed"""


class ContextError(AuditError):
    """Could not switch to a subscription"""


class MetricError(AuditError):
    """Blob capacity metric could not be read for an account"""


class NoMatchingSubscriptions(AuditError):
    """Subscription selection produced nothing to audit"""
