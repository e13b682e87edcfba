# Subscription selection and per-subscription threshold resolution

import logging

from .config import SelectionMode
from .errors import NoMatchingSubscriptions
from .utils import parse_int_or_default

logger = logging.getLogger(__name__)


def select_subscriptions(subscriptions, config):
    """Pick the subscriptions to audit.

    Specific ids win over "all subscriptions", which wins over the
    default of keeping only subscriptions carrying the threshold tag.
    Raises NoMatchingSubscriptions when nothing is left.
    """
    if config.conflicting_selection:
        logger.warning("Both specific subscription ids and all subscriptions were requested; "
                       "using the specific ids only")

    if config.selection_mode == SelectionMode.SPECIFIC_IDS and config.subscription_ids:
        selected = [s for s in subscriptions if s.id in config.subscription_ids]
        found_ids = {s.id for s in selected}
        for sub_id in sorted(config.subscription_ids - found_ids):
            logger.warning(f"Subscription '{sub_id}' not found among accessible subscriptions")
        description = f"{len(config.subscription_ids)} specified ids"
    elif config.selection_mode == SelectionMode.ALL_SUBSCRIPTIONS:
        selected = list(subscriptions)
        description = "all accessible subscriptions"
    else:
        selected = [s for s in subscriptions if s.has_tag(config.tag_name)]
        description = f"subscriptions tagged '{config.tag_name}'"

    if not selected:
        raise NoMatchingSubscriptions(f"No subscriptions matched selection: {description}")

    logger.info(f"Selected {len(selected)} of {len(subscriptions)} subscriptions ({description})")
    return selected


def resolve_threshold(subscription, tag_name, default_gb):
    """Threshold in GB from the subscription tag, else the default"""
    raw_value = subscription.get_tag(tag_name)
    if raw_value is None:
        return default_gb

    threshold, parsed = parse_int_or_default(raw_value, default_gb)
    if not parsed:
        logger.warning(f"Tag '{tag_name}' on subscription {subscription.name} has non-integer value "
                       f"'{raw_value}'; using default threshold {default_gb} GB")
    return threshold
