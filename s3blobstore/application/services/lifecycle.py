"""Reconciliation of the bucket's soft-delete expiration rule."""

from collections.abc import Hashable

from minio.commonconfig import ENABLED, Filter, Tag
from minio.lifecycleconfig import Expiration, LifecycleConfig, Rule

from s3blobstore.domain.value_objects.configuration import DEFAULT_EXPIRATION_IN_DAYS

# The one rule on the bucket owned by the blob store
LIFECYCLE_EXPIRATION_RULE_ID = "Expire soft-deleted blobstore objects"

# Tag applied to both objects of a soft-deleted blob
DELETED_TAG_KEY = "deleted"
DELETED_TAG_VALUE = "true"
DELETED_TAGS = {DELETED_TAG_KEY: DELETED_TAG_VALUE}


def make_expiration_rule(expiration_days: int = DEFAULT_EXPIRATION_IN_DAYS) -> Rule:
    """Rule expiring objects tagged as soft-deleted after ``expiration_days``."""
    return Rule(
        ENABLED,
        rule_filter=Filter(tag=Tag(DELETED_TAG_KEY, DELETED_TAG_VALUE)),
        rule_id=LIFECYCLE_EXPIRATION_RULE_ID,
        expiration=Expiration(days=expiration_days),
    )


def _rule_signature(rule: Rule) -> Hashable:
    expiration = rule.expiration
    transition = rule.transition
    rule_filter = rule.rule_filter
    tag = rule_filter.tag if rule_filter is not None else None
    return (
        rule.rule_id,
        rule.status,
        expiration.days if expiration is not None else None,
        transition.days if transition is not None else None,
        transition.storage_class if transition is not None else None,
        rule_filter.prefix if rule_filter is not None else None,
        (tag.key, tag.value) if tag is not None else None,
    )


def _rules(config: LifecycleConfig | None) -> list[Rule]:
    if config is None or not config.rules:
        return []
    return list(config.rules)


def has_expiration_rule(config: LifecycleConfig | None, expiration_days: int) -> bool:
    """Whether the store's own rule is present with the given expiry."""
    expected = _rule_signature(make_expiration_rule(expiration_days))
    return any(_rule_signature(rule) == expected for rule in _rules(config))


def reconcile(
    existing: LifecycleConfig | None,
    expiration_days: int | None = DEFAULT_EXPIRATION_IN_DAYS,
) -> LifecycleConfig | None:
    """Replace the store's rule in ``existing``, leaving every other rule alone.

    Foreign rules keep their order and are passed through as the same
    objects. ``expiration_days == 0`` disables expiry: the store's rule is
    dropped and not re-added.

    Returns:
        The merged configuration, or None when no rules remain.
    """
    days = DEFAULT_EXPIRATION_IN_DAYS if expiration_days is None else expiration_days
    rules = [r for r in _rules(existing) if r.rule_id != LIFECYCLE_EXPIRATION_RULE_ID]
    if days > 0:
        rules.append(make_expiration_rule(days))
    return LifecycleConfig(rules) if rules else None


def needs_update(existing: LifecycleConfig | None, merged: LifecycleConfig | None) -> bool:
    """Compare two configurations as sets of rules by id and content."""
    before = {_rule_signature(r) for r in _rules(existing)}
    after = {_rule_signature(r) for r in _rules(merged)}
    return before != after
