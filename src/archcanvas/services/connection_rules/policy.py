"""
Connection Rule Engine.

Decides whether an edge between two resource categories is meaningful.
Rules are symmetric and table-driven: a pair is allowed when it appears in
the allow table and not in the deny table. Anything else is rejected with
a generic reason, so the table can grow without touching the editor.
"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ...shared import get_logger, get_settings, ConfigurationError, InvalidConnection, Settings
from ..taxonomy import ResourceCategory

CategoryLike = Union[ResourceCategory, str]
CategoryPair = FrozenSet[ResourceCategory]

logger = get_logger(__name__)


def _category(value: CategoryLike) -> ResourceCategory:
    return value if isinstance(value, ResourceCategory) else ResourceCategory(value)


def _pair(first: CategoryLike, second: CategoryLike) -> CategoryPair:
    return frozenset((_category(first), _category(second)))


def _describe(category: ResourceCategory) -> str:
    return category.value.replace("orchestration-", "kubernetes ")


class ConnectionPolicy:
    """
    Symmetric allow/deny table over resource categories.

    Instances are immutable; ``with_rules`` returns an extended copy.
    """

    def __init__(self,
                 allowed: Iterable[Tuple[CategoryLike, CategoryLike]] = (),
                 denied: Optional[Mapping[Tuple[CategoryLike, CategoryLike], str]] = None):
        self._allowed: FrozenSet[CategoryPair] = frozenset(_pair(a, b) for a, b in allowed)
        self._denied: Dict[CategoryPair, str] = {
            _pair(a, b): reason for (a, b), reason in (denied or {}).items()
        }

    def is_connectable(self, source_category: CategoryLike, target_category: CategoryLike) -> bool:
        return self.reason_if_invalid(source_category, target_category) is None

    def reason_if_invalid(self,
                          source_category: CategoryLike,
                          target_category: CategoryLike) -> Optional[str]:
        """Return a user-facing reason, or None when the pair may be connected."""
        try:
            pair = _pair(source_category, target_category)
        except ValueError:
            return f"Unknown resource category in '{source_category}' -> '{target_category}'"

        if pair in self._denied:
            return self._denied[pair]
        if pair in self._allowed:
            return None
        return (
            f"A {_describe(_category(source_category))} resource cannot be connected "
            f"to a {_describe(_category(target_category))} resource"
        )

    def check(self, source_category: CategoryLike, target_category: CategoryLike) -> None:
        """
        Raise when the pair is not connectable.

        Raises:
            InvalidConnection: carrying the rejection reason
        """
        reason = self.reason_if_invalid(source_category, target_category)
        if reason is not None:
            raise InvalidConnection(str(source_category), str(target_category), reason)

    def with_rules(self,
                   allow: Iterable[Tuple[CategoryLike, CategoryLike]] = (),
                   deny: Optional[Mapping[Tuple[CategoryLike, CategoryLike], str]] = None) -> "ConnectionPolicy":
        """
        Extended copy of this policy.

        An allow entry lifts an existing denial for the same pair, a deny
        entry overrides an existing allowance.
        """
        allow_pairs = {_pair(a, b) for a, b in allow}
        deny_pairs = {_pair(a, b): reason for (a, b), reason in (deny or {}).items()}

        policy = ConnectionPolicy()
        policy._allowed = frozenset((self._allowed | allow_pairs) - deny_pairs.keys())
        denied = {pair: reason for pair, reason in self._denied.items() if pair not in allow_pairs}
        denied.update(deny_pairs)
        policy._denied = denied
        return policy

    def allowed_pairs(self) -> List[Tuple[ResourceCategory, ResourceCategory]]:
        """Allowed pairs as sorted tuples; a same-category rule appears as (c, c)."""
        pairs = []
        for pair in self._allowed:
            ordered = sorted(pair, key=lambda c: c.value)
            pairs.append((ordered[0], ordered[-1]))
        return sorted(pairs, key=lambda p: (p[0].value, p[1].value))


C = ResourceCategory

DEFAULT_ALLOWED: Tuple[Tuple[ResourceCategory, ResourceCategory], ...] = (
    (C.COMPUTE, C.DATABASE),
    (C.COMPUTE, C.STORAGE),
    (C.COMPUTE, C.NETWORK),
    (C.NETWORK, C.NETWORK),
    (C.POD, C.SERVICE),
    (C.SERVICE, C.DEPLOYMENT),
    (C.LOADBALANCER, C.COMPUTE),
    (C.LOADBALANCER, C.NETWORK),
    (C.SERVERLESS, C.DATABASE),
    (C.SERVERLESS, C.STORAGE),
    (C.INGRESS, C.SERVICE),
    (C.CONFIGMAP, C.POD),
    (C.CONFIGMAP, C.DEPLOYMENT),
    (C.SECRET, C.POD),
    (C.SECRET, C.DEPLOYMENT),
)

DEFAULT_DENIED: Dict[Tuple[ResourceCategory, ResourceCategory], str] = {
    (C.STORAGE, C.DATABASE): (
        "Storage cannot connect directly to a database; route the connection through a compute resource"
    ),
}

DEFAULT_POLICY = ConnectionPolicy(allowed=DEFAULT_ALLOWED, denied=DEFAULT_DENIED)


def policy_from_settings(settings: Optional[Settings] = None) -> ConnectionPolicy:
    """
    Default policy extended with ``EXTRA_CONNECTION_RULES`` from settings.

    Raises:
        ConfigurationError: if a configured rule is malformed or names an unknown category
    """
    settings = settings or get_settings()
    try:
        extra = settings.connection_rule_pairs
        policy = DEFAULT_POLICY.with_rules(allow=extra)
    except ValueError as e:
        raise ConfigurationError(f"Invalid connection rule configuration: {e}")

    if extra:
        logger.info(f"Connection policy extended with {len(extra)} configured rules")
    return policy
