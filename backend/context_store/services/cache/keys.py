"""Key namespacing for every cache component."""

from dataclasses import dataclass

from context_store.core.exceptions import ValidationError
from context_store.services.cache.constants import DEFAULT_KEY_PREFIX

# ":" separates namespace from key; the rest are KEYS glob metacharacters
RESERVED_NAMESPACE_CHARS = frozenset(":*?[]\\")


@dataclass(frozen=True)
class KeyNamespacer:
    """Derives fully-qualified Redis keys.

    Layout is ``<prefix><namespace>:<key>``, or ``<prefix><key>`` for the
    root namespace. Namespaces must not contain ``:`` or glob
    metacharacters, so a namespace pattern only ever matches its own keys.
    Root keys are taken verbatim: a root key ``"a:k"`` and key ``"k"`` in
    namespace ``"a"`` are the same Redis key.
    """

    prefix: str = DEFAULT_KEY_PREFIX

    def full_key(self, key: str | int, namespace: str | None = None) -> str:
        """Create a fully-qualified key."""
        if namespace:
            self._check_namespace(namespace)
            return f"{self.prefix}{namespace}:{key}"
        return f"{self.prefix}{key}"

    def pattern(self, namespace: str | None = None) -> str:
        """Wildcard matching every key of a namespace (or the whole prefix)."""
        return self.full_key("*", namespace)

    def strip(self, full_key: str, namespace: str | None = None) -> str:
        """Recover the logical key from a fully-qualified one."""
        head = self.full_key("", namespace)
        return full_key[len(head):] if full_key.startswith(head) else full_key

    @staticmethod
    def _check_namespace(namespace: str) -> None:
        invalid = sorted(RESERVED_NAMESPACE_CHARS.intersection(namespace))
        if invalid:
            raise ValidationError(
                f"Invalid cache namespace: {namespace!r}",
                {"namespace": namespace, "invalid_characters": invalid},
            )
