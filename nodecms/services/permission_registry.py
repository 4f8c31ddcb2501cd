"""Permission registry — permission groups and the names valid within each."""

import logging
from typing import Dict, List, Iterable

logger = logging.getLogger("nodecms")


class PermissionRegistry:
    """In-memory catalog of permission groups, filled by content types at startup.

    Not persisted. Only used to seed new roles with all-false defaults; stored
    roles may hold permission names the registry has never heard of.
    """

    def __init__(self):
        self._groups: Dict[str, List[str]] = {}

    def register(self, group: str, permissions: Iterable[str]) -> None:
        """Register (or replace) a permission group. Last writer wins."""
        names = list(dict.fromkeys(permissions))
        if group in self and self._groups[group] != names:
            logger.debug(f"PermissionRegistry: replacing permission group '{group}'")
        self._groups[group] = names
        logger.info(f"PermissionRegistry: registered '{group}' with {len(names)} permissions")

    def get(self, group: str) -> List[str]:
        return list(self._groups.get(group, []))

    def groups(self) -> Dict[str, List[str]]:
        return {group: list(names) for group, names in self._groups.items()}

    def default_perm_groups(self) -> Dict[str, Dict[str, bool]]:
        """Snapshot used to seed a new role: every permission set to False."""
        return {
            group: {name: False for name in names}
            for group, names in self._groups.items()
        }

    def __contains__(self, group: str) -> bool:
        return group in self._groups
