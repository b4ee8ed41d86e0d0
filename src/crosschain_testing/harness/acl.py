from __future__ import annotations

from typing import Dict, Optional

from ..errors import Unauthorized
from ..models.messaging import Address, AllowlistKey


class AccessControlList:
    """Fail-closed allowlist owned by exactly one entity.

    Absent keys are denied. Only ``owner`` may write; repeated writes simply
    overwrite the previous value.
    """

    def __init__(self, owner: Address):
        self.owner = owner
        self._entries: Dict[AllowlistKey, bool] = {}

    def set_entry(self, caller: Address, key: AllowlistKey, allowed: bool) -> None:
        if caller != self.owner:
            raise Unauthorized(f"{caller} is not the owner of this allowlist")
        self._entries[key] = bool(allowed)

    def lookup(self, key: AllowlistKey) -> Optional[bool]:
        """Stored value for ``key``, or None when no entry was ever written."""
        return self._entries.get(key)

    def is_allowed(self, key: AllowlistKey) -> bool:
        return self._entries.get(key, False)

    def entries(self) -> Dict[AllowlistKey, bool]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
