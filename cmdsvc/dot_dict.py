"""
Dictionary-like object with attribute-style access.

DotDict wraps nested configuration data so values can be reached either as
``cfg.logging.level`` or ``cfg.get("logging.level")``.
"""

from typing import Any


class DotDict:
    """
    Dictionary-like object with attribute-style access and nested structure support.

    Nested dictionaries (including those inside lists) are converted to
    DotDict instances on assignment.
    """

    _RESERVED_KEYS = frozenset({"set", "get", "has", "dict", "clear"})

    def __init__(self, **kwargs: Any) -> None:
        self.set(**kwargs)

    def set(self, **kwargs: Any) -> "DotDict":
        """
        Set multiple key-value pairs.

        Returns:
            self: For method chaining

        Raises:
            ValueError: If a key would shadow a method name
        """
        for key, val in kwargs.items():
            key = str(key)
            if key in self._RESERVED_KEYS:
                raise ValueError(
                    f"Key '{key}' is reserved and cannot be used (would shadow method)"
                )
            setattr(self, key, self._wrap(val))
        return self

    @classmethod
    def _wrap(cls, val: Any) -> Any:
        if isinstance(val, dict):
            return DotDict(**val)
        if isinstance(val, list):
            return [cls._wrap(v) for v in val]
        return val

    @classmethod
    def _unwrap(cls, val: Any) -> Any:
        if isinstance(val, DotDict):
            return val.dict()
        if isinstance(val, list):
            return [cls._unwrap(v) for v in val]
        return val

    def clear(self) -> None:
        """Remove all keys."""
        for key in list(self.__dict__):
            delattr(self, key)

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a value by dotted path.

        Example:
            >>> DotDict(logging={"level": "info"}).get("logging.level")
            'info'
        """
        current: Any = self
        for part in path.split("."):
            if isinstance(current, DotDict) and part in current.__dict__:
                current = current.__dict__[part]
            else:
                return default
        return current

    def has(self, path: str) -> bool:
        """Check whether a dotted path exists."""
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    def dict(self) -> dict[str, Any]:
        """Convert back to plain nested dictionaries."""
        return {k: self._unwrap(v) for k, v in self.__dict__.items()}

    def __contains__(self, key: str) -> bool:
        return key in self.__dict__

    def __getitem__(self, key: str) -> Any:
        return self.__dict__[key]

    def __iter__(self):
        return iter(self.__dict__)

    def __len__(self) -> int:
        return len(self.__dict__)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DotDict):
            return self.dict() == other.dict()
        if isinstance(other, dict):
            return self.dict() == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"DotDict({self.dict()!r})"
