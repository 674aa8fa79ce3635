"""Cache directory pattern model."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CachePattern:
    """A directory-name match rule.

    A plain pattern such as ``.ruff_cache`` matches any directory with that
    exact name. A nested pattern such as ``node_modules/.cache`` matches a
    directory named ``.cache`` whose parent path ends with ``node_modules``.

    Attributes:
        name: Required directory name (the last path segment).
        parents: Required parent-path suffix, outermost first. Empty for
            plain patterns.
    """

    name: str
    parents: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate pattern segments."""
        if not self.name:
            msg = "Pattern name cannot be empty"
            raise ValueError(msg)
        for segment in (*self.parents, self.name):
            if segment in (".", "..") or "/" in segment or "\\" in segment:
                msg = f"Invalid pattern segment: {segment!r}"
                raise ValueError(msg)

    @classmethod
    def parse(cls, text: str) -> "CachePattern":
        """Parse a pattern from its configuration string.

        Args:
            text: ``name`` or ``parent/.../name`` (``\\`` is accepted as a
                separator too).

        Returns:
            CachePattern instance.

        Raises:
            ValueError: If the pattern is empty or has invalid segments.
        """
        parts = [p for p in text.strip().replace("\\", "/").split("/") if p]
        if not parts:
            msg = f"Empty cache pattern: {text!r}"
            raise ValueError(msg)
        return cls(name=parts[-1], parents=tuple(parts[:-1]))

    @property
    def is_nested(self) -> bool:
        """Whether the pattern requires a parent-path suffix."""
        return bool(self.parents)

    @property
    def target_name(self) -> str:
        """Folder name used for this pattern inside a bucket."""
        return "-".join((*self.parents, self.name))

    def __str__(self) -> str:
        return "/".join((*self.parents, self.name))
