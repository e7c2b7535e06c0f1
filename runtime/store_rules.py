"""Runtime loader for known store-name rules."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from tillroll.runtime.paths import get_paths


@lru_cache(maxsize=4)
def load_known_store_prefixes(config_path: str | None = None) -> tuple[str, ...]:
    """
    Load known store-name tokens from store_rules.toml.

    The file holds ``[[stores]]`` tables with a ``keywords`` list. Lines in the
    item area that begin with one of these tokens are header leakage.

    Args:
        config_path: Optional TOML path override. If None, uses default project path.

    Returns:
        Tuple of lowercased keywords from all rules, preserving file order.
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = Path(config_path) if config_path is not None else get_paths().store_rules
    if not path.exists():
        return tuple()

    with open(path, "rb") as f:
        config = tomllib.load(f)

    keywords: list[str] = []
    for rule in config.get("stores", []):
        keywords.extend(str(keyword).lower() for keyword in rule.get("keywords", []) if keyword)
    return tuple(keywords)
