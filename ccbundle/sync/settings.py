# CCBundle Settings Document
# Typed view of settings.json with passthrough of unknown keys

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ccbundle.errors import SettingsError
from ccbundle.utils.paths import atomic_write

SETTINGS_FILE = "settings.json"

_HOOKS_KEY = "hooks"
_STATUS_LINE_KEY = "statusLine"


@dataclass
class SettingsDocument:
    """
    settings.json split into known fields and a leftover bag.

    ``hooks`` maps a hook type to its ordered list of declarations; each
    declaration is kept as the raw JSON object so unrelated entries are
    re-serialized untouched. Unknown top-level keys live in ``extra`` and
    the original key order is restored on ``to_dict``.
    """

    hooks: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    status_line: Optional[dict[str, Any]] = None
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: list[str] = field(default_factory=list)
    has_hooks_key: bool = False
    has_status_line_key: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettingsDocument":
        """Create from a parsed JSON object."""
        hooks_raw = data.get(_HOOKS_KEY)
        if hooks_raw is not None and not isinstance(hooks_raw, dict):
            raise SettingsError("'hooks' must be a JSON object")

        hooks: dict[str, list[dict[str, Any]]] = {}
        for hook_type, declarations in (hooks_raw or {}).items():
            if not isinstance(declarations, list):
                raise SettingsError(f"'hooks.{hook_type}' must be a JSON array")
            hooks[hook_type] = list(declarations)

        return cls(
            hooks=hooks,
            status_line=data.get(_STATUS_LINE_KEY),
            extra={k: v for k, v in data.items() if k not in (_HOOKS_KEY, _STATUS_LINE_KEY)},
            key_order=list(data.keys()),
            has_hooks_key=_HOOKS_KEY in data,
            has_status_line_key=_STATUS_LINE_KEY in data,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to a JSON object in the original key order."""
        known: dict[str, Any] = {}
        if self.hooks or self.has_hooks_key:
            known[_HOOKS_KEY] = self.hooks
        if self.status_line is not None or self.has_status_line_key:
            known[_STATUS_LINE_KEY] = self.status_line

        result: dict[str, Any] = {}
        for key in self.key_order:
            if key in known:
                result[key] = known.pop(key)
            elif key in self.extra:
                result[key] = self.extra[key]
        for key, value in self.extra.items():
            result.setdefault(key, value)
        result.update(known)
        return result

    def find_hook(self, hook_type: str, matcher: str) -> Optional[dict[str, Any]]:
        """Find the declaration with a given matcher in a hook-type array."""
        for declaration in self.hooks.get(hook_type, []):
            if isinstance(declaration, dict) and (declaration.get("matcher") or "") == matcher:
                return declaration
        return None

    def upsert_hook(self, hook_type: str, declaration: dict[str, Any]) -> bool:
        """
        Replace the declaration with the same matcher, or append it.

        Args:
            hook_type: Lifecycle event name.
            declaration: Full hook declaration.

        Returns:
            True if an existing entry was replaced.
        """
        matcher = declaration.get("matcher") or ""
        entries = self.hooks.setdefault(hook_type, [])
        self.has_hooks_key = True

        for index, existing in enumerate(entries):
            if isinstance(existing, dict) and (existing.get("matcher") or "") == matcher:
                entries[index] = declaration
                return True

        entries.append(declaration)
        return False


def parse_settings(text: str, *, source: str = SETTINGS_FILE) -> SettingsDocument:
    """
    Parse settings.json text.

    Blank text is an empty document.

    Raises:
        SettingsError: On invalid JSON or a non-object root.
    """
    if not text.strip():
        return SettingsDocument()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SettingsError(f"Malformed JSON in {source}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"JSON root is not an object in {source}")

    return SettingsDocument.from_dict(data)


def load_settings(path: Path) -> SettingsDocument:
    """
    Load settings.json, treating a missing file as empty.

    Raises:
        SettingsError: If the file exists but cannot be read or parsed.
    """
    if not path.exists():
        return SettingsDocument()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SettingsError(f"Cannot read {path}: {e}") from e

    return parse_settings(text, source=str(path))


def save_settings(path: Path, document: SettingsDocument) -> None:
    """Write settings.json atomically with two-space indentation."""
    content = json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n"
    atomic_write(path, content)
