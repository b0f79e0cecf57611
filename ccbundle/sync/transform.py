# CCBundle Content Transformer
# Rewrites authored home-directory paths and audio playback commands

import re
from pathlib import Path
from typing import Any, Optional

from ccbundle.utils.platform import PlatformContext, is_path_safe_for_shell, quote_shell_arg

DEFAULT_TOOL_DIR = ".claude"

TEXT_FILE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
        ".json", ".jsonl",
        ".md", ".mdx", ".txt",
        ".sh", ".bash", ".zsh",
        ".yaml", ".yml",
        ".toml", ".ini", ".cfg",
        ".html", ".css", ".scss", ".less",
    }
)  # fmt: skip

_SOUND_FILE = re.compile(r"""(?:finish\.mp3|need-human\.mp3|[^'"\s]+\.(?:mp3|wav))""")
_AUDIO_COMMAND_PREFIX = re.compile(r"^(?:afplay|paplay|aplay|mpv|ffplay|powershell(?:\.exe)?)\s")

_QUIET_SUFFIX = " 2>/dev/null || true"
_OPTIONAL_QUIET = r"(?:\s+2>/dev/null\s*\|\|\s*true)?"

# Quoted playback invocations embedded in script files
_FILE_AUDIO_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern + _OPTIONAL_QUIET)
    for pattern in (
        r"\bafplay\s+-v\s+[\d.]+\s+'[^']+'",
        r"\bafplay\s+'[^']+'",
        r"\bpaplay\s+'[^']+'",
        r"\baplay\s+'[^']+'",
        r"\bmpv\s+--no-video[^']*'[^']+'",
        r"\bffplay\s+-nodisp[^']*'[^']+'",
    )
)

WSL_NOTIFY_SOUND = "/mnt/c/Windows/Media/notify.wav"


def _home_patterns(tool_dir: str) -> tuple[re.Pattern[str], ...]:
    name = re.escape(tool_dir)
    return (
        re.compile(rf"/Users/[^/]+/{name}/"),
        re.compile(rf"/home/[^/]+/{name}/"),
        re.compile(rf"/root/{name}/"),
        re.compile(rf"C:\\Users\\[^\\]+\\{name}\\", re.IGNORECASE),
    )


def transform_path(text: str, target_dir: str | Path, tool_dir: str = DEFAULT_TOOL_DIR) -> str:
    """
    Point authored home-directory paths at the local target tree.

    Every occurrence of ``/Users/<u>/.claude/``, ``/home/<u>/.claude/``,
    ``/root/.claude/`` and ``C:\\Users\\<u>\\.claude\\`` is replaced with
    ``target_dir + "/"``; remaining backslashes become forward slashes.

    Args:
        text: Command or file content.
        target_dir: Local target directory.
        tool_dir: Name of the tool directory baked into authored paths.

    Returns:
        Transformed text. Applying the function twice gives the same result.
    """
    replacement = f"{target_dir}/"
    for pattern in _home_patterns(tool_dir):
        text = pattern.sub(lambda _m: replacement, text)
    return text.replace("\\", "/")


def get_play_sound_command(sound_path: str, platform: PlatformContext) -> Optional[str]:
    """
    Build a playback command for the platform's audio player.

    Linux and WSL commands carry a ``2>/dev/null || true`` suffix so a
    missing player never fails the calling hook.

    Args:
        sound_path: Absolute path of the sound file.
        platform: Resolved platform context.

    Returns:
        Shell command, or None if no player is available.
    """
    player = platform.audio_player
    if not player:
        return None

    quoted = quote_shell_arg(sound_path)

    if platform.is_macos:
        return f"afplay -v 0.1 {quoted}"

    if platform.is_windows:
        escaped = sound_path.replace("'", "''")
        return f"powershell -c \"(New-Object Media.SoundPlayer '{escaped}').PlaySync()\""

    if player == "play":
        if platform.is_wsl:
            return f"play -v 0.3 {quote_shell_arg(WSL_NOTIFY_SOUND)}{_QUIET_SUFFIX}"
        return f"play -v 0.3 {quoted}{_QUIET_SUFFIX}"
    if player == "powershell.exe":
        win_path = re.sub(r"^/mnt/([a-z])/", r"\1:/", sound_path).replace("/", "\\")
        return f"powershell.exe -c \"(New-Object Media.SoundPlayer '{win_path}').PlaySync()\"{_QUIET_SUFFIX}"
    if player in ("paplay", "aplay"):
        return f"{player} {quoted}{_QUIET_SUFFIX}"
    if player == "mpv":
        return f"mpv --no-video --volume=10 {quoted}{_QUIET_SUFFIX}"
    if player == "ffplay":
        return f"ffplay -nodisp -autoexit -volume 10 {quoted}{_QUIET_SUFFIX}"
    return None


def transform_audio_command(command: str, target_dir: str | Path, platform: PlatformContext) -> Optional[str]:
    """
    Regenerate a playback command for the local platform.

    Args:
        command: Command referencing a sound file.
        target_dir: Local target directory; bare file names resolve to
                    ``<target_dir>/song/<file>``.
        platform: Resolved platform context.

    Returns:
        New command, or None if no sound file is referenced, the resolved
        path is not shell safe, or no player is available.
    """
    match = _SOUND_FILE.search(command)
    if not match:
        return None

    sound_file = match.group(0)
    if "/" in sound_file:
        sound_path = sound_file
    else:
        sound_path = f"{target_dir}/song/{sound_file}"
    sound_path = sound_path.replace("\\", "/")

    if not is_path_safe_for_shell(sound_path):
        return None

    return get_play_sound_command(sound_path, platform)


def transform_hook_command(
    command: str,
    target_dir: str | Path,
    platform: PlatformContext,
    tool_dir: str = DEFAULT_TOOL_DIR,
) -> str:
    """Rewrite paths in a hook command, regenerating playback commands."""
    transformed = transform_path(command, target_dir, tool_dir)

    if _AUDIO_COMMAND_PREFIX.match(transformed):
        audio = transform_audio_command(transformed, target_dir, platform)
        if audio:
            return audio

    return transformed


def transform_hook(
    hook: Optional[dict[str, Any]],
    target_dir: str | Path,
    platform: PlatformContext,
    tool_dir: str = DEFAULT_TOOL_DIR,
) -> Optional[dict[str, Any]]:
    """
    Transform a hook declaration and its nested hooks.

    The input is not modified; None passes through.
    """
    if not hook:
        return hook

    transformed = dict(hook)

    command = transformed.get("command")
    if isinstance(command, str) and command:
        transformed["command"] = transform_hook_command(command, target_dir, platform, tool_dir)

    nested = transformed.get("hooks")
    if isinstance(nested, list):
        transformed["hooks"] = [
            transform_hook(h, target_dir, platform, tool_dir) if isinstance(h, dict) else h for h in nested
        ]

    return transformed


def transform_file_content(
    content: str,
    target_dir: str | Path,
    platform: PlatformContext,
    tool_dir: str = DEFAULT_TOOL_DIR,
) -> str:
    """
    Rewrite paths and quoted playback invocations inside a text file.

    Invocations that cannot be regenerated are left as they are.
    """
    transformed = transform_path(content, target_dir, tool_dir)

    def replace(match: re.Match[str]) -> str:
        return transform_audio_command(match.group(0), target_dir, platform) or match.group(0)

    for pattern in _FILE_AUDIO_PATTERNS:
        transformed = pattern.sub(replace, transformed)

    return transformed


def is_text_file(path: str | Path) -> bool:
    """Check whether a file should go through the content transformer."""
    return Path(str(path)).suffix.lower() in TEXT_FILE_EXTENSIONS
