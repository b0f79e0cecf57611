# CCBundle Platform Detection Utilities
# OS, WSL and audio player detection resolved into an explicit context value

import platform
import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Platform name mapping: system name -> ccbundle platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
    "Windows": "windows",
}

# Ordered player preferences
_LINUX_PLAYERS: tuple[str, ...] = ("paplay", "aplay", "mpv", "ffplay")
_WSL_PLAYERS: tuple[str, ...] = ("play", "powershell.exe")

_SHELL_UNSAFE_CHARS = re.compile(r"""[;&|`$(){}\[\]<>*?!#~'"\\]""")


@dataclass(frozen=True)
class PlatformContext:
    """
    Resolved platform facts for the running process.

    Built once at startup by ``detect_platform`` and handed to every
    component that needs it, so tests can construct any platform directly.
    """

    system: str
    is_wsl: bool = False
    home: Path = Path("~")
    audio_player: Optional[str] = None

    @property
    def is_macos(self) -> bool:
        return self.system == "macos"

    @property
    def is_windows(self) -> bool:
        return self.system == "windows"

    @property
    def is_linux(self) -> bool:
        """Native Linux (WSL excluded)."""
        return self.system == "linux" and not self.is_wsl


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", or "windows".
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())


def is_wsl(system: str, release: str) -> bool:
    """Check whether a Linux kernel release string belongs to WSL."""
    if system != "linux":
        return False
    release = release.lower()
    return "microsoft" in release or "wsl" in release


def detect_audio_player(
    system: str,
    wsl: bool,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[str]:
    """
    Pick the first available audio player for a platform.

    Args:
        system: Platform identifier.
        wsl: Whether running under WSL.
        which: Executable lookup, ``shutil.which`` by default.

    Returns:
        Player executable name, or None when nothing usable is installed.
    """
    if system == "macos":
        return "afplay"
    if system == "windows":
        return "powershell"
    if system != "linux":
        return None

    candidates = (_WSL_PLAYERS + _LINUX_PLAYERS) if wsl else _LINUX_PLAYERS
    for player in candidates:
        if which(player):
            return player
    return None


def detect_platform(
    system: Optional[str] = None,
    release: Optional[str] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> PlatformContext:
    """
    Resolve the platform context for this process.

    Args:
        system: Override platform identifier (detected when None).
        release: Override kernel release string (detected when None).
        which: Executable lookup used for player detection.

    Returns:
        PlatformContext value.
    """
    system = system or get_current_platform()
    release = release if release is not None else platform.release()
    wsl = is_wsl(system, release)

    return PlatformContext(
        system=system,
        is_wsl=wsl,
        home=Path.home(),
        audio_player=detect_audio_player(system, wsl, which),
    )


def is_path_safe_for_shell(path: str) -> bool:
    """Check that a path contains no shell metacharacters."""
    return not _SHELL_UNSAFE_CHARS.search(path)


def quote_shell_arg(arg: str) -> str:
    """Single-quote an argument for a POSIX shell."""
    return "'" + arg.replace("'", "'\\''") + "'"
