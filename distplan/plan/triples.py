"""Target triple helpers."""

from __future__ import annotations

ARM64_MACOS = "aarch64-apple-darwin"
X64_MACOS = "x86_64-apple-darwin"

_DISPLAY_NAMES: dict[str, str] = {
    "aarch64-apple-darwin": "Apple Silicon macOS",
    "x86_64-apple-darwin": "Intel macOS",
    "x86_64-pc-windows-msvc": "x64 Windows",
    "aarch64-pc-windows-msvc": "ARM64 Windows",
    "i686-pc-windows-msvc": "x86 Windows",
    "x86_64-unknown-linux-gnu": "x64 Linux",
    "x86_64-unknown-linux-musl": "x64 MUSL Linux",
    "aarch64-unknown-linux-gnu": "ARM64 Linux",
    "aarch64-unknown-linux-musl": "ARM64 MUSL Linux",
    "i686-unknown-linux-gnu": "x86 Linux",
}


def display_name(triple: str) -> str | None:
    return _DISPLAY_NAMES.get(triple)


def is_windows(triple: str) -> bool:
    return "windows" in triple


def is_macos(triple: str) -> bool:
    return triple.endswith("-apple-darwin")


def arch(triple: str) -> str:
    return triple.split("-", 1)[0]


def homebrew_platform(triple: str) -> tuple[str, str] | None:
    """Map a macOS triple to (platform key, Homebrew CPU type)."""
    if triple == ARM64_MACOS:
        return ("arm64", "arm")
    if triple == X64_MACOS:
        return ("x86_64", "intel")
    return None


def github_runner(triple: str) -> str:
    if is_macos(triple):
        return "macos-14" if arch(triple) == "aarch64" else "macos-12"
    if is_windows(triple):
        return "windows-2019"
    return "ubuntu-20.04"
