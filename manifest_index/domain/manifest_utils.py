import platform
from typing import Any, List, Optional

ARCHITECTURES = ("64bit", "32bit", "arm64")

_MACHINE_ARCHITECTURES = {
    "amd64": "64bit",
    "x86_64": "64bit",
    "x64": "64bit",
    "arm64": "arm64",
    "aarch64": "arm64",
    "x86": "32bit",
    "i386": "32bit",
    "i686": "32bit",
}


def default_architecture(machine: Optional[str] = None) -> str:
    """
    Map the host processor to a manifest architecture key.

    Unknown machines fall back to '32bit' on 32-bit interpreters and '64bit'
    otherwise.
    """
    machine = (machine if machine is not None else platform.machine()).lower()
    arch = _MACHINE_ARCHITECTURES.get(machine)
    if arch:
        return arch
    return "64bit" if platform.architecture()[0] == "64bit" else "32bit"


def arch_specific(prop: str, manifest: dict, architecture: str) -> Any:
    """
    Return manifest['architecture'][architecture][prop] when set,
    otherwise the top-level manifest[prop].
    """
    overrides = manifest.get("architecture")
    if isinstance(overrides, dict):
        arch_block = overrides.get(architecture)
        if isinstance(arch_block, dict):
            value = arch_block.get(prop)
            if value:
                return value
    return manifest.get(prop)


def as_list(value: Any) -> List[Any]:
    """Manifest fields may hold a single value or a list; normalize to a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def join_values(values: Any, separator: str) -> str:
    return separator.join(str(v) for v in as_list(values))
