from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_BUILD_CONFIG = "build_config.yaml"

TOOLCHAIN_VERSION = "clang-r450784d"
TOOLCHAIN_URL = (
    "https://android.googlesource.com/platform/prebuilts/clang/host/linux-x86/"
    f"+archive/refs/tags/android-13.0.0_r30/{TOOLCHAIN_VERSION}.tar.gz"
)

ROOTFS_FILE = "kali-nethunter-2024.4-generic-arm64-rootfs-full.zip"
ROOTFS_BASE_URL = "https://kali.download/nethunter-images/current"

HOST_PACKAGES = [
    "build-essential",
    "bc",
    "bison",
    "flex",
    "libssl-dev",
    "ccache",
    "git",
    "zip",
    "unzip",
    "automake",
    "autoconf",
    "libncurses-dev",
    "clang",
    "libclang-dev",
    "lld",
    "python3",
    "python3-pip",
    "wget",
    "curl",
    "sed",
    "grep",
    "cpio",
    "liblz4-dev",
    "device-tree-compiler",
    "xz-utils",
    # installer build script
    "default-jdk",
    "python3-tqdm",
    "python3-pycryptodome",
]

# Order matters: applied to .config one by one.
NETHUNTER_FEATURES = [
    # HID gadget
    "USB_HID",
    "USB_HIDDEV",
    "HID",
    "HID_GENERIC",
    "USB_GADGET",
    "USB_CONFIGFS_F_FS",
    "USB_CONFIGFS_F_HID",
    "INPUT_UINPUT",
    # Wi-Fi injection, bridging, VLAN
    "CFG80211",
    "MAC80211",
    "CFG80211_DEFAULT_PS",
    "BRIDGE",
    "VLAN_8021Q",
    # netfilter: conntrack, NAT, iptables, ebtables, ipset
    "NF_CONNTRACK",
    "NF_CONNTRACK_EVENTS",
    "NETFILTER_XT_MARK",
    "NETFILTER_XT_TARGET_MARK",
    "NF_NAT",
    "NF_TABLES",
    "IP_NF_IPTABLES",
    "IP_NF_MANGLE",
    "IP6_NF_MANGLE",
    "IP_NF_FILTER",
    "IP6_NF_FILTER",
    "IP6_NF_IPTABLES",
    "BRIDGE_NF_EBTABLES",
    "EBTABLES",
    "IP_SET",
    "IP_SET_HASH_IP",
    "IP_SET_HASH_NET",
    # VPN
    "WIREGUARD",
]

_REPO_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "kernel": {
        "url": "https://github.com/LineageOS/android_kernel_google_msm-4.14",
        "dir": "kernel_flame",
        "shallow": True,
    },
    "anykernel": {
        "url": "https://github.com/osm0sis/AnyKernel3",
        "dir": "AnyKernel3",
        "shallow": True,
    },
    "installer": {
        "url": "https://gitlab.com/kalilinux/nethunter/build-scripts/kali-nethunter-installer.git",
        "dir": "kali-nethunter-installer",
        "shallow": False,
    },
}

REPO_NAMES = ("kernel", "anykernel", "installer")


@dataclass(frozen=True)
class RepoSpec:
    name: str
    url: str
    dir_name: str
    shallow: bool


@dataclass(frozen=True)
class BuildConfig:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def device(self) -> str:
        return str(self.raw.get("device") or "flame")

    @property
    def workspace(self) -> str:
        return str(self._section("paths").get("workspace") or "~/nethunter_flame_build")

    @property
    def install_host_packages(self) -> bool:
        return bool(self._section("host_packages").get("install", True))

    @property
    def host_packages(self) -> List[str]:
        packages = self._section("host_packages").get("packages")
        return list(HOST_PACKAGES if packages is None else packages)

    def repo(self, name: str) -> RepoSpec:
        if name not in _REPO_DEFAULTS:
            raise KeyError(f"Unknown repository {name!r}")
        merged = dict(_REPO_DEFAULTS[name])
        merged.update(self._section("repos").get(name) or {})
        return RepoSpec(
            name=name,
            url=str(merged["url"]),
            dir_name=str(merged["dir"]),
            shallow=bool(merged["shallow"]),
        )

    @property
    def repos(self) -> List[RepoSpec]:
        return [self.repo(n) for n in REPO_NAMES]

    @property
    def toolchain_version(self) -> str:
        return str(self._section("toolchain").get("version") or TOOLCHAIN_VERSION)

    @property
    def toolchain_url(self) -> str:
        return str(self._section("toolchain").get("url") or TOOLCHAIN_URL)

    @property
    def toolchain_dir(self) -> str:
        return str(self._section("toolchain").get("dir") or "clang_toolchain")

    @property
    def toolchain_prune(self) -> bool:
        return bool(self._section("toolchain").get("prune", True))

    @property
    def arch(self) -> str:
        return str(self._section("kernel").get("arch") or "arm64")

    @property
    def subarch(self) -> str:
        return str(self._section("kernel").get("subarch") or self.arch)

    @property
    def clang_triple(self) -> str:
        return str(self._section("kernel").get("clang_triple") or "aarch64-linux-gnu-")

    @property
    def cross_compile(self) -> str:
        return str(self._section("kernel").get("cross_compile") or "aarch64-linux-android-")

    @property
    def cross_compile_compat(self) -> str:
        return str(self._section("kernel").get("cross_compile_compat") or "arm-linux-gnueabi-")

    @property
    def make_flags(self) -> List[str]:
        flags = self._section("kernel").get("make_flags")
        if flags is None:
            return ["CC=clang", "LLVM=1"]
        if isinstance(flags, str):
            return flags.split()
        return [str(f) for f in flags]

    @property
    def kernel_image(self) -> str:
        return str(self._section("kernel").get("image") or f"arch/{self.arch}/boot/Image.lz4-dtb")

    @property
    def sibling_defconfig(self) -> str:
        return str(self._section("kernel").get("sibling_defconfig") or "coral_defconfig")

    @property
    def features(self) -> List[str]:
        features = self._section("kernel").get("features")
        return list(NETHUNTER_FEATURES if features is None else features)

    @property
    def mrproper(self) -> bool:
        return bool(self._section("kernel").get("mrproper", True))

    @property
    def rootfs_file(self) -> str:
        return str(self._section("rootfs").get("file") or ROOTFS_FILE)

    @property
    def rootfs_url(self) -> str:
        return str(self._section("rootfs").get("url") or f"{ROOTFS_BASE_URL}/{self.rootfs_file}")

    @property
    def kernel_zip_prefix(self) -> str:
        return str(self._section("outputs").get("kernel_zip_prefix") or "Pixel4_NetHunterKernel_HID")

    @property
    def installer_zip_prefix(self) -> str:
        return str(
            self._section("outputs").get("installer_zip_prefix") or f"NetHunter_{self.device}_full"
        )


def load_build_config(path: Optional[str] = None) -> BuildConfig:
    """Load the YAML build config.

    With no explicit path, a missing ``build_config.yaml`` yields the
    built-in defaults for the flame target.
    """

    explicit = path is not None
    p = Path(path or DEFAULT_BUILD_CONFIG)
    if not p.exists():
        if explicit:
            raise FileNotFoundError(str(p))
        return BuildConfig(raw={})

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("build config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the build config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return BuildConfig(raw=raw)
