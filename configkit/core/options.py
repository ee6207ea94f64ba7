"""
Configure options.

Options come from four layers, each overriding the previous one:

1. Built-in defaults
2. An optional YAML file (`configkit.yaml` in the project root)
3. Environment variables (CC, CXX, TAR, PERL, CFLAGS, CPPFLAGS, LDFLAGS, http_proxy)
4. Command line overrides

Example configkit.yaml:

    tools:
      cc: clang
      cxx: clang++
    llvm:
      skip_system: true
      prebuilt_name: llvm-2.8-custom.tar.bz2
    features:
      execinfo: false
      vendor-zlib: true
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from configkit.core.exceptions import OptionsError
from configkit.core.platform import HostDescriptor

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "configkit.yaml"
DEFAULT_LOG_FILE = "configure.log"

FEATURES = ("execinfo", "C-readline", "ruby-readline", "vendor-zlib")

_TOOL_KEYS = ("cc", "cxx", "tar", "perl")
_LLVM_KEYS = {
    "enabled": "llvm_enabled",
    "required": "llvm_required",
    "skip_system": "skip_system",
    "skip_prebuilt": "skip_prebuilt",
    "system_name": "system_name",
    "prebuilt_name": "prebuilt_name",
    "path": "llvm_path",
    "config": "llvm_config",
    "prebuilt_url": "prebuilt_url",
    "source_url": "source_url",
}
_ENVIRONMENT = {
    "CC": "cc",
    "CXX": "cxx",
    "TAR": "tar",
    "PERL": "perl",
    "CFLAGS": "cflags",
    "CPPFLAGS": "cppflags",
    "LDFLAGS": "ldflags",
}


def default_feature(name: str, host: HostDescriptor) -> bool:
    """
    Default state of a feature toggle on a host.

    execinfo is off on openbsd, vendor-zlib is on for windows hosts,
    ruby-readline is off and C-readline is on.
    """
    if name == "execinfo":
        return "openbsd" not in host.os
    if name == "vendor-zlib":
        return host.is_windows
    if name == "ruby-readline":
        return False
    if name == "C-readline":
        return True
    raise OptionsError(f"Unknown feature: {name}")


@dataclass
class ConfigureOptions:
    """
    Options for one configure run.

    Attributes:
        project_root: Root of the project being configured (holds vendor/)
        log_file: Run log path
        cc: C compiler command
        cxx: C++ compiler command
        tar: External tar program; None unpacks archives in-process
        perl: Interpreter used to run the llvm-config locator
        cflags: User CFLAGS passed to probes
        cppflags: User CPPFLAGS
        ldflags: User LDFLAGS
        llvm_enabled: Resolve the toolkit at all
        llvm_required: Fail the run when no toolkit is found
        skip_system: Do not use a toolkit found on PATH
        skip_prebuilt: Do not try prebuilt packages
        system_name: Distribution label override for prebuilt names
        prebuilt_name: Explicit prebuilt package name tried first
        llvm_path: Explicit toolkit build tree
        llvm_config: Explicit locator program
        update_prebuilt: Refresh the prebuilt package instead of configuring
        features: Explicit feature toggles; missing names use host defaults
        prebuilt_url: Base URL of prebuilt packages
        source_url: Source archive URL; None derives it from the release
        proxy_url: HTTP proxy for downloads
        verbose: Echo warnings and debug output to the console
    """

    project_root: Path = field(default_factory=Path.cwd)
    log_file: Optional[Path] = None
    cc: str = "gcc"
    cxx: str = "g++"
    tar: Optional[str] = None
    perl: str = "perl"
    cflags: str = ""
    cppflags: str = ""
    ldflags: str = ""
    llvm_enabled: bool = True
    llvm_required: bool = False
    skip_system: bool = False
    skip_prebuilt: bool = False
    system_name: Optional[str] = None
    prebuilt_name: Optional[str] = None
    llvm_path: Optional[Path] = None
    llvm_config: Optional[Path] = None
    update_prebuilt: bool = False
    features: Dict[str, bool] = field(default_factory=dict)
    prebuilt_url: str = "http://asset.rubini.us/prebuilt"
    source_url: Optional[str] = None
    proxy_url: Optional[str] = None
    verbose: bool = False

    def __post_init__(self):
        self.project_root = Path(self.project_root).resolve()
        if self.log_file is None:
            self.log_file = self.project_root / DEFAULT_LOG_FILE
        else:
            self.log_file = Path(self.log_file)
        if self.llvm_path is not None:
            self.llvm_path = Path(self.llvm_path)
        if self.llvm_config is not None:
            self.llvm_config = Path(self.llvm_config)
        for name in self.features:
            if name not in FEATURES:
                raise OptionsError(
                    f"Unknown feature '{name}'. Known features: {', '.join(FEATURES)}"
                )

    @property
    def vendor_dir(self) -> Path:
        """Directory holding the cached toolkit tree and downloads."""
        return self.project_root / "vendor"

    def feature_enabled(self, name: str, host: HostDescriptor) -> bool:
        """Resolve a feature toggle, falling back to the host default."""
        if name in self.features:
            return self.features[name]
        return default_feature(name, host)


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        OptionsError: If the file is required and missing, or is not valid YAML
    """
    if not config_file.exists():
        if required:
            raise OptionsError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise OptionsError(f"Invalid YAML in {config_file}: {e}")

    config = config or {}
    if not isinstance(config, dict):
        raise OptionsError(f"{config_file} must contain a mapping at top level")
    return config


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise OptionsError(f"Section '{name}' must be a mapping")
    return value


def _values_from_file(config: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    tools = _section(config, "tools")
    for key in _TOOL_KEYS:
        if tools.get(key) is not None:
            values[key] = str(tools[key])

    llvm = _section(config, "llvm")
    for key, attribute in _LLVM_KEYS.items():
        if llvm.get(key) is not None:
            values[attribute] = llvm[key]

    features = _section(config, "features")
    if features:
        values["features"] = {str(k): bool(v) for k, v in features.items()}

    return values


def _values_from_environment(env: Mapping[str, str]) -> Dict[str, Any]:
    values = {
        attribute: env[variable]
        for variable, attribute in _ENVIRONMENT.items()
        if env.get(variable)
    }
    proxy = env.get("http_proxy") or env.get("HTTP_PROXY")
    if proxy:
        values["proxy_url"] = proxy
    return values


def load_options(
    project_root: Path,
    config_file: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ConfigureOptions:
    """
    Build configure options from defaults, file, environment and overrides.

    Args:
        project_root: Project root directory
        config_file: Explicit YAML file (required to exist when given);
            defaults to an optional configkit.yaml in project_root
        env: Environment mapping (default: os.environ)
        overrides: Command line values; None entries are ignored and
            'features' is merged into the file's feature toggles

    Returns:
        ConfigureOptions instance

    Raises:
        OptionsError: On invalid YAML, unknown keys or unknown features

    Example:
        >>> options = load_options(Path("."), overrides={"skip_system": True})
        >>> options.skip_system
        True
    """
    project_root = Path(project_root)
    env = os.environ if env is None else env

    if config_file is not None:
        file_config = load_yaml_config(Path(config_file), required=True)
    else:
        file_config = load_yaml_config(project_root / CONFIG_FILE_NAME)

    values: Dict[str, Any] = {"project_root": project_root}
    values.update(_values_from_file(file_config))
    values.update(_values_from_environment(env))

    features = dict(values.get("features", {}))
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key == "features":
            features.update(value)
        else:
            values[key] = value
    if features:
        values["features"] = features

    known = {f.name for f in fields(ConfigureOptions)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise OptionsError(f"Unknown option(s): {', '.join(unknown)}")

    return ConfigureOptions(**values)
