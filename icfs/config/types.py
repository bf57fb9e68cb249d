from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Optional

import yaml

from .helpers import ConfigError, assert_that, load_class_from_mapping

DEFAULT_SEED: dict = {
    "aaa.txt": "fgshndiudfhbsduifsd\n",
    "bbb.txt": "",
}


@dataclass
class MountOptions:
    fsname: str = "icfs"
    allow_other: bool = False
    auto_unmount: bool = True
    nosuid: bool = True
    debug_fuse: bool = False
    min_tasks: int = 10
    timeout: float = 1.0
    """entry and attribute cache timeout in seconds"""

    def fuse_options(self, default_options=frozenset()) -> set[str]:
        options = set(default_options)
        options.add(f"fsname={self.fsname}")

        if self.allow_other:
            options.add("allow_other")

        if self.auto_unmount:
            options.add("auto_unmount")

        if self.nosuid:
            options.add("nosuid")

        if self.debug_fuse:
            options.add("debug")

        return options

    @staticmethod
    def from_mapping(d: Mapping) -> "MountOptions":
        opts = load_class_from_mapping(MountOptions, d)

        assert_that(opts.min_tasks > 0, ConfigError("'min_tasks' must be positive"))
        assert_that(opts.timeout >= 0, ConfigError("'timeout' must not be negative"))

        return replace(opts, timeout=float(opts.timeout))


def validate_seed(seed, path: str = ""):
    assert_that(
        isinstance(seed, Mapping),
        ConfigError(f"'seed{path}' must be a mapping"),
    )

    for name, value in seed.items():
        assert_that(
            isinstance(name, str) and name not in ("", ".", "..") and "/" not in name,
            ConfigError(f"Invalid entry name in 'seed{path}': {name!r}"),
        )

        if isinstance(value, Mapping):
            validate_seed(value, f"{path}/{name}")
            continue

        assert_that(
            isinstance(value, (str, bytes)) or value is None,
            ConfigError(
                f"'seed{path}/{name}' must be a text, bytes or a mapping, received {type(value)}"
            ),
        )


def _normalize_seed(seed: Mapping) -> dict:
    """Empty YAML values (`bbb.txt:`) are loaded as None and mean an empty file"""
    return {
        name: _normalize_seed(value)
        if isinstance(value, Mapping)
        else (value if value is not None else "")
        for name, value in seed.items()
    }


@dataclass
class Config:
    mount: MountOptions = field(default_factory=MountOptions)
    seed: dict = field(default_factory=lambda: dict(DEFAULT_SEED))
    mount_dir: Optional[str] = None

    def set_mount_dir(self, mount_dir: str) -> "Config":
        return replace(self, mount_dir=mount_dir)

    @staticmethod
    def from_mapping(d: Mapping) -> "Config":
        assert_that(
            d is None or isinstance(d, Mapping),
            ConfigError("Config must be a mapping"),
        )

        d = d if d is not None else {}

        def load_seed(d: Mapping) -> dict:
            seed = d.get("seed")

            if seed is None:
                return dict(DEFAULT_SEED)

            validate_seed(seed)
            return _normalize_seed(seed)

        return load_class_from_mapping(
            Config,
            d,
            loaders={
                "mount": lambda d: MountOptions.from_mapping(d.get("mount") or {}),
                "seed": load_seed,
            },
        )

    @staticmethod
    def from_yaml(s):
        try:
            cfg_dict = yaml.safe_load(s)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing config: {e}")

        return Config.from_mapping(cfg_dict)

    @staticmethod
    def from_file(path: str) -> "Config":
        try:
            with open(path, "r") as f:
                return Config.from_yaml(f)
        except OSError as e:
            raise ConfigError(f"Error reading config file {path}: {e}")
