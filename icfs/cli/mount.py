import os
from argparse import ArgumentParser, Namespace
from dataclasses import replace

from icfs.config import Config, ConfigError
from icfs.error import IcfsError
from icfs.fs import FileSystemOperations
from icfs.main.util import mount_ops
from icfs.store import Store, StoreError
from icfs.util import yes

from .logger import logger

USAGE = "Usage: icfs <MOUNTPOINT>"


def add_mount_arguments(command_mount: ArgumentParser):
    command_mount.add_argument(
        "mount_dir", type=str, metavar="MOUNTPOINT", nargs="?", default=None
    )
    command_mount.add_argument("--config", type=str, dest="config")
    command_mount.add_argument(
        "--debug-fuse", default=False, action="store_true", dest="debug_fuse"
    )
    command_mount.add_argument("--min-tasks", type=int, dest="min_tasks")


def read_config(args: Namespace) -> Config:
    if yes(args.config, str):
        try:
            cfg = Config.from_file(args.config)
        except ConfigError as e:
            raise IcfsError(f"Error load config file:\n\n{e}")
    else:
        cfg = Config()

    mount = cfg.mount

    if args.debug_fuse:
        mount = replace(mount, debug_fuse=True)

    if yes(args.min_tasks, int):
        if args.min_tasks < 1:
            raise IcfsError(f"Invalid --min-tasks: {args.min_tasks}")

        mount = replace(mount, min_tasks=args.min_tasks)

    cfg = replace(cfg, mount=mount)

    if yes(args.mount_dir, str):
        cfg = cfg.set_mount_dir(args.mount_dir)

    return cfg


def create_fs(cfg: Config) -> FileSystemOperations:
    try:
        store = Store.from_tree(cfg.seed)
    except StoreError as e:
        raise IcfsError(f"Invalid seed: {e}")

    return FileSystemOperations(store, timeout=cfg.mount.timeout)


async def mount(args: Namespace):
    cfg = read_config(args)

    if cfg.mount_dir is None:
        print(USAGE)
        return

    if not os.path.isdir(cfg.mount_dir):
        raise IcfsError(f"Mount point {cfg.mount_dir} is not a directory")

    fs = create_fs(cfg)

    logger.debug(f"Seeded {sum(1 for _ in fs.store.walk()) - 1} entries")

    await mount_ops(fs, mount_dir=cfg.mount_dir, options=cfg.mount)
