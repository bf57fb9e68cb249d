import asyncio

import pyfuse3
import pyfuse3.asyncio as pyfuse3_asyncio

from icfs import icfslog, main
from icfs.config import MountOptions

logger = icfslog.getLogger("main")


async def mount_ops(
    fs_ops: pyfuse3.Operations,
    *,
    mount_dir: str,
    options: MountOptions,
):
    logger.debug(f"mount_ops({mount_dir})")

    pyfuse3_asyncio.enable()

    fuse_options = options.fuse_options(pyfuse3.default_options)

    logger.debug(f"fuse options: {sorted(fuse_options)}")

    pyfuse3.init(fs_ops, mount_dir, fuse_options)

    main.mounted = True

    logger.info(f"Mounted at {mount_dir}")

    await pyfuse3.main(min_tasks=options.min_tasks)


def run_main(main_func, loop=None):

    loop = loop if loop is not None else asyncio.new_event_loop()

    try:
        loop.run_until_complete(main_func())
    except KeyboardInterrupt:
        print("\nKeyboardInterrupt")
    finally:

        if main.mounted:
            pyfuse3.close(unmount=True)
            main.mounted = False

        if not loop.is_closed():
            loop.close()
