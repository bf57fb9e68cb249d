import asyncio
import errno
import logging
import os
import stat
import time
from functools import wraps
from typing import Optional

import pyfuse3

from icfs.error import InvariantViolation
from icfs.icfslog import TRACE
from icfs.store import StoreError

from .logger import logger

DEFAULT_PERMS = 0o777
DEFAULT_STAMP = int(1438467123.985654 * 1e9)


def measure_time(*, logger_func):
    def measure_time(func):
        @wraps(func)
        async def inner_function(*args, **kwargs):
            started = time.time_ns()
            res = await func(*args, **kwargs)
            duration = time.time_ns() - started

            logger_func(f"{func.__name__} = {int(duration/1000/1000)} ms")

            return res

        return inner_function

    return measure_time


def exception_handler(func):
    """
    Converts whatever a callback raises into the single reply the kernel
    expects. Store errors carry their own errno, broken invariants and
    unexpected errors are logged and replied as EIO.
    """

    @wraps(func)
    async def inner_function(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except pyfuse3.FUSEError:
            raise
        except StoreError as e:
            logger.debug(f"{func.__name__}: {e}")
            raise pyfuse3.FUSEError(e.errno)
        except InvariantViolation as e:
            logger.error(f"{func.__name__}: {e}", exc_info=True)
            raise pyfuse3.FUSEError(errno.EIO)
        except Exception:
            logger.exception(f"{func.__name__}: unexpected error")
            raise pyfuse3.FUSEError(errno.EIO)

    return inner_function


class MyLock(asyncio.Lock):
    def __init__(self, id: str, logger, level=TRACE):
        super(MyLock, self).__init__()
        self.id = id
        self.logger = logger
        self.level = level

    @property
    def state(self):
        return "locked" if self.locked() else "unlocked"

    async def acquire(self) -> bool:
        self.logger.log(
            self.level, f"{self.id}: + acquiring. Current state: {self.state}"
        )
        ret = await super(MyLock, self).acquire()
        self.logger.log(self.level, f"{self.id}: + locked")
        return ret

    def release(self) -> None:
        self.logger.log(self.level, f"{self.id}: - release")
        super(MyLock, self).release()


def create_file_attributes(
    size: int,
    inode: int,
    perms=DEFAULT_PERMS,
    stamp: int = DEFAULT_STAMP,
    timeout: float = 1.0,
):
    return create_attributes(
        size=size,
        stamp=stamp,
        st_mode=(stat.S_IFREG | perms),
        inode=inode,
        timeout=timeout,
    )


def create_directory_attributes(
    inode: int,
    perms=DEFAULT_PERMS,
    stamp: int = DEFAULT_STAMP,
    timeout: float = 1.0,
):
    return create_attributes(
        size=0,
        stamp=stamp,
        st_mode=(stat.S_IFDIR | perms),
        inode=inode,
        timeout=timeout,
    )


def create_attributes(
    st_mode: int,
    stamp: int,
    size: int,
    inode: Optional[int] = None,
    timeout: float = 1.0,
):
    attrs = pyfuse3.EntryAttributes()

    attrs.st_mode = st_mode
    attrs.st_size = size

    attrs.st_atime_ns = stamp
    attrs.st_ctime_ns = stamp
    attrs.st_mtime_ns = stamp

    attrs.st_gid = os.getgid()
    attrs.st_uid = os.getuid()

    attrs.entry_timeout = timeout
    attrs.attr_timeout = timeout

    if inode is not None:
        attrs.st_ino = inode

    return attrs
