from .mount import USAGE, add_mount_arguments, create_fs, mount, read_config
from .logger import logger
