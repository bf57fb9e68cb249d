from .helpers import ConfigError, load_class_from_mapping
from .types import DEFAULT_SEED, Config, MountOptions
