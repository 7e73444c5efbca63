from .load import CONFIG_FILE, find_config, load_config
from .model import DEFAULT_CONFIG, TemplarConfig

__all__ = ["CONFIG_FILE", "DEFAULT_CONFIG", "TemplarConfig", "find_config", "load_config"]
