from .config import ProvisionConfig, load_config
from .paths import config_dir, config_file_path, log_dir

__all__ = ["ProvisionConfig", "config_dir", "config_file_path", "load_config", "log_dir"]
