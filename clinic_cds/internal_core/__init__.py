from .config import CdsConfig, load_config

__all__ = ["CdsConfig", "load_config"]
