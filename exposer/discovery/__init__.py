from .scanner import PluginScanner
from .store import DiscoveryStore, target_params_for

__all__ = ["DiscoveryStore", "PluginScanner", "target_params_for"]
