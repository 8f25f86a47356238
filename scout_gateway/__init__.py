from .app import create_app
from .config_loader import load_config_from_env
from .state import GatewayConfig

__all__ = ["GatewayConfig", "create_app", "load_config_from_env"]
