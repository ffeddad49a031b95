from timelens.config.manager import ConfigManager

__all__ = ['ConfigManager']
