"""Configuration management for the voting toolkit."""

from .config import SystemConfig, ElectionConfig, load_config, save_config

__all__ = ['SystemConfig', 'ElectionConfig', 'load_config', 'save_config']
