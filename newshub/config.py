"""
Configuration management for NewsHub.
"""
import os
import copy
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = 'NEWSHUB_'

# Default configuration
DEFAULT_CONFIG = {
    "http": {
        "timeout": 8,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "max_tries": 1,
        "rate_limit": 0.0,
        "max_backoff": 60.0
    },
    "extraction": {
        "selectors": [
            "article",
            "[role=\"main\"]",
            "[role=\"article\"]",
            ".article-body",
            ".article-content",
            ".post-content",
            ".entry-content",
            ".story-body",
            "main",
            ".content"
        ],
        "min_paragraph_length": 20,
        "min_paragraph_count": 3,
        "min_sentence_length": 50,
        "max_paragraph_length": 1000,
        "max_paragraphs": 25,
        "min_content_length": 100
    },
    "related": {
        "max_keywords": 15,
        "candidate_limit": 6,
        "max_results": 3
    },
    "store": {
        "path": "cache/articles.db"
    },
    "processing": {
        "max_concurrent": 5
    }
}

class Config:
    """
    Configuration manager for NewsHub.
    """
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the Config.
        
        Args:
            config_path: Path to a YAML or JSON configuration file
        """
        self.config_path = config_path
        self.config = self._load_config()
    
    def _load_config(self) -> Dict:
        """
        Load configuration from file, then apply environment overrides.
        
        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        
        if self.config_path:
            try:
                path = Path(self.config_path)
                if path.exists():
                    if path.suffix.lower() in ['.yaml', '.yml']:
                        with open(path, 'r') as f:
                            user_config = yaml.safe_load(f) or {}
                    elif path.suffix.lower() == '.json':
                        with open(path, 'r') as f:
                            user_config = json.load(f)
                    else:
                        raise ValueError(f"Unsupported config file format: {path.suffix}")
                    
                    self._update_dict(config, user_config)
                else:
                    logger.warning(f"Config file {self.config_path} not found, using defaults")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading config from {self.config_path}: {e}")
                logger.error("Using default configuration")
        
        self._override_from_env(config)
        
        return config
    
    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.
        
        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value
    
    def _override_from_env(self, config: Dict, prefix: str = ENV_PREFIX) -> None:
        """
        Override configuration with environment variables.

        ``NEWSHUB_HTTP_TIMEOUT=5`` sets ``http.timeout``. The first underscore
        after the prefix separates the section from the key, so keys that
        contain underscores (``min_content_length``) stay intact.
        
        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in os.environ.items():
            if not key.startswith(prefix) or key == f"{prefix}CONFIG_PATH":
                continue

            parts = key[len(prefix):].lower().split('_', 1)
            if len(parts) != 2 or not all(parts):
                continue
            section, name = parts

            current = config.setdefault(section, {})
            if not isinstance(current, dict):
                continue

            try:
                current[name] = json.loads(value)
            except json.JSONDecodeError:
                # Not valid JSON, keep the raw string
                current[name] = value
    
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        
        Args:
            key: Dot-separated key path (e.g., 'http.timeout')
            default: Default value if key not found
            
        Returns:
            Configuration value
        """
        current = self.config
        
        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        
        return current


# Global configuration instance
config = Config(os.getenv('NEWSHUB_CONFIG_PATH'))

def load_config(config_path: Optional[str] = None) -> Config:
    """
    Replace the global configuration, e.g. from a --config flag.

    Args:
        config_path: Path to a YAML or JSON configuration file

    Returns:
        The new global Config
    """
    global config
    config = Config(config_path or os.getenv('NEWSHUB_CONFIG_PATH'))
    return config

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value.
    
    Args:
        key: Dot-separated key path (e.g., 'http.timeout')
        default: Default value if key not found
        
    Returns:
        Configuration value
    """
    return config.get(key, default)
