"""
ConfigLoader module for resolving SDK configuration from mappings, files and the environment
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .access_token import AccessToken
from .exceptions import ConfigurationError, InvalidAccessTokenError


logger = logging.getLogger(__name__)

APP_ID_ENV_NAME = 'FACEBOOK_APP_ID'
APP_SECRET_ENV_NAME = 'FACEBOOK_APP_SECRET'
DEFAULT_GRAPH_VERSION = 'v2.10'

TRUE_STRINGS = ('true', 'yes', 'on', '1')
FALSE_STRINGS = ('false', 'no', 'off', '0', '')


@dataclass(frozen=True)
class GraphConfig:
    """Resolved configuration for a GraphAPI instance"""
    app_id: str
    app_secret: str
    default_graph_version: str = DEFAULT_GRAPH_VERSION
    enable_beta_mode: bool = False
    default_access_token: Optional[AccessToken] = None
    http_client_handler: Any = None
    persistent_data_handler: Any = None
    url_detection_handler: Any = None
    persistent_data_path: str = ':memory:'

    RECOGNISED_KEYS = (
        'app_id',
        'app_secret',
        'default_graph_version',
        'enable_beta_mode',
        'default_access_token',
        'http_client_handler',
        'persistent_data_handler',
        'url_detection_handler',
        'persistent_data_path'
    )

    @classmethod
    def from_mapping(cls, config: Optional[Mapping[str, Any]] = None,
                     environ: Optional[Mapping[str, str]] = None) -> 'GraphConfig':
        """
        Build a GraphConfig, falling back to the environment for app credentials

        Args:
            config: Mapping of configuration options; unknown keys are ignored
            environ: Environment to read fallbacks from, os.environ by default

        Returns:
            GraphConfig with every option resolved

        Raises:
            ConfigurationError: If app_id or app_secret cannot be resolved
            InvalidAccessTokenError: If default_access_token is not a str or AccessToken
        """
        config = dict(config or {})
        environ = environ if environ is not None else os.environ

        unknown_keys = [key for key in config if key not in cls.RECOGNISED_KEYS]
        if unknown_keys:
            logger.debug(f"Ignoring unrecognised configuration keys: {', '.join(unknown_keys)}")

        app_id = config.get('app_id') or environ.get(APP_ID_ENV_NAME)
        if not app_id:
            raise ConfigurationError(
                f"Required 'app_id' key not supplied in config and could not find "
                f"fallback environment variable '{APP_ID_ENV_NAME}'",
                slot='app_id'
            )

        app_secret = config.get('app_secret') or environ.get(APP_SECRET_ENV_NAME)
        if not app_secret:
            raise ConfigurationError(
                f"Required 'app_secret' key not supplied in config and could not find "
                f"fallback environment variable '{APP_SECRET_ENV_NAME}'",
                slot='app_secret'
            )

        default_access_token = config.get('default_access_token')
        if default_access_token is not None:
            default_access_token = cls._coerce_default_access_token(default_access_token)

        return cls(
            app_id=str(app_id),
            app_secret=str(app_secret),
            default_graph_version=config.get('default_graph_version') or DEFAULT_GRAPH_VERSION,
            enable_beta_mode=cls._coerce_flag('enable_beta_mode', config.get('enable_beta_mode', False)),
            default_access_token=default_access_token,
            http_client_handler=config.get('http_client_handler'),
            persistent_data_handler=config.get('persistent_data_handler'),
            url_detection_handler=config.get('url_detection_handler'),
            persistent_data_path=config.get('persistent_data_path') or ':memory:'
        )

    @staticmethod
    def _coerce_default_access_token(token: Any) -> AccessToken:
        if isinstance(token, (str, AccessToken)):
            return AccessToken.coerce(token)
        raise InvalidAccessTokenError(
            f"The default access token must be of type str or AccessToken, "
            f"got {type(token).__name__}",
            value=token
        )

    @staticmethod
    def _coerce_flag(slot: str, value: Any) -> bool:
        """Accept a bool, or the usual true/false spellings found in config files"""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            normalised = value.strip().lower()
            if normalised in TRUE_STRINGS:
                return True
            if normalised in FALSE_STRINGS:
                return False
        raise ConfigurationError(
            f"The {slot} option must be a boolean, got {value!r}",
            slot=slot,
            value=value
        )


class ConfigLoader:
    """Loads SDK options from TOML or YAML files"""

    SECTION_NAME = 'graph_sdk'

    @staticmethod
    def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load the [graph_sdk] table from a TOML or YAML file

        Args:
            config_path: Path to a .toml, .yml or .yaml file

        Returns:
            Dictionary of raw configuration options

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file cannot be parsed or the section is missing
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            config_data = ConfigLoader._load_toml(config_path)
        else:
            config_data = ConfigLoader._load_yaml(config_path)

        section = config_data.get(ConfigLoader.SECTION_NAME)
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"Missing [{ConfigLoader.SECTION_NAME}] section in {config_path}"
            )

        logger.info(f"Loaded configuration from {config_path}")
        return section

    @staticmethod
    def load_graph_config(config_path: Union[str, Path],
                          environ: Optional[Mapping[str, str]] = None) -> GraphConfig:
        """Load a file and resolve it into a GraphConfig"""
        return GraphConfig.from_mapping(ConfigLoader.load_config_file(config_path), environ)

    @staticmethod
    def _load_toml(config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'rb') as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e

    @staticmethod
    def _load_yaml(config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
