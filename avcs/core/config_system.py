"""
Configuration System

Declarative, self-documenting configuration where cogs define their own
config schemas using dataclasses. Values resolve through the hierarchy
default -> base_config.json -> environment variable. The file is read once
at startup; legacy keys in it are migrated on load.

Design decisions:
- Nested JSON format: {"CogName": {"key": value}}
- Property access through ConfigProxy: cfg = manager.for_cog("ChannelStatus")
- Invalid file or environment values are logged and fall back to the layer below
- Settings are process-wide; there are no per-guild overrides
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from avcs.core.config_migrations import migrate_config

logger = logging.getLogger("avcs.config_system")

# Config file path
BASE_CONFIG_FILE = Path("data/config/base_config.json")

# Legacy environment variable names
ENV_VAR_MAPPINGS = {
    ("System", "log_level"): "LOG_LEVEL",
    ("ChannelStatus", "include_counts"): "SHOW_PLAYER_COUNTS",
    ("ChannelStatus", "list_all_games"): "SHOW_ALL_GAMES",
}

TRUE_STRINGS = ("true", "1", "yes", "on")


def parse_env_value(value_type: Type, raw: str) -> Any:
    """Split list-typed environment values; other types are coerced by ConfigField."""
    if value_type == list:
        return [v.strip() for v in raw.split(',') if v.strip()]
    return raw


@dataclass
class ConfigField:
    """
    Metadata for a single configuration field.

    Attributes:
        name: Field name (e.g., "include_counts")
        type: Python type (bool, int, float, str, etc.)
        default: Default value
        description: Human-readable description
        category: Grouping category (e.g., "Formatting", "Admin/System")
        min_value: Minimum value (for numeric types)
        max_value: Maximum value (for numeric types)
        choices: List of valid choices (for enums)
        validator: Custom validation function (value -> (bool, error_msg))
        env_only: Whether this field should ONLY be read from environment variables (never saved to JSON)
    """
    name: str
    type: Type
    default: Any
    description: str
    category: str
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    choices: Optional[List[Any]] = None
    validator: Optional[Callable[[Any], Tuple[bool, str]]] = None
    env_only: bool = False

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a value against this field's constraints.

        Returns:
            (is_valid, error_message)
        """
        # Type validation
        if not isinstance(value, self.type):
            try:
                value = self.coerce(value)
            except (ValueError, TypeError):
                return False, f"Expected {self.type.__name__}, got {type(value).__name__}"

        # Range validation for numeric types
        if self.min_value is not None and value < self.min_value:
            return False, f"Value {value} below minimum {self.min_value}"

        if self.max_value is not None and value > self.max_value:
            return False, f"Value {value} above maximum {self.max_value}"

        # Choice validation
        if self.choices is not None and value not in self.choices:
            return False, f"Value {value} not in valid choices: {self.choices}"

        # Custom validator
        if self.validator is not None:
            is_valid, error_msg = self.validator(value)
            if not is_valid:
                return False, error_msg

        return True, None

    def coerce(self, value: Any) -> Any:
        """Convert a value to this field's type ("false" -> False for bools)."""
        if isinstance(value, self.type):
            return value
        if self.type == bool and isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in TRUE_STRINGS:
                return True
            if lowered in ("false", "0", "no", "off"):
                return False
            raise ValueError(f"Cannot interpret {value!r} as bool")
        return self.type(value)


@dataclass
class CogConfigSchema:
    """
    Configuration schema for a cog.

    Attributes:
        cog_name: Name of the cog (e.g., "ChannelStatus")
        fields: Dictionary of field_name -> ConfigField
    """
    cog_name: str
    fields: Dict[str, ConfigField] = field(default_factory=dict)

    @classmethod
    def from_dataclass(cls, cog_name: str, config_class: Type) -> "CogConfigSchema":
        """
        Extract schema from a config dataclass.

        Args:
            cog_name: Name of the cog
            config_class: Dataclass with config fields

        Returns:
            CogConfigSchema instance
        """
        from dataclasses import fields as dataclass_fields

        schema = cls(cog_name=cog_name)

        for dc_field in dataclass_fields(config_class):
            # Metadata added via config_field() helper
            metadata = dc_field.metadata if dc_field.metadata else {}

            config_field_obj = ConfigField(
                name=dc_field.name,
                type=dc_field.type,
                default=dc_field.default,
                description=metadata.get("description", ""),
                category=metadata.get("category", "General"),
                min_value=metadata.get("min_value"),
                max_value=metadata.get("max_value"),
                choices=metadata.get("choices"),
                validator=metadata.get("validator"),
                env_only=metadata.get("env_only", False)
            )

            schema.fields[dc_field.name] = config_field_obj

        return schema


class ConfigProxy:
    """
    Proxy object that provides property access to config values.

    cfg = manager.for_cog("ChannelStatus"); counts = cfg.include_counts
    """

    def __init__(self, manager: "ConfigManager", cog_name: str):
        self._manager = manager
        self._cog_name = cog_name

    def __getattr__(self, name: str) -> Any:
        """Allow property access: cfg.include_counts"""
        if name.startswith("_"):
            return object.__getattribute__(self, name)

        return self._manager.get(self._cog_name, name)

    def __setattr__(self, name: str, value: Any):
        """Allow property setting: cfg.include_counts = False"""
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            success, error = self._manager.set(self._cog_name, name, value)
            if not success:
                raise ValueError(f"Failed to set {name}: {error}")


class ConfigManager:
    """
    Central configuration manager.

    Manages config schemas and global overrides, and provides a unified API
    for config access with hierarchy: default -> global -> environment
    """

    def __init__(self):
        """Initialize the config manager."""
        self.schemas: Dict[str, CogConfigSchema] = {}
        self.global_overrides: Dict[str, Dict[str, Any]] = {}  # {cog_name: {key: value}}
        self._cache: Dict[Tuple[str, str], Any] = {}  # (cog, key) -> value

        self._load_global_config()

    def register_schema(self, cog_name: str, schema: CogConfigSchema):
        """Register a cog's config schema."""
        self.schemas[cog_name] = schema
        self._cache = {k: v for k, v in self._cache.items() if k[0] != cog_name}
        logger.info(f"Registered config schema for {cog_name} ({len(schema.fields)} fields)")

    def get(self, cog_name: str, key: str) -> Any:
        """
        Get config value with hierarchy: default -> global -> environment.

        Global and environment values are validated against the field; an
        invalid value is logged and the next lower layer is used instead.

        Args:
            cog_name: Name of the cog
            key: Config key

        Returns:
            Config value (with hierarchy applied), None for unknown keys
        """
        cache_key = (cog_name, key)
        if cache_key in self._cache:
            return self._cache[cache_key]

        if cog_name not in self.schemas:
            logger.error(f"ERROR: Invalid config cog '{cog_name}', using None")
            return None

        schema = self.schemas[cog_name]
        if key not in schema.fields:
            logger.error(f"ERROR: Invalid config '{key}' for cog '{cog_name}', using None")
            return None

        field_meta = schema.fields[key]
        value = field_meta.default

        # Global override (from JSON file)
        if not field_meta.env_only:
            cog_overrides = self.global_overrides.get(cog_name, {})
            if key in cog_overrides:
                value = self._checked(field_meta, cog_overrides[key], str(BASE_CONFIG_FILE), value)

        # Environment variable override
        env_var_name = self.env_var_name(cog_name, key)
        env_value = os.getenv(env_var_name)
        if env_value is not None:
            value = self._checked(field_meta, parse_env_value(field_meta.type, env_value), env_var_name, value)

        self._cache[cache_key] = value

        return value

    @staticmethod
    def _checked(field_meta: ConfigField, candidate: Any, source: str, fallback: Any) -> Any:
        """Coerced candidate if it passes validation, otherwise fallback."""
        is_valid, error = field_meta.validate(candidate)
        if not is_valid:
            logger.error(f"ERROR: Invalid config '{field_meta.name}' from {source}: {candidate!r} ({error}), using {fallback!r}")
            return fallback
        return field_meta.coerce(candidate)

    def set(self, cog_name: str, key: str, value: Any) -> Tuple[bool, Optional[str]]:
        """
        Set config value with validation.

        Returns:
            (success, error_message)
        """
        if cog_name not in self.schemas:
            return False, f"Unknown cog: {cog_name}"

        schema = self.schemas[cog_name]
        if key not in schema.fields:
            return False, f"Unknown config key: {key}"

        field_meta = schema.fields[key]

        if field_meta.env_only:
            return False, f"Field '{key}' can only be set via environment variables (.env file)"

        is_valid, error = field_meta.validate(value)
        if not is_valid:
            logger.error(f"ERROR: Invalid config '{key}': {value} ({error}), keeping current value")
            return False, error

        value = field_meta.coerce(value)

        self.global_overrides.setdefault(cog_name, {})[key] = value
        self._cache.pop((cog_name, key), None)

        return True, None

    def for_cog(self, cog_name: str) -> ConfigProxy:
        """
        Get a config proxy for property access.

        Example:
            cfg = manager.for_cog("ChannelStatus")
            counts = cfg.include_counts
        """
        return ConfigProxy(self, cog_name)

    @staticmethod
    def env_var_name(cog_name: str, key: str) -> str:
        """Environment variable consulted for a setting (e.g. CHANNELSTATUS_ENABLED)."""
        return ENV_VAR_MAPPINGS.get((cog_name, key), f"{cog_name.upper()}_{key.upper()}")

    def _load_global_config(self):
        """Load global config from base_config.json."""
        if not BASE_CONFIG_FILE.exists():
            logger.info("No base config file found, using defaults")
            self.global_overrides = {}
            return

        try:
            with open(BASE_CONFIG_FILE, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            # Migrations work on the flat "Cog.key" format
            flat_config = self._flatten_config(config_data)
            migrated_flat, applied = migrate_config(flat_config)

            if applied:
                logger.info(f"Applied {len(applied)} config migrations to global config:")
                for migration in applied:
                    logger.info(f"  - {migration}")

                config_data = self._unflatten_config(migrated_flat)

                with open(BASE_CONFIG_FILE, 'w', encoding='utf-8') as f:
                    json.dump(config_data, f, indent=2, ensure_ascii=False)

            self.global_overrides = config_data
            logger.info(f"Loaded global config ({len(self.global_overrides)} cogs)")
        except Exception as e:
            logger.error(f"Failed to load global config: {e}")
            self.global_overrides = {}

    def _flatten_config(self, nested_config: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Flatten nested config to migration format.

        Input:  {"ChannelStatus": {"show_all_games": true}}
        Output: {"ChannelStatus.show_all_games": true}
        """
        flat = {}
        for cog_name, cog_config in nested_config.items():
            if isinstance(cog_config, dict):
                for key, value in cog_config.items():
                    flat[f"{cog_name}.{key}"] = value
        return flat

    def _unflatten_config(self, flat_config: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """
        Unflatten config from migration format back to nested.

        Input:  {"ChannelStatus.list_all_games": true}
        Output: {"ChannelStatus": {"list_all_games": true}}
        """
        nested = {}
        for flat_key, value in flat_config.items():
            if "." in flat_key:
                cog_name, key = flat_key.split(".", 1)
                nested.setdefault(cog_name, {})[key] = value
        return nested
