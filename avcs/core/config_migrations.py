"""
Configuration migration system for handling renamed/moved settings.

Legacy keys found in base_config.json are rewritten to their current names
when the config is loaded.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger("avcs.config_migrations")


@dataclass
class ConfigMigration:
    """Represents a single configuration migration."""
    old_key: str
    new_key: str
    version: str
    description: str
    transform: Optional[Callable[[Any], Any]] = None  # Optional value transformation


class ConfigMigrationManager:
    """Manages configuration migrations across versions."""

    def __init__(self):
        self.migrations: Dict[str, ConfigMigration] = {}
        self._register_migrations()

    def _register_migrations(self):
        """Register all known configuration migrations."""
        self.register_migration(
            ConfigMigration(
                old_key="ChannelStatus.show_player_counts",
                new_key="ChannelStatus.include_counts",
                version="1.2.0",
                description="Renamed show_player_counts to include_counts"
            )
        )
        self.register_migration(
            ConfigMigration(
                old_key="ChannelStatus.show_all_games",
                new_key="ChannelStatus.list_all_games",
                version="1.2.0",
                description="Renamed show_all_games to list_all_games"
            )
        )

    def register_migration(self, migration: ConfigMigration):
        """Register a single migration."""
        self.migrations[migration.old_key] = migration
        logger.debug(f"Registered migration: {migration.old_key} → {migration.new_key} (v{migration.version})")

    def migrate_config(self, config_data: Dict[str, Any]) -> tuple[Dict[str, Any], list[str]]:
        """
        Migrate configuration data from old keys to new keys.

        An explicitly set new key wins over a legacy key carrying a
        different value; the legacy key is dropped either way.

        Args:
            config_data: Flat configuration dictionary ("Cog.key" -> value)

        Returns:
            Tuple of (migrated_config_data, list_of_applied_migrations)
        """
        migrated = config_data.copy()
        applied_migrations = []

        for old_key, migration in self.migrations.items():
            if old_key not in migrated:
                continue

            old_value = migrated.pop(old_key)
            new_value = migration.transform(old_value) if migration.transform else old_value

            if migration.new_key not in migrated:
                migrated[migration.new_key] = new_value

            logger.info(
                f"[Config Migration v{migration.version}] "
                f"Migrated '{old_key}' → '{migration.new_key}': {old_value}"
            )

            applied_migrations.append(
                f"{old_key} → {migration.new_key} (v{migration.version}): {migration.description}"
            )

        return migrated, applied_migrations


# Global migration manager instance
_migration_manager = ConfigMigrationManager()


def migrate_config(config_data: Dict[str, Any]) -> tuple[Dict[str, Any], list[str]]:
    """Migrate config data using the global manager."""
    return _migration_manager.migrate_config(config_data)
