"""
Centralized error handling with user-friendly messages and detailed logging.

Status updates run from gateway events, not commands, so most errors end up
in `ErrorHandler.log_error` and are swallowed there. Slash command errors
additionally get an ephemeral reply.
"""

import logging
import traceback
from datetime import datetime, UTC
from enum import Enum

import discord
from discord import app_commands

logger = logging.getLogger("avcs.error_handler")


class ErrorSeverity(Enum):
    """Error severity levels for monitoring."""
    LOW = "low"  # Expected errors (user mistakes)
    MEDIUM = "medium"  # Unexpected but recoverable
    HIGH = "high"  # Service degradation
    CRITICAL = "critical"  # System failure


class ErrorCategory(Enum):
    """Categories for error classification."""
    VOICE = "voice"
    STATUS_UPDATE = "status_update"
    PERMISSION = "permission"
    NETWORK = "network"
    INTERNAL = "internal"
    RATE_LIMIT = "rate_limit"


class BotError(Exception):
    """Base exception for bot errors with user-facing messages."""

    def __init__(
            self,
            user_message: str,
            log_message: str = None,
            category: ErrorCategory = ErrorCategory.INTERNAL,
            severity: ErrorSeverity = ErrorSeverity.MEDIUM,
            original_error: Exception = None
    ):
        self.user_message = user_message
        self.log_message = log_message or user_message
        self.category = category
        self.severity = severity
        self.original_error = original_error
        super().__init__(self.log_message)


class VoiceError(BotError):
    """Errors related to voice channels (e.g. user not connected)."""

    def __init__(self, user_message: str, log_message: str = None):
        super().__init__(
            user_message,
            log_message,
            ErrorCategory.VOICE,
            ErrorSeverity.LOW
        )


class StatusUpdateError(BotError):
    """A voice channel status could not be computed or written."""

    def __init__(self, user_message: str, log_message: str = None, original_error: Exception = None):
        super().__init__(
            user_message,
            log_message,
            ErrorCategory.STATUS_UPDATE,
            ErrorSeverity.MEDIUM,
            original_error
        )


class ErrorHandler:
    """Central error handling with logging and user notifications."""

    # User-friendly messages for common errors
    USER_MESSAGES = {
        "default": "❌ Something went wrong. The issue has been logged.",
        "user_not_in_voice": "⚠️ You need to be in a voice channel first.",
        "permission_denied": "⚠️ I don't have permission to do that.",
        "rate_limited": "⚠️ Slow down! You're doing that too quickly.",
        "network_error": "❌ Network issue detected. Please try again.",
    }

    def __init__(self, max_error_history: int = 100):
        self.error_count = 0
        self.errors_by_category = {}
        self.last_errors = []
        self.max_error_history = max_error_history

    def log_error(
            self,
            error: Exception,
            context: dict = None,
            severity: ErrorSeverity = ErrorSeverity.MEDIUM,
            category: ErrorCategory = ErrorCategory.INTERNAL
    ):
        """Log an error with full context."""

        self.error_count += 1

        cat_name = category.value
        self.errors_by_category[cat_name] = self.errors_by_category.get(cat_name, 0) + 1

        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "error_type": type(error).__name__,
            "severity": severity.value,
            "category": category.value,
            "message": str(error),
        }

        if context:
            log_data["context"] = context

        self.last_errors.append(log_data)
        if len(self.last_errors) > self.max_error_history:
            self.last_errors.pop(0)

        if severity == ErrorSeverity.CRITICAL:
            logger.critical(
                f"CRITICAL ERROR: {error}\n"
                f"Context: {context}\n"
                f"Traceback: {self._format_traceback(error)}"
            )
        elif severity == ErrorSeverity.HIGH:
            logger.error(
                f"HIGH SEVERITY: {error}\n"
                f"Context: {context}\n"
                f"Traceback: {self._format_traceback(error)}"
            )
        elif severity == ErrorSeverity.MEDIUM:
            logger.error(f"Error: {error}\nContext: {context}")
        else:  # LOW
            logger.warning(f"Minor error: {error}\nContext: {context}")

    async def handle_app_command_error(
            self,
            interaction: discord.Interaction,
            error: Exception
    ) -> bool:
        """
        Handle errors raised by slash commands.
        Returns True once the error has been logged and the user notified.
        """
        error = getattr(error, 'original', error)

        context = {
            "command": interaction.command.qualified_name if interaction.command else "unknown",
            "guild": interaction.guild.name if interaction.guild else "DM",
            "guild_id": interaction.guild_id,
            "user": str(interaction.user),
            "user_id": interaction.user.id,
        }

        if isinstance(error, BotError):
            user_message = error.user_message
            self.log_error(error, context, error.severity, error.category)

        elif isinstance(error, app_commands.CommandOnCooldown):
            user_message = f"⏱️ Command on cooldown. Try again in {error.retry_after:.1f}s."
            self.log_error(error, context, ErrorSeverity.LOW, ErrorCategory.RATE_LIMIT)

        elif isinstance(error, (app_commands.MissingPermissions, app_commands.CheckFailure)):
            user_message = "⚠️ You don't have permission to use this command."
            self.log_error(error, context, ErrorSeverity.LOW, ErrorCategory.PERMISSION)

        elif isinstance(error, discord.Forbidden):
            user_message = self.USER_MESSAGES["permission_denied"]
            self.log_error(error, context, ErrorSeverity.MEDIUM, ErrorCategory.PERMISSION)

        elif isinstance(error, discord.HTTPException):
            user_message = self.USER_MESSAGES["network_error"]
            self.log_error(error, context, ErrorSeverity.HIGH, ErrorCategory.NETWORK)

        else:
            user_message = self.USER_MESSAGES["default"]
            self.log_error(error, context, ErrorSeverity.HIGH, ErrorCategory.INTERNAL)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(user_message, ephemeral=True)
            else:
                await interaction.response.send_message(user_message, ephemeral=True)
        except discord.HTTPException as send_error:
            logger.error(f"Failed to send error message: {send_error}")

        return True

    @staticmethod
    def _format_traceback(error: Exception) -> str:
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))


# Global error handler instance
error_handler = ErrorHandler()
