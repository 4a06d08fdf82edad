"""Exception types shared across telebox."""


class TeleboxError(Exception):
    """Base class for telebox errors."""


class PluginValidationError(TeleboxError):
    """A plugin export does not satisfy the plugin contract."""

    def __init__(self, source: str, issues: list[str]):
        self.source = source
        self.issues = list(issues)
        super().__init__(f"{source}: {', '.join(self.issues)}")


class CronExpressionError(TeleboxError, ValueError):
    """A cron expression failed validation."""


class DuplicateCronJobError(TeleboxError):
    """A cron job with the same name is already scheduled."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Cron task "{name}" already exists.')


class ReloadError(TeleboxError):
    """Building a fresh command registry failed; the previous one stays active."""
