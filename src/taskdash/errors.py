"""Exception types for taskdash."""


class TaskdashError(RuntimeError):
    """Base class for fatal taskdash errors."""


class ConfigurationError(TaskdashError):
    """Missing or invalid configuration, or a malformed layout."""


class HookArgumentError(ConfigurationError):
    """Hook invoked with arguments that do not follow the hook protocol."""


class StoreError(TaskdashError):
    """The persisted pane-command map could not be read or written."""


class StoreNotFoundError(StoreError):
    """No pane-command map has been saved yet."""


class ExternalServiceError(TaskdashError):
    """A tmux call failed or returned output we could not use."""
