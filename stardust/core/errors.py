# stardust/core/errors.py


class StardustError(Exception):
    """Base class for recoverable errors raised by the points services."""


class OverrideTargetMissing(StardustError, LookupError):
    """An override was requested for a week that has not been computed."""


class InvalidOverride(StardustError, ValueError):
    pass


class FutureMonthError(StardustError, ValueError):
    """Aggregation was requested for a month that has not started yet."""


class InvalidTier(StardustError, ValueError):
    pass


class EnrollmentStateError(StardustError):
    """The requested enrollment transition is not allowed from the current state."""


class PolicyDisabled(StardustError):
    pass
