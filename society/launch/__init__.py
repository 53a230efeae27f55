"""Launch state machine and the contracts of its collaborators."""

from society.launch.contracts import (
    PrefetchJob,
    ProfileLookup,
    ProfileStatusRecord,
    Session,
    SessionProvider,
    SessionScopedCache,
)
from society.launch.errors import UnauthorizedError, describe_error, is_unauthorized_error
from society.launch.sequencer import LaunchSequencer
from society.launch.state import (
    AccountDeleted,
    AccountDisabled,
    AuthenticatedReady,
    LaunchError,
    LaunchState,
    OnboardingRequired,
    Splash,
    Unauthenticated,
    is_terminal,
)

__all__ = [
    "AccountDeleted",
    "AccountDisabled",
    "AuthenticatedReady",
    "LaunchError",
    "LaunchSequencer",
    "LaunchState",
    "OnboardingRequired",
    "PrefetchJob",
    "ProfileLookup",
    "ProfileStatusRecord",
    "Session",
    "SessionProvider",
    "SessionScopedCache",
    "Splash",
    "UnauthorizedError",
    "Unauthenticated",
    "describe_error",
    "is_terminal",
    "is_unauthorized_error",
]
