"""Process exit codes.

Every command ends with one of these codes so release scripts and CI jobs
can tell a bad invocation from a failed build or an unreachable download.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad arguments, missing option, unknown task) and
      availability gaps after a release
    - 2: Environment error (invalid config file, no TTY for questions)
    - 3: Build error (build, zip or commit failed)
    - 4: Network error (upload, manifest or purge failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
