class StackEnvError(Exception):
    """Base class for all stackenvs errors"""


class ValidationError(StackEnvError):
    """A malformed environment name or package token"""


class NotFoundError(StackEnvError):
    """An environment that was required to exist does not"""


class EnvironmentExistsError(StackEnvError):
    """An environment that was required to be new already exists"""


class ExternalToolError(StackEnvError):
    def __init__(self, msg, command=None, cwd=None, stderr=None):
        self.command = command
        self.cwd = cwd
        self.stderr = stderr
        self.msg = msg
        if command is not None:
            self.msg += f"\nRan command: `{' '.join(str(c) for c in command)}`"
        if cwd is not None:
            self.msg += f"\ncwd: `{cwd}`"
        if stderr:
            self.msg += f"\nError message: {stderr}"
        super().__init__(self.msg)
