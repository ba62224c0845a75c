"""
Exception hierarchy for the integration harness.

All library exceptions inherit from HarnessError for easy catching.
UnexpectedExitCode is the exception: it is an AssertionError so that
test frameworks report it as a test failure rather than an error.
"""


class HarnessError(Exception):
    """Base exception for the integration harness.

    All other library exceptions in this module inherit from this,
    allowing callers to catch any harness error with a single except.
    """
    pass


class IOFailure(HarnessError):
    """Filesystem error while preparing a workspace.

    Raised when:
    - A scratch path is absolute or escapes the workspace root
    - A parent of a scratch path is an existing plain file
    - Writing, copying or chmod-ing a file fails
    - The workspace directory cannot be created

    Never retried: the sandbox is local, a retry would hide a real bug.
    """
    pass


class ResourceNotFound(HarnessError):
    """A logical runfile could not be resolved to an existing path.

    Always a test setup defect.
    """
    pass


class LaunchFailure(HarnessError):
    """The external executable could not be started.

    Raised when:
    - The executable is missing
    - Permission to execute it is denied
    - The working directory does not exist

    Distinct from a nonzero exit code: the tool never ran.
    """
    pass


class ConfigurationError(HarnessError):
    """Error in configuration.

    Raised when:
    - Config file not found
    - Config file is not valid YAML
    - Config validation fails
    """
    pass


class UnexpectedExitCode(AssertionError):
    """A command exited with a different code than the test expected.

    The message is the rendered diagnostic report.

    Attributes:
        expected: The exit code the caller expected
        actual: The exit code the command returned
        report: The DiagnosticReport built for the failure
    """

    def __init__(self, expected, actual, report):
        self.expected = expected
        self.actual = actual
        self.report = report
        super().__init__(report.render())
