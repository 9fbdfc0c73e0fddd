class CodePushDemoError(Exception):
    """Base class for failures the CLI reports without a traceback."""


class CodePushError(CodePushDemoError):
    """`code-push` failed or returned output we can't use."""


class LinkError(CodePushDemoError):
    """The interactive link session did not complete."""
