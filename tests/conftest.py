import subprocess

import pytest


class CommandRecorder:
    """Stands in for run_command; answers from a table keyed on argv prefixes."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = responses or {}

    def __call__(self, command, cwd=None, check=True, echo_output=True):
        self.calls.append(list(command))
        for prefix, (returncode, stdout, stderr) in self.responses.items():
            if tuple(command[:len(prefix)]) == prefix:
                if check and returncode != 0:
                    raise subprocess.CalledProcessError(returncode, command, stdout, stderr)
                return subprocess.CompletedProcess(command, returncode, stdout, stderr)
        return subprocess.CompletedProcess(command, 0, "", "")


@pytest.fixture
def recorder():
    return CommandRecorder()
