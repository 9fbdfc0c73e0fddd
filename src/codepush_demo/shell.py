import shlex
import subprocess


def format_command(command) -> str:
    if isinstance(command, str):
        return command
    return shlex.join(command)


def run_command(command, cwd=None, check=True, echo_output=True):
    '''Run a command and return the result.

    `command` is an argv list, or a string which is then run through the shell.
    Output is captured; stdout is echoed unless `echo_output` is False.
    '''
    print(f"Running: {format_command(command)}")
    try:
        result = subprocess.run(
            command,
            shell=isinstance(command, str),
            cwd=cwd,
            check=check,
            capture_output=True,
            text=True,
        )
        if echo_output and result.stdout:
            print(result.stdout)
        return result
    except subprocess.CalledProcessError as e:
        print(f"Error running command: {e}")
        if e.stderr:
            print(f"Error output: {e.stderr}")
        raise
