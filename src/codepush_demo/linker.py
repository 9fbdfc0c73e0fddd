"""
Scripted answers for interactive CLIs (used for `react-native link`)
"""
import codecs
import os
import queue
import subprocess
import sys
import threading
import time
from typing import List, NamedTuple, Optional

from .config import config
from .errors import LinkError
from .shell import format_command

# -----------------------------------------------------------------------------
# Process management
# -----------------------------------------------------------------------------
spawned_processes = []


def _stop_process(process):
    if process.poll() is None:
        process.terminate()
        try:
            process.wait(timeout=3)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


def cleanup_processes():
    """Clean up all spawned processes."""
    global spawned_processes
    for process in spawned_processes:
        try:
            if process.poll() is None:
                print(f"Terminating process {process.pid}...")
            _stop_process(process)
        except OSError:
            pass
    spawned_processes.clear()


# -----------------------------------------------------------------------------
# Prompt session
# -----------------------------------------------------------------------------
class PromptExchange(NamedTuple):
    expect: str
    reply: str


def _pump_output(stream, chunks: queue.Queue):
    # os.read returns whatever is available; prompts don't end with a newline
    fd = stream.fileno()
    while True:
        try:
            data = os.read(fd, 4096)
        except OSError:
            data = b""
        if not data:
            chunks.put(None)
            return
        chunks.put(data)


class PromptSession:
    """Answer a fixed sequence of prompts from a child process.

    State is the index of the exchange being waited for; it only advances when
    the child's output contains that exchange's `expect` text, at which point
    the reply line is sent. `timeout` bounds each wait.
    """

    def __init__(self, command, exchanges: List[PromptExchange], cwd=None,
                 timeout: float = 300.0, echo: bool = True):
        self.command = command
        self.exchanges = list(exchanges)
        self.cwd = cwd
        self.timeout = timeout
        self.echo = echo
        self.state = 0
        self.returncode: Optional[int] = None
        self.output = ""
        self._buffer = ""
        self._eof = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._chunks: queue.Queue = queue.Queue()
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None

    @property
    def done(self) -> bool:
        return self.state >= len(self.exchanges)

    def _start(self):
        print(f"Running: {format_command(self.command)}")
        self._process = subprocess.Popen(
            self.command,
            shell=isinstance(self.command, str),
            cwd=self.cwd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        spawned_processes.append(self._process)
        self._reader = threading.Thread(
            target=_pump_output, args=(self._process.stdout, self._chunks), daemon=True
        )
        self._reader.start()

    def _read(self, deadline: float, waiting_for: str) -> bool:
        """Pull one chunk of output into the buffer. Returns False at EOF."""
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise LinkError(f"Timed out after {self.timeout:g}s waiting for {waiting_for}")
        try:
            data = self._chunks.get(timeout=remaining)
        except queue.Empty:
            raise LinkError(f"Timed out after {self.timeout:g}s waiting for {waiting_for}")

        if data is None:
            self._eof = True
            text = self._decoder.decode(b"", final=True)
        else:
            text = self._decoder.decode(data)
        if text:
            if self.echo:
                sys.stdout.write(text)
                sys.stdout.flush()
            self._buffer += text
            self.output += text
        return not self._eof

    def _answer(self, exchange: PromptExchange):
        deadline = time.monotonic() + self.timeout
        while exchange.expect not in self._buffer:
            if self._eof:
                raise LinkError(
                    f"`{format_command(self.command)}` finished without asking \"{exchange.expect}\""
                )
            self._read(deadline, f"\"{exchange.expect}\"")

        # only output after the matched prompt counts towards the next one
        end = self._buffer.index(exchange.expect) + len(exchange.expect)
        self._buffer = self._buffer[end:]
        try:
            self._process.stdin.write((exchange.reply + "\n").encode("utf-8"))
            self._process.stdin.flush()
        except OSError as e:
            raise LinkError(f"Could not answer \"{exchange.expect}\": {e}") from e
        self.state += 1

    def _finish(self) -> int:
        try:
            self._process.stdin.close()
        except OSError:
            pass
        deadline = time.monotonic() + self.timeout
        while not self._eof:
            self._read(deadline, "the process to exit")
        try:
            return self._process.wait(timeout=max(deadline - time.monotonic(), 0.1))
        except subprocess.TimeoutExpired:
            raise LinkError(f"Timed out after {self.timeout:g}s waiting for the process to exit")

    def run(self) -> str:
        """Run the session to completion and return everything the child printed."""
        self._start()
        try:
            while not self.done:
                self._answer(self.exchanges[self.state])
            returncode = self._finish()
            self.returncode = returncode
            if returncode != 0:
                # every prompt was answered, so the link itself went through
                print(f"Warning: `{format_command(self.command)}` exited with code {returncode}")
            return self.output
        finally:
            _stop_process(self._process)
            try:
                self._process.stdin.close()
            except OSError:
                pass
            if self._process in spawned_processes:
                spawned_processes.remove(self._process)
            self._reader.join(timeout=1)
            if not self._reader.is_alive():
                self._process.stdout.close()


def drive_prompts(command, exchanges: List[PromptExchange], cwd=None,
                  timeout: float = 300.0, echo: bool = True) -> str:
    return PromptSession(command, exchanges, cwd=cwd, timeout=timeout, echo=echo).run()


def link_exchanges(keys) -> List[PromptExchange]:
    return [
        PromptExchange(config.prompts.android, keys.android),
        PromptExchange(config.prompts.ios, keys.ios),
    ]


def link_codepush(keys, cwd=None, timeout: float = config.link_timeout):
    """Run `react-native link` for the CodePush module, answering its key prompts."""
    print("Linking React Native Module for CodePush...")
    drive_prompts(
        ["react-native", "link", config.packages.code_push],
        link_exchanges(keys),
        cwd=cwd,
        timeout=timeout,
    )
    print("React Native Module for CodePush has been linked \n")
