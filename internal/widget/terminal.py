"""
Interactive terminal front end for WeatherWidget.

Maps input lines to widget gestures:
    <text>           typing into the search field (refreshes suggestions)
    <empty line>     Enter: look up current query
    <N>              choose N-th suggestion
    /search [text]   search control (optionally typing text first)
    /help            show this help
    /quit            unmount and exit (EOF works too)
"""

import asyncio
import logging
import os
import sys
from typing import Awaitable, Callable, Optional

from .models import UIState
from .render import renderWidget
from .widget import WeatherWidget

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Type a city name to get suggestions, press Enter to search,\n"
    "enter a suggestion number to choose it, /search [city] to search at once, /quit to exit."
)
QUIT_COMMANDS = ("/quit", "/exit")
SEARCH_COMMAND = "/search"
HELP_COMMAND = "/help"

LineReader = Callable[[], Awaitable[Optional[str]]]
Writer = Callable[[str], None]


READ_CHUNK_SIZE = 4096


class StdinLineReader:
    """
    Reads input lines from a file descriptor on the event loop.

    Waiting for input is done with loop.add_reader(), so a pending read is
    cancelled together with its task (Ctrl+C, unmount) and leaves no blocked
    thread behind.
    """

    def __init__(self, fd: Optional[int] = None):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._buffer = b""
        self._eof = False

    async def __call__(self) -> Optional[str]:
        """Read one line without line terminator, None on EOF."""
        while b"\n" not in self._buffer and not self._eof:
            chunk = await self._readChunk()
            if chunk:
                self._buffer += chunk
            else:
                self._eof = True

        if not self._buffer:
            return None
        line, _, self._buffer = self._buffer.partition(b"\n")
        return line.decode("utf-8", errors="replace").rstrip("\r")

    async def _readChunk(self) -> bytes:
        loop = asyncio.get_running_loop()
        readable = loop.create_future()

        def onReadable() -> None:
            if not readable.done():
                readable.set_result(None)

        try:
            loop.add_reader(self.fd, onReadable)
        except PermissionError:
            # Regular file (stdin redirected from file) is always readable
            return os.read(self.fd, READ_CHUNK_SIZE)
        except NotImplementedError:
            # Event loop without add_reader (Windows proactor)
            return await asyncio.to_thread(os.read, self.fd, READ_CHUNK_SIZE)

        try:
            await readable
        finally:
            loop.remove_reader(self.fd)
        return os.read(self.fd, READ_CHUNK_SIZE)


def writeStdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class TerminalFrontend:
    """Line-oriented front end, re-renders widget on every visible state change."""

    def __init__(
        self,
        widget: WeatherWidget,
        readLine: Optional[LineReader] = None,
        write: Writer = writeStdout,
    ):
        self.widget = widget
        self.readLine = readLine if readLine is not None else StdinLineReader()
        self.write = write
        self._lastRendered: Optional[str] = None

    def _onStateChange(self, state: UIState) -> None:
        rendered = renderWidget(state)
        if rendered == self._lastRendered:
            return
        self._lastRendered = rendered
        self.write(f"\n{rendered}\n")

    async def run(self) -> None:
        """Mount widget and process input until /quit or EOF."""
        async with self.widget.mounted():
            # Listener is detached before unmount, state reset on exit is not rendered
            self.widget.addListener(self._onStateChange)
            try:
                self._onStateChange(self.widget.state.copy())
                self.write(f"{HELP_TEXT}\n")
                while True:
                    line = await self.readLine()
                    if line is None or not self.handleLine(line):
                        break
            finally:
                self.widget.removeListener(self._onStateChange)
        logger.debug("Terminal front end stopped")

    def handleLine(self, line: str) -> bool:
        """
        Dispatch one input line to the widget.

        Returns:
            False if user asked to quit, True otherwise
        """
        command = line.strip()

        if command in QUIT_COMMANDS:
            return False

        if command == "":
            self.widget.handleSubmit()
        elif command == HELP_COMMAND:
            self.write(f"{HELP_TEXT}\n")
        elif command == SEARCH_COMMAND or command.startswith(SEARCH_COMMAND + " "):
            text = command[len(SEARCH_COMMAND) :].strip()
            if text:
                self.widget.handleInputChange(text)
            self.widget.handleSubmit()
        elif command.isdigit() and self.widget.state.suggestions:
            suggestions = self.widget.state.suggestions
            index = int(command) - 1
            if 0 <= index < len(suggestions):
                self.widget.handleSuggestionClick(suggestions[index])
            else:
                self.write(f"No suggestion #{command}, choose 1-{len(suggestions)}\n")
        else:
            self.widget.handleInputChange(command)
        return True
