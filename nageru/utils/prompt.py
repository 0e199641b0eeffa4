"""Where the first-run bootstrap gets its token and channel from."""

from typing import Optional, Protocol

from rich.console import Console
from rich.prompt import Prompt

from .exceptions import ConfigIOError


class CredentialProvider(Protocol):
    def ask_token(self) -> str: ...

    def ask_channel(self) -> str: ...


class TerminalCredentialProvider:
    """Asks the user on the terminal. The token is not echoed."""

    def __init__(self, console: Optional[Console] = None, config_path=None):
        self.console = console or Console(stderr=True)
        self.config_path = config_path

    def greet(self):
        self.console.print(
            "No config file found. If you have a Slack token that is allowed to upload files, "
            "enter it below and a config will be created for you.",
            markup=False,
        )

    def _ask(self, label: str, password: bool = False) -> str:
        try:
            answer = Prompt.ask(label, console=self.console, password=password)
        except EOFError as e:
            raise ConfigIOError(self.config_path or '<stdin>', e, action='prompt for')
        return (answer or '').strip()

    def ask_token(self) -> str:
        self.greet()
        return self._ask('Token', password=True)

    def ask_channel(self) -> str:
        return self._ask('Channel')


class StaticCredentialProvider:
    """Canned answers, for tests and non-interactive callers."""

    def __init__(self, token: str, channel: str):
        self.token = token
        self.channel = channel

    def ask_token(self) -> str:
        return self.token

    def ask_channel(self) -> str:
        return self.channel
