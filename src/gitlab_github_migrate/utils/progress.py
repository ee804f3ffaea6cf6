"""Console progress output for migration runs.

Lines follow a fixed shape so existing log scrapers keep working::

    [Labels]
    Count: 2

    Label: [bug]
        Creation GitHub : OK.
    Label: [feature]
        Creation GitHub : KO ! (Validation failed: already_exists)
"""

from typing import Optional

from rich.console import Console, ConsoleOptions, RenderResult
from rich.segment import Segment

OK = 'OK'
NO_RESULT = '-'
CLOSED = ' - Closed'
DONE = '.'


class ProtocolLine:
    """Text emitted verbatim: never wrapped, cropped or tab-expanded."""

    def __init__(self, text: str, style: Optional[str] = None):
        self.text = text
        self.style = style

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Segment(self.text, console.get_style(self.style) if self.style else None)


class ProgressReporter:
    """Writes the per-batch, per-item progress protocol to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def _write(self, text: str, style: Optional[str] = None, end: str = '\n') -> None:
        # Console width never applies to protocol lines
        self.console.print(ProtocolLine(text + end, style), soft_wrap=True)

    def batch_header(self, entity_kind: str) -> None:
        self._write(f'[{entity_kind}]', style='bold cyan')

    def batch_count(self, count: int) -> None:
        self._write(f'Count: {count}')
        self._write('')

    def item(self, entity_kind: str, display_key: str) -> None:
        singular = entity_kind[:-1] if entity_kind.endswith('s') else entity_kind
        self._write(f'{singular}: [{display_key}]')

    def begin_write(self) -> None:
        self._write('\tCreation GitHub : ', end='')

    def token(self, token: str) -> None:
        style = 'green' if token.startswith(OK) else None
        self._write(token, style=style, end='')

    def waiting(self, seconds: float, reason: str = 'Rate limit exceeded') -> None:
        self._write(f'{reason}. Waiting for {seconds:.0f} seconds... ', style='yellow', end='')

    def failure(self, message: str) -> None:
        self._write(f'KO ! ({message})', style='red', end='')

    def end_item(self) -> None:
        self._write('')

    def batch_error(self, entity_kind: str, message: str) -> None:
        self._write(f'Failed to fetch {entity_kind.lower()}: {message}', style='red')
