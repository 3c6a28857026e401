"""
Symbol debouncer.

Each 100 ms tone spans about four classifier blocks, so the raw stream
repeats every symbol three or four times and is sprinkled with single-block
glitches at tone edges. The debouncer confirms a symbol once it has been seen
`run_length` times in a row, emitting it on the next arrival:

    raw:     A A A A A A A A
    emitted:       ^       ^

A change of symbol restarts the run at 1 and is not emitted until it, too,
has built a full run.
"""

import logging
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

# Initial value, never equal to a real symbol
_UNSET = object()


class SymbolDebouncer:
    """Collapses runs of identical raw symbols into confirmed symbols."""

    def __init__(self, run_length: int = 3):
        if run_length <= 0:
            raise ValueError(f"run_length must be positive, got {run_length}")
        self.run_length = run_length
        self.current_value = _UNSET
        self.run_count = 0

    def push(self, code: str) -> Optional[str]:
        """
        Feed one raw symbol.

        Returns:
            The confirmed symbol emitted by this arrival, or None
        """
        logger.debug(f"raw symbol <{code}>, current <{self._current_repr()}> count {self.run_count}")

        emitted = None
        if self.run_count == self.run_length:
            emitted = self.current_value
            if code == self.current_value:
                self.run_count = 0
            else:
                self.run_count = 1
                self.current_value = code
        elif code == self.current_value:
            self.run_count += 1
        else:
            self.current_value = code
            self.run_count = 1

        return emitted

    def process_stream(self, codes: Iterable[str]) -> Iterator[str]:
        """Debounce a whole raw stream, yielding confirmed symbols."""
        for code in codes:
            emitted = self.push(code)
            if emitted is not None:
                yield emitted

    def _current_repr(self) -> str:
        return '-' if self.current_value is _UNSET else self.current_value
