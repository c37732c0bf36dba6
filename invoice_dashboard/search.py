import asyncio
from typing import Callable, Dict, Mapping, Optional
from urllib.parse import urlencode

SEARCH_DEBOUNCE_SECONDS = 0.3


def search_params(params: Mapping[str, str], query: str) -> Dict[str, str]:
    """Parameters for a new search: back to page 1, ``query`` dropped when empty."""
    updated = dict(params)
    updated["page"] = "1"
    if query:
        updated["query"] = query
    else:
        updated.pop("query", None)
    return updated


class SearchController:
    """Debounced search box state.

    ``on_input`` must be called from a running event loop. Only the last
    value typed within ``delay`` seconds reaches ``replace``, which should
    swap the current location rather than push a history entry.
    """

    def __init__(
        self,
        pathname: str,
        params: Mapping[str, str],
        replace: Callable[[str], None],
        delay: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self.pathname = pathname
        self.params = dict(params)
        self.replace = replace
        self.delay = delay
        self._pending: Optional[asyncio.TimerHandle] = None

    def on_input(self, text: str) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.delay, self._dispatch, text)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _dispatch(self, query: str) -> None:
        self._pending = None
        self.params = search_params(self.params, query)
        self.replace(f"{self.pathname}?{urlencode(self.params)}")
