import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)

METADATA_CHANGED = "submission.metadata_changed"
FILE_CHANGED = "submission_file.changed"
FILE_DELETED = "submission_file.deleted"
SUBMISSION_DELETED = "submission.deleted"
PUBLICATION_UNPUBLISHED = "publication.unpublished"
RETRIEVE_RESULTS = "submission_search.retrieve_results"

Handler = Callable[..., Any]


class HookRegistry:
    """In-process hook dispatch: handlers run synchronously in registration order."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)

    def register(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)
        logger.debug(f"Registered handler {getattr(handler, '__name__', handler)!s} for {name}")

    def handlers(self, name: str) -> List[Handler]:
        return list(self._handlers.get(name, []))

    def call(self, name: str, *args: Any, **kwargs: Any) -> List[Any]:
        return [handler(*args, **kwargs) for handler in self.handlers(name)]
