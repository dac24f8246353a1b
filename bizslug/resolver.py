"""
Unique slug resolution.

Turns a display name into a slug that no other establishment holds,
probing an injected existence check and appending "-2", "-3", ... until a
free candidate turns up. After MAX_ATTEMPTS collisions it gives up on the
counter and appends the last 8 digits of the millisecond clock instead.

Responsibilities:
- Normalize and validate the base slug.
- Walk the disambiguation sequence in order, one probe at a time.

Non-Responsibilities:
- No writes. Persisting the slug belongs to the caller.
- No handling of store errors; they propagate unchanged.
"""

from typing import Any, Callable, Hashable, Optional

from .logger import StructuredLogger, get_logger
from .normalize import normalize_slug, now_millis
from .schema import is_valid_slug

MAX_ATTEMPTS = 1000

ExistsCheck = Callable[[str, Optional[Hashable]], bool]


class MalformedBaseError(ValueError):
    """Raised when the normalized base slug does not pass validation."""

    def __init__(self, base: str):
        super().__init__(f"Malformed base slug: {base!r}")
        self.base = base


class SlugResolver:
    """
    Resolves unique slugs against an existence check.

    Args:
        exists: Callable(candidate, exclude_key) -> bool. Must return False
            for slugs held only by the record identified by exclude_key.
        clock: Millisecond clock used for padding and the ceiling fallback
        max_attempts: Counter value after which the timestamp fallback is used
        logger: Logger to report to (default: global logger)
    """

    def __init__(
        self,
        exists: ExistsCheck,
        clock: Callable[[], int] = now_millis,
        max_attempts: int = MAX_ATTEMPTS,
        logger: Optional[StructuredLogger] = None,
    ):
        self.exists = exists
        self.clock = clock
        self.max_attempts = max_attempts
        self.logger = logger or get_logger()

    def resolve(self, raw_name: Any, exclude_key: Optional[Hashable] = None) -> str:
        """
        Return a slug for raw_name that is free at the time of the last probe.

        Raises:
            MalformedBaseError: If the normalized base fails is_valid_slug
                (e.g. the padded form of a one or two character name)
        """
        base = normalize_slug(raw_name, clock=self.clock)
        if not is_valid_slug(base):
            self.logger.error("Normalized base slug is malformed", base=base)
            raise MalformedBaseError(base)

        candidate = base
        counter = 1
        fell_back = False

        while self._probe(candidate, exclude_key):
            counter += 1
            candidate = f"{base}-{counter}"

            if counter > self.max_attempts:
                # Not re-checked against the store
                candidate = f"{base}-{str(self.clock())[-8:]}"
                fell_back = True
                self.logger.warning(
                    "Too many slug collisions, using timestamp suffix",
                    base=base,
                    slug=candidate,
                    attempts=counter,
                )
                break

        self.logger.record_resolution(fell_back=fell_back)
        self.logger.debug("Slug resolved", slug=candidate, attempts=counter)
        return candidate

    def _probe(self, candidate: str, exclude_key: Optional[Hashable]) -> bool:
        taken = bool(self.exists(candidate, exclude_key))
        self.logger.record_exists_check(taken)
        if taken:
            self.logger.debug("Slug collision", slug=candidate)
        return taken


def resolve_unique_slug(
    raw_name: Any,
    exists: ExistsCheck,
    exclude_key: Optional[Hashable] = None,
) -> str:
    """One-off resolution with default clock and ceiling."""
    return SlugResolver(exists).resolve(raw_name, exclude_key=exclude_key)
