"""Human-like pacing for browser navigation.

Bot-defence heuristics flag sessions that act at fixed intervals, so every
navigation step waits a random duration drawn from a named band instead of a
fixed sleep. Policies are data; the Pacer draws from them.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class DelayBand:
    """Uniform delay range in seconds."""

    minimum: float
    maximum: float

    def __post_init__(self) -> None:
        if self.minimum < 0 or self.maximum < self.minimum:
            raise ValueError(f"Invalid delay band {self.minimum}-{self.maximum}")


@dataclass(frozen=True)
class PacingPolicy:
    """Delay bands for each kind of navigation step."""

    action: DelayBand  # between ordinary UI actions
    settle: DelayBand  # after a page load or click, before reading the DOM
    between_pages: DelayBand  # between successive pages/dates of one site
    reading: DelayBand  # simulated reading time on a loaded page
    stall: DelayBand  # extra wait when the page still looks like it's loading
    content_retry: DelayBand  # one more wait before giving up on missing content
    pointer_step: DelayBand = DelayBand(0.01, 0.03)
    click_before: DelayBand = DelayBand(0.1, 0.3)
    click_after: DelayBand = DelayBand(0.2, 0.5)
    pointer_steps: tuple[int, int] = (10, 20)
    pointer_jitter: float = 1.5  # max px offset per pointer step
    simulate_pointer: bool = False  # move the mouse along a path before clicks


DEFAULT_PACING = PacingPolicy(
    action=DelayBand(0.5, 1.5),
    settle=DelayBand(2.0, 3.0),
    between_pages=DelayBand(1.0, 2.5),
    reading=DelayBand(1.0, 2.0),
    stall=DelayBand(3.0, 5.0),
    content_retry=DelayBand(2.0, 4.0),
)

# Squarespace/SiteGround-protected sites block anything quicker than this
CAUTIOUS_PACING = PacingPolicy(
    action=DelayBand(1.0, 3.0),
    settle=DelayBand(5.0, 8.0),
    between_pages=DelayBand(8.0, 15.0),
    reading=DelayBand(2.0, 4.0),
    stall=DelayBand(8.0, 12.0),
    content_retry=DelayBand(3.0, 5.0),
    simulate_pointer=True,
)


class Pacer:
    """
    Draws jittered delays from a PacingPolicy and sleeps for them.

    ``rng`` and ``sleep`` are injectable so tests can run without waiting.
    """

    def __init__(
        self,
        policy: PacingPolicy = DEFAULT_PACING,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.policy = policy
        self._rng = rng or random.Random()
        self._sleep = sleep

    def _band(self, band: DelayBand | str) -> DelayBand:
        return getattr(self.policy, band) if isinstance(band, str) else band

    def draw(self, band: DelayBand | str) -> float:
        """Pick a delay within the band without sleeping."""
        resolved = self._band(band)
        return self._rng.uniform(resolved.minimum, resolved.maximum)

    async def pause(self, band: DelayBand | str) -> float:
        """Sleep for a random duration within the band and return it."""
        delay = self.draw(band)
        await self._sleep(delay)
        return delay

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    def scroll_distance(self, minimum: float, maximum: float) -> float:
        return self._rng.uniform(minimum, maximum)

    def pointer_path(
        self, start: tuple[float, float], end: tuple[float, float]
    ) -> list[tuple[float, float]]:
        """Jittered straight-line path from start to end, ending exactly on end."""
        low, high = self.policy.pointer_steps
        steps = self._rng.randint(low, high)
        jitter = self.policy.pointer_jitter

        path: list[tuple[float, float]] = []
        for i in range(steps + 1):
            progress = i / steps
            x = start[0] + (end[0] - start[0]) * progress
            y = start[1] + (end[1] - start[1]) * progress
            if i < steps:
                x += self._rng.uniform(-jitter, jitter)
                y += self._rng.uniform(-jitter, jitter)
            path.append((x, y))
        return path

    def click_point(self, box: dict[str, float]) -> tuple[float, float]:
        """A point near the centre of a bounding box, off-centre like a real click."""
        offset_x = (self._rng.random() - 0.5) * box["width"] * 0.3
        offset_y = (self._rng.random() - 0.5) * box["height"] * 0.3
        return (
            box["x"] + box["width"] / 2 + offset_x,
            box["y"] + box["height"] / 2 + offset_y,
        )
