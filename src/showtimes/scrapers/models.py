"""Data models for scrapers."""

from dataclasses import dataclass, field
from datetime import date, datetime

from showtimes.utils.text import FORMATS


@dataclass
class RawShowtime:
    """A single showtime exactly as the site prints it."""

    time: str  # e.g. "7:30pm", "7:00p", "3:00 PM"
    raw_date: object | None = None  # Site-native date token; None → use the listing's
    attribute: str = ""  # Free-text tag next to this showtime ("OPEN CAPS", "29% off")


@dataclass
class RawListing:
    """
    Unnormalised listing pulled out of one theatre page.

    Ephemeral: produced and consumed within a single scrape run. The
    EventTransformer turns it into CanonicalEvents.
    """

    title: str  # Title as it appears on the site, suffixes and all
    showtimes: list[RawShowtime] = field(default_factory=list)
    raw_date: object | None = None  # Site-native date token shared by all showtimes
    image_url: str | None = None
    attributes: list[str] = field(default_factory=list)  # Listing-wide free-text tags

    @property
    def times(self) -> list[str]:
        return [showtime.time for showtime in self.showtimes]


@dataclass
class CanonicalEvent:
    """
    Normalised showtime record, the unit of persistence.

    One event per (theatre, date, title) within a site's run, with all of
    that day's showtimes merged into ``times``.
    """

    date: date  # Theatre-local calendar day, no time or timezone
    title: str  # Cleaned display title
    original_title: str  # Untouched source title
    times: list[str]  # Site-native showtime strings, never empty
    theatre: str
    format: str = "Digital"
    image_url: str = ""
    accessibility: list[str] = field(default_factory=list)
    discount: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate the invariants every persisted event must satisfy."""
        if isinstance(self.date, datetime) or not isinstance(self.date, date):
            raise ValueError("date must be a calendar date, not a datetime")
        if not self.times:
            raise ValueError("times must not be empty")
        if self.format not in FORMATS:
            raise ValueError(f"format must be one of {FORMATS}, got {self.format!r}")

    @property
    def sort_key(self) -> tuple[date, str]:
        return (self.date, self.title)

    def to_dict(self) -> dict:
        """JSON shape shared with the API and the JSON file sink."""
        return {
            "date": self.date.isoformat(),
            "title": self.title,
            "originalTitle": self.original_title,
            "times": list(self.times),
            "format": self.format,
            "imageUrl": self.image_url or "",
            "theatre": self.theatre,
            "accessibility": list(self.accessibility),
            "discount": list(self.discount),
        }
