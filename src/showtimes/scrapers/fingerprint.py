"""Browser session fingerprint profiles.

A profile is plain data: launch flags, context options and the navigator/window
properties to override before any page script runs. ``init_script`` renders
the overrides into the JavaScript that Playwright injects on every document,
so each site can be tuned by swapping profiles rather than editing scrapers.
"""

import json
from dataclasses import dataclass, field
from typing import Any

_DESKTOP_CHROME_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
_WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class FingerprintProfile:
    """Everything about a browser session that a bot-defence script can see."""

    name: str
    user_agent: str = _WINDOWS_UA
    locale: str = "en-US"
    timezone_id: str = "America/Los_Angeles"
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 1366, "height": 768})
    launch_args: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")
    extra_headers: dict[str, str] = field(default_factory=dict)
    # navigator.<key> getters; a None value hides the property (reads as undefined)
    navigator_overrides: dict[str, Any] = field(default_factory=dict)
    # window.<key> assignments
    window_overrides: dict[str, Any] = field(default_factory=dict)
    # Fake devices returned by navigator.mediaDevices.enumerateDevices()
    media_devices: tuple[dict[str, str], ...] = ()
    use_stealth: bool = True

    def init_script(self) -> str:
        """Render the overrides as a script for ``BrowserContext.add_init_script``."""
        lines: list[str] = []

        for key, value in self.navigator_overrides.items():
            js_value = "undefined" if value is None else json.dumps(value)
            lines.append(
                f"Object.defineProperty(navigator, {json.dumps(key)}, "
                f"{{ get: () => {js_value} }});"
            )

        if self.media_devices:
            devices = json.dumps(list(self.media_devices))
            lines.append(
                "Object.defineProperty(navigator, 'mediaDevices', "
                f"{{ get: () => ({{ enumerateDevices: () => Promise.resolve({devices}) }}) }});"
            )

        for key, value in self.window_overrides.items():
            lines.append(f"window[{json.dumps(key)}] = {json.dumps(value)};")

        return "\n".join(lines)

    def context_options(self) -> dict[str, Any]:
        """Keyword arguments for ``Browser.new_context``."""
        options: dict[str, Any] = {
            "user_agent": self.user_agent,
            "locale": self.locale,
            "timezone_id": self.timezone_id,
            "viewport": dict(self.viewport),
        }
        if self.extra_headers:
            options["extra_http_headers"] = dict(self.extra_headers)
        return options


# Plain headless Chrome with a desktop user agent; enough for most theatre sites.
BASIC_PROFILE = FingerprintProfile(name="basic")

# For sites behind Squarespace/SiteGround bot protection.
HUMAN_PROFILE = FingerprintProfile(
    name="human",
    user_agent=_DESKTOP_CHROME_UA,
    launch_args=(
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-blink-features=AutomationControlled",
        "--disable-features=VizDisplayCompositor",
        "--window-size=1366,768",
        "--start-maximized",
    ),
    extra_headers={
        "Accept-Language": "en-US,en;q=0.9",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    },
    navigator_overrides={
        "webdriver": None,
        "plugins": [
            {"name": "Chrome PDF Plugin"},
            {"name": "Shockwave Flash"},
            {"name": "Chromium PDF Plugin"},
        ],
        "languages": ["en-US", "en"],
    },
    window_overrides={"chrome": {"runtime": {}, "app": {}, "csi": {}}},
    media_devices=(
        {"kind": "videoinput", "label": "FaceTime HD Camera"},
        {"kind": "audioinput", "label": "Built-in Microphone"},
    ),
)
