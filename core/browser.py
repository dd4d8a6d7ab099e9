"""
Browser session management (Playwright).

One Chromium process per run, handing out a fresh page per scraped item:

    with open_session(BrowserOptions()) as session:
        with session.new_page() as page:
            page.goto(url, wait_until="networkidle")

Pages are closed when their block exits, whether it returned or raised.
The browser and the Playwright driver are closed when the session block exits.
"""
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from playwright.sync_api import sync_playwright, Browser, Page
from pydantic import BaseModel, Field

from core.config import config
from core.logging import get_logger

logger = get_logger("browser")


class BrowserLaunchError(RuntimeError):
    """Raised when the browser process cannot be started."""


class BrowserOptions(BaseModel):
    """Launch flags passed through to Chromium."""
    headless: bool = True
    sandbox_disabled: bool = True
    gpu_disabled: bool = True
    shared_memory_disabled: bool = True
    default_timeout_ms: int = Field(60000, gt=0)

    @classmethod
    def from_config(cls, **overrides) -> "BrowserOptions":
        values = {
            "headless": config.BROWSER_HEADLESS,
            "default_timeout_ms": config.BGG_TIMEOUT_MS,
        }
        values.update(overrides)
        return cls(**values)

    def launch_args(self) -> List[str]:
        args = []
        if self.sandbox_disabled:
            args.extend(["--no-sandbox", "--disable-setuid-sandbox"])
        if self.gpu_disabled:
            args.append("--disable-gpu")
        if self.shared_memory_disabled:
            args.append("--disable-dev-shm-usage")
        return args


class BrowserSession:
    """A launched browser that produces one page at a time for callers."""

    def __init__(self, browser: Browser, options: BrowserOptions):
        self._browser = browser
        self.options = options
        self.open_pages = 0
        self._closed = False

    @property
    def default_timeout_ms(self) -> int:
        return self.options.default_timeout_ms

    @contextmanager
    def new_page(self) -> Iterator[Page]:
        """Open a page with the session's default timeout; always closed on exit."""
        page = self._browser.new_page()
        self.open_pages += 1
        try:
            page.set_default_timeout(self.options.default_timeout_ms)
            yield page
        finally:
            self.open_pages -= 1
            try:
                page.close()
            except Exception as e:
                logger.warning(f"Failed to close page: {e}")

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self._browser.close()
            logger.debug("Browser closed")
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")


@contextmanager
def open_session(
    options: Optional[BrowserOptions] = None,
    playwright_factory: Callable = sync_playwright,
) -> Iterator[BrowserSession]:
    """
    Launch Chromium and yield a BrowserSession.

    Raises:
        BrowserLaunchError: If Playwright or the browser fails to start
    """
    options = options or BrowserOptions.from_config()

    logger.info(
        "Launching browser",
        extra={"headless": options.headless, "launch_args": options.launch_args()},
    )

    try:
        playwright = playwright_factory().start()
    except Exception as e:
        raise BrowserLaunchError(f"Failed to start Playwright: {e}") from e

    try:
        browser = playwright.chromium.launch(
            headless=options.headless,
            args=options.launch_args(),
        )
    except Exception as e:
        playwright.stop()
        raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

    session = BrowserSession(browser, options)
    try:
        yield session
    finally:
        session.close()
        playwright.stop()
