"""
Client-side orchestration for WebDriver servers.

Typical flow:

    from selenium.webdriver.common.by import By
    from webdriver_bridge import Capabilities, RemoteClient, chromedriver_service, get_free_port

    port = get_free_port()
    with chromedriver_service("chromedriver", port) as service:
        caps = Capabilities({"browserName": "chrome"})
        caps.browser_options("goog:chromeOptions").add_argument("--headless=new")
        with RemoteClient().open(service, caps) as session:
            session.get("https://example.com")
            body = session.find_element(By.CSS_SELECTOR, "body")
            print(body.css_property("background-color"))

The service manager and the protocol client are independent: sessions can
be opened against any remote URL, and one service can host many sessions.
"""

from .errors import *  # noqa: F401,F403
from .errors import __all__ as _errors_all
from .capabilities import (
    BrowserBuilder,
    BrowserOptions,
    BrowserRegistry,
    Capabilities,
    ChromeOptions,
    FirefoxOptions,
    MigrationRule,
    default_registry,
    merge,
    register_browser,
)
from .config import ServiceConfig, get_env_config
from .browser import (
    FrameBuffer,
    Service,
    chromedriver_service,
    geckodriver_service,
    get_free_port,
    selenium_service,
    start_service,
)
from .protocol import Dialect, ElementHandle, HttpTransport, RemoteClient, Session, SessionState

__all__ = list(_errors_all) + [
    "BrowserBuilder",
    "BrowserOptions",
    "BrowserRegistry",
    "Capabilities",
    "ChromeOptions",
    "FirefoxOptions",
    "MigrationRule",
    "default_registry",
    "merge",
    "register_browser",
    "ServiceConfig",
    "get_env_config",
    "FrameBuffer",
    "Service",
    "chromedriver_service",
    "geckodriver_service",
    "get_free_port",
    "selenium_service",
    "start_service",
    "Dialect",
    "ElementHandle",
    "HttpTransport",
    "RemoteClient",
    "Session",
    "SessionState",
]
