"""
Smoke runner: start a driver, open a session, load a page, report, clean up.

    python -m webdriver_bridge --driver chromedriver --url https://example.com
    python -m webdriver_bridge --driver geckodriver --binary vendor/geckodriver --frame-buffer
    python -m webdriver_bridge --remote http://127.0.0.1:4444/wd/hub --browser firefox

Exit codes: 0 success, 1 failure, 2 driver binary not found (safe to skip).
"""

import sys
import argparse
import logging
from typing import Optional

from selenium.webdriver.common.by import By

from .browser import (
    chromedriver_service,
    geckodriver_service,
    get_free_port,
    selenium_service,
)
from .capabilities import Capabilities, ChromeOptions, FirefoxOptions
from .config import ServiceConfig, cli_log_path, get_env_config
from .errors import BinaryNotFoundError, BridgeError, ConfigurationError
from .protocol import Dialect, RemoteClient
from .utils.diagnostics import collect_diagnostics

logger = logging.getLogger("webdriver_bridge")

DRIVERS = ("chromedriver", "geckodriver", "selenium", "htmlunit")
DEFAULT_BROWSER = {
    "chromedriver": "chrome",
    "geckodriver": "firefox",
    "selenium": "firefox",
    "htmlunit": "htmlunit",
}


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(cli_log_path()),
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webdriver_bridge", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--driver", choices=DRIVERS, default="chromedriver")
    parser.add_argument("--binary", help="driver binary or Selenium JAR (defaults from the environment)")
    parser.add_argument("--remote", help="use an already running endpoint instead of starting a driver")
    parser.add_argument("--browser", help="browserName capability (default depends on --driver)")
    parser.add_argument("--browser-binary", help="browser executable passed through the browser options")
    parser.add_argument("--headless", action="store_true", help="ask the browser to run headless")
    parser.add_argument("--url", default="about:blank")
    parser.add_argument("--port", type=int, help="port for the driver (default: a free one)")
    parser.add_argument("--dialect", choices=("auto", "legacy", "w3c"), default="auto")
    parser.add_argument("--frame-buffer", action="store_true", help="run the driver inside Xvfb")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def build_capabilities(args, env: dict) -> Capabilities:
    browser = args.browser or DEFAULT_BROWSER[args.driver]
    caps = Capabilities({"browserName": browser})
    if browser == "chrome":
        opts = caps.browser_options(ChromeOptions.KEY)
        opts.binary = args.browser_binary or env.get("chrome_binary")
        if args.headless:
            opts.add_argument("--headless=new")
    elif browser == "firefox":
        opts = caps.browser_options(FirefoxOptions.KEY)
        opts.binary = args.browser_binary or env.get("firefox_binary")
        if args.headless:
            opts.add_argument("-headless")
    return caps


def _start(args, env: dict):
    port = args.port or get_free_port()
    config = ServiceConfig.from_env(env, frame_buffer=args.frame_buffer or bool(env.get("frame_buffer")))
    if args.driver == "chromedriver":
        return chromedriver_service(args.binary or env.get("chromedriver_path") or "chromedriver", port, config)
    if args.driver == "geckodriver":
        return geckodriver_service(args.binary or env.get("geckodriver_path") or "geckodriver", port, config)
    jar = args.binary or env.get("selenium_jar_path")
    if not jar:
        raise BinaryNotFoundError("selenium-server-standalone.jar (set SELENIUM_JAR_PATH)")
    if args.driver == "selenium" and not config.gecko_driver_path:
        logger.info("GECKODRIVER_PATH not set; the standalone server will look for geckodriver on PATH")
    if args.driver == "htmlunit" and not config.htmlunit_path:
        raise ConfigurationError("HTMLUNIT_JAR_PATH is required for --driver htmlunit")
    return selenium_service(jar, port, config)


def run(args) -> int:
    env = get_env_config()
    _configure_logging(args.verbose or env.get("debug"))

    dialect = None if args.dialect == "auto" else Dialect(args.dialect)
    client = RemoteClient(dialect=dialect)
    service = session = None
    try:
        caps = build_capabilities(args, env)
        service = _start(args, env) if not args.remote else None
        session = client.open(args.remote or service, caps)
        session.get(args.url)
        print(f"dialect : {session.dialect.value}")
        print(f"url     : {session.current_url()}")
        print(f"title   : {session.title()}")
        if args.url != "about:blank":
            body = session.find_element(By.CSS_SELECTOR, "body")
            print(f"body bg : {body.css_property('background-color')}")
        return 0
    except BinaryNotFoundError as e:
        logger.warning(f"Skipping: {e}")
        return 2
    except BridgeError as e:
        logger.error(f"Smoke run failed: {e}")
        print(collect_diagnostics(service, session, e), file=sys.stderr)
        return 1
    finally:
        if session is not None:
            try:
                session.quit()
            except BridgeError as e:
                logger.error(f"Quit failed: {e}")
        if service is not None:
            try:
                service.stop()
            except BridgeError as e:
                logger.error(f"Stopping the driver failed: {e}")


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
