"""Element handles returned by find operations."""

import weakref
from typing import List, TYPE_CHECKING

from selenium.webdriver.common.by import By

from ..errors import SessionClosedError
from .dialect import element_reference

if TYPE_CHECKING:
    from .session import Session


class ElementHandle:
    """
    Opaque, session-scoped reference to a DOM element.

    Holds only a weak reference to its session; validity is decided by the
    server (a stale handle fails with StaleElementReferenceError).
    """

    def __init__(self, element_id: str, session: "Session"):
        self.id = element_id
        self._session_id = session.id
        self._session = weakref.ref(session)

    def __repr__(self) -> str:
        return f"ElementHandle(id={self.id!r}, session={self._session_id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementHandle):
            return NotImplemented
        return self.id == other.id and self._session_id == other._session_id

    def __hash__(self) -> int:
        return hash((self.id, self._session_id))

    @property
    def session(self) -> "Session":
        session = self._session()
        if session is None:
            raise SessionClosedError(self._session_id, "session object released")
        return session

    @property
    def reference(self) -> dict:
        """Wire form of this element for use in command bodies."""
        return element_reference(self.session.dialect, self.id)

    def css_property(self, name: str) -> str:
        session = self.session
        return session.client.element_property(session, self, name)

    def attribute(self, name: str):
        session = self.session
        return session.client.element_attribute(session, self, name)

    def text(self) -> str:
        session = self.session
        return session.client.element_text(session, self)

    def click(self) -> None:
        session = self.session
        session.client.click_element(session, self)

    def find_element(self, by: str = By.CSS_SELECTOR, value: str = "") -> "ElementHandle":
        session = self.session
        return session.client.find_element(session, by, value, parent=self)

    def find_elements(self, by: str = By.CSS_SELECTOR, value: str = "") -> List["ElementHandle"]:
        session = self.session
        return session.client.find_elements(session, by, value, parent=self)


__all__ = [
    "ElementHandle",
]
