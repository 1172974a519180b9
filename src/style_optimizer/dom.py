"""Document abstraction the rewriter mutates, with a BeautifulSoup implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from bs4 import BeautifulSoup, Tag


class Document(Protocol):
    """The DOM capabilities the delivery rewriter needs."""

    def query(self, selector: str) -> list[Any]: ...

    def get_attribute(self, element: Any, name: str) -> str | None: ...

    def create_element(
        self, name: str, attrs: dict[str, str] | None = None, text: str | None = None
    ) -> Any: ...

    def insert_before(self, reference: Any, element: Any) -> None: ...

    def remove(self, element: Any) -> None: ...

    def append_child(self, parent: Any, element: Any) -> None: ...

    def body(self) -> Any: ...

    def serialize(self) -> str: ...


class SoupDocument:
    """:class:`Document` backed by a BeautifulSoup tree."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup

    @classmethod
    def from_html(cls, html: str) -> SoupDocument:
        return cls(BeautifulSoup(html, "html.parser"))

    @classmethod
    def load(cls, path: str | Path) -> SoupDocument:
        return cls.from_html(Path(path).read_text(encoding="utf-8", errors="ignore"))

    def query(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def get_attribute(self, element: Tag, name: str) -> str | None:
        value = element.get(name)
        if value is None:
            return None
        # multi-valued attributes such as rel come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return value

    def create_element(
        self, name: str, attrs: dict[str, str] | None = None, text: str | None = None
    ) -> Tag:
        element = self.soup.new_tag(name, attrs=attrs or {})
        if text is not None:
            element.string = text
        return element

    def insert_before(self, reference: Tag, element: Tag) -> None:
        reference.insert_before(element)

    def remove(self, element: Tag) -> None:
        element.decompose()

    def append_child(self, parent: Tag, element: Tag) -> None:
        parent.append(element)

    def body(self) -> Tag | BeautifulSoup:
        return self.soup.body or self.soup

    def serialize(self) -> str:
        return str(self.soup)

    def write(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.serialize(), encoding="utf-8")
