from __future__ import annotations

from typing import Any, Dict, List, Optional, TextIO, Tuple
from xml.sax.saxutils import XMLGenerator
from xml.sax.xmlreader import AttributesImpl


class XmlStreamWriter:
    """Cursor-style XML writer on top of ``XMLGenerator``.

    Attributes are written after ``write_start_element`` (as with StAX), so the
    start tag is held back until the next content/structure call.
    """

    def __init__(self, out: TextIO, encoding: str = "UTF-8") -> None:
        self._gen = XMLGenerator(out, encoding=encoding, short_empty_elements=True)
        # (name, attributes, is_empty)
        self._pending: Optional[Tuple[str, Dict[str, str], bool]] = None
        self._open: List[str] = []

    def _flush_pending(self) -> None:
        if self._pending is None:
            return
        name, attrs, empty = self._pending
        self._pending = None
        self._gen.startElement(name, AttributesImpl(attrs))
        if empty:
            self._gen.endElement(name)

    def write_start_document(self) -> None:
        self._gen.startDocument()

    def write_end_document(self) -> None:
        while self._open:
            self.write_end_element()
        self._gen.endDocument()

    def write_start_element(self, name: str) -> None:
        self._flush_pending()
        self._pending = (name, {}, False)
        self._open.append(name)

    def write_empty_element(self, name: str) -> None:
        self._flush_pending()
        self._pending = (name, {}, True)

    def write_attribute(self, name: str, value: Any) -> None:
        if self._pending is None:
            raise ValueError(f"Attribute {name!r} written outside of a start tag")
        self._pending[1][name] = "" if value is None else str(value)

    def write_characters(self, text: Optional[str]) -> None:
        self._flush_pending()
        if text:
            self._gen.characters(text)

    def write_end_element(self) -> None:
        name = self._open.pop()
        self._flush_pending()
        self._gen.endElement(name)

    def flush(self) -> None:
        self._flush_pending()


class PrettyPrintWriter:
    """Wraps a writer and indents the XML it produces.

    Start and empty elements begin on a new line, indented two spaces per
    depth level. An end element gets its own line only when the element had
    child elements, so text-only elements stay on one line. Every other call
    goes straight to the wrapped writer.
    """

    LINEFEED = "\n"
    INDENT = "  "

    def __init__(self, target: XmlStreamWriter) -> None:
        self._target = target
        self._depth = 0
        self._has_child: Dict[int, bool] = {}

    def __getattr__(self, name: str) -> Any:
        return getattr(self._target, name)

    def _newline(self) -> None:
        self._target.write_characters(self.LINEFEED + self.INDENT * self._depth)

    def write_start_element(self, name: str) -> None:
        if self._depth > 0:
            self._has_child[self._depth - 1] = True
            self._newline()
        self._has_child[self._depth] = False
        self._target.write_start_element(name)
        self._depth += 1

    def write_end_element(self) -> None:
        self._depth -= 1
        if self._has_child.get(self._depth):
            self._newline()
        self._target.write_end_element()

    def write_empty_element(self, name: str) -> None:
        if self._depth > 0:
            self._has_child[self._depth - 1] = True
            self._newline()
        self._target.write_empty_element(name)

    def write_end_document(self) -> None:
        # elements left open are closed here so they get indented too
        while self._depth > 0:
            self.write_end_element()
        self._target.write_end_document()
