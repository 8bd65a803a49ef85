"""Form extraction -- replay a page's input fields on the next submission.

Each page of the identity provider's login carries hidden fields (state,
anti-CSRF tokens) that must be echoed back when the form is submitted.
:func:`extract_form` scans every ``<input>`` element of a page and returns
a :class:`FormSnapshot`, a small ordered multi-map the caller mutates
(injecting the username or password) before posting it.

Extraction works purely off the generic ``<input>`` contract. It never
relies on the CSS classes or ids of a particular login theme, since that
markup belongs to a third party and changes without notice.
"""

from __future__ import annotations

from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup
from bs4.exceptions import ParserRejectedMarkup

from jscsession.exceptions import MalformedDocumentError

# Input types that trigger an action rather than carry data.
_ACTION_INPUT_TYPES = frozenset({"submit", "button", "image"})


class FormSnapshot:
    """Ordered multi-map of form field names to values.

    Repeated names are preserved: :meth:`add` appends, the way a browser
    submits every checkbox of a group or every copy of a repeated hidden
    field. :meth:`set` replaces all values for a name with a single one.

    Example::

        form = FormSnapshot([("state", "abc"), ("tag", "a"), ("tag", "b")])
        form.set("username", "admin@example.com")
        form.get_all("tag")   # ["a", "b"]
    """

    def __init__(self, fields: Optional[list[tuple[str, str]]] = None) -> None:
        self._fields: list[tuple[str, str]] = list(fields or [])

    def add(self, name: str, value: str) -> None:
        """Append a value for *name*, keeping any existing ones."""
        self._fields.append((name, value))

    def set(self, name: str, value: str) -> None:
        """Replace every value of *name* with *value*.

        The field keeps the position of its first occurrence; a new field is
        appended at the end.
        """
        replaced = False
        fields: list[tuple[str, str]] = []
        for key, current in self._fields:
            if key != name:
                fields.append((key, current))
            elif not replaced:
                fields.append((key, value))
                replaced = True
        if not replaced:
            fields.append((name, value))
        self._fields = fields

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value of *name*, or *default* when absent."""
        for key, value in self._fields:
            if key == name:
                return value
        return default

    def get_all(self, name: str) -> list[str]:
        """Return every value of *name* in document order."""
        return [value for key, value in self._fields if key == name]

    def names(self) -> list[str]:
        """Return the distinct field names in first-seen order."""
        return list(dict.fromkeys(key for key, _ in self._fields))

    def items(self) -> list[tuple[str, str]]:
        """Return all ``(name, value)`` pairs, duplicates included."""
        return list(self._fields)

    def to_form_data(self) -> dict[str, list[str]]:
        """Convert to the mapping ``httpx`` form-encodes, one list per name."""
        data: dict[str, list[str]] = {}
        for key, value in self._fields:
            data.setdefault(key, []).append(value)
        return data

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormSnapshot):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"FormSnapshot({self._fields!r})"


def extract_form(
    body: Union[str, bytes],
    encoding: Optional[str] = None,
) -> FormSnapshot:
    """Build a :class:`FormSnapshot` from every named ``<input>`` of a page.

    Inputs without a ``name`` attribute are skipped, as are inputs of type
    ``submit``, ``button`` and ``image``. An input without a ``value``
    contributes an empty string. Inputs outside any ``<form>`` element are
    included.

    Args:
        body: The HTML document, as text or raw bytes.
        encoding: Codec used to decode *body* when it is bytes. Defaults to
            UTF-8.

    Returns:
        The extracted snapshot.

    Raises:
        MalformedDocumentError: If the bytes cannot be decoded with the
            given codec, the codec is unknown, or the parser rejects the
            markup.
    """
    if isinstance(body, bytes):
        codec = encoding or "utf-8"
        try:
            text = body.decode(codec)
        except LookupError as exc:
            raise MalformedDocumentError(f"Unsupported document encoding '{codec}'") from exc
        except UnicodeDecodeError as exc:
            raise MalformedDocumentError(
                f"Document is not valid {codec}: {exc.reason} at byte {exc.start}"
            ) from exc
    else:
        text = body

    try:
        soup = BeautifulSoup(text, "html.parser")
    except ParserRejectedMarkup as exc:
        raise MalformedDocumentError(f"Document could not be parsed as HTML: {exc}") from exc

    snapshot = FormSnapshot()
    for element in soup.find_all("input"):
        name = element.get("name")
        if not name:
            continue
        input_type = (element.get("type") or "").strip().lower()
        if input_type in _ACTION_INPUT_TYPES:
            continue
        snapshot.add(name, element.get("value") or "")
    return snapshot
