from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Request

# Header names (hyphens removed, lower case) that have a dedicated field on Request.
STRUCTURED_FIELDS: dict[str, str] = {
    "accept": "accept",
    "connection": "connection",
    "contenttype": "content_type",
    "expect": "expect",
    "host": "host",
    "referer": "referer",
    "useragent": "user_agent",
}


def structured_field(name: str) -> str | None:
    return STRUCTURED_FIELDS.get(name.replace("-", "").lower())


def set_header(request: "Request", name: str, value: str | None) -> None:
    """
    Apply a header to an outgoing request.

    Headers with a structured field on the request are written there,
    everything else goes to the raw header map and replaces any earlier
    value for the same name. A ``None`` value clears the header.
    """
    attr = structured_field(name)
    if attr is not None:
        setattr(request, attr, value)
        return
    if value is None:
        if name in request.headers:
            del request.headers[name]
        return
    request.headers[name] = value
