"""S3 XML request rendering and response parsing helpers."""

import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape as _sax_escape

S3_NS = "http://s3.amazonaws.com/doc/2006-03-01/"

# Region whose buckets are created without a LocationConstraint body.
DEFAULT_REGION = "us-east-1"


def _escape_xml(value: str) -> str:
    """Escape special XML characters in a string value."""
    return _sax_escape(str(value))


def _find(root: ET.Element, tag: str) -> ET.Element | None:
    """Find a direct child by tag, with or without the S3 namespace."""
    elem = root.find(tag)
    if elem is None:
        elem = root.find(f"{{{S3_NS}}}{tag}")
    return elem


def render_create_bucket_configuration(region: str) -> bytes:
    """Render the CreateBucket request body for ``region``.

    Buckets in the default region take an empty body.

    Args:
        region: The region the bucket should be created in.

    Returns:
        The XML body as bytes, or ``b""`` for the default region.
    """
    if not region or region == DEFAULT_REGION:
        return b""
    return (
        f'<CreateBucketConfiguration xmlns="{S3_NS}">'
        f"<LocationConstraint>{_escape_xml(region)}</LocationConstraint>"
        "</CreateBucketConfiguration>"
    ).encode("utf-8")


def parse_copy_object_result(body: bytes) -> dict[str, str]:
    """Parse a CopyObjectResult body.

    Args:
        body: The raw response body.

    Returns:
        A dict with ``ETag`` and ``LastModified`` (empty strings if absent).

    Raises:
        ValueError: If the body is not a CopyObjectResult document.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise ValueError(f"malformed XML: {exc}") from exc
    if root.tag not in ("CopyObjectResult", f"{{{S3_NS}}}CopyObjectResult"):
        raise ValueError(f"unexpected root element {root.tag}")
    result = {}
    for tag in ("ETag", "LastModified"):
        elem = _find(root, tag)
        result[tag] = (elem.text or "") if elem is not None else ""
    return result


def parse_error_code(body: bytes) -> str | None:
    """Extract the Code from an S3 XML error body, or None."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None
    code = _find(root, "Code")
    return code.text if code is not None else None
