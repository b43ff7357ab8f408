"""
Export file codec.

An export is a UTF-8 JSON document ``{format_version, name, nodes, edges}``.
Importing also understands the older canvas layout where each node kept its
provider, type, label and properties under a ``data`` object.
"""

import json
import re
from typing import Any, BinaryIO, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import get_settings, timed_operation, GraphSnapshot, MalformedImport
from ..graph_model import find_snapshot_problems
from ..taxonomy import ResourceTaxonomy, get_taxonomy
from .models import ExportDocument

ImportSource = Union[bytes, bytearray, str, BinaryIO]

DEFAULT_EXPORT_NAME = "architecture"


def export_filename(name: str) -> str:
    """Download name for an export: whitespace runs become ``_``."""
    stem = re.sub(r"\s+", "_", name.strip()) if name else ""
    return f"{stem or DEFAULT_EXPORT_NAME}.json"


@timed_operation("export_to_file")
def export_to_file(snapshot: GraphSnapshot, name: str, indent: Optional[int] = None) -> bytes:
    """
    Serialize a snapshot into export bytes.

    Node and edge order is preserved so ``import_from_file`` returns an
    equal snapshot.
    """
    if indent is None:
        indent = get_settings().export_indent
    document = ExportDocument.from_snapshot(snapshot, name)
    payload = document.model_dump(mode="json")
    return json.dumps(payload, indent=indent or None).encode("utf-8")


@timed_operation("import_document")
def import_document(source: ImportSource, taxonomy: Optional[ResourceTaxonomy] = None) -> ExportDocument:
    """
    Parse and check an export file.

    Properties missing from a node are filled from its type's template,
    which keeps files written before a template gained a key importable.

    Raises:
        MalformedImport: if the file is not JSON, not an export document, or
            describes a graph that could not be installed
    """
    taxonomy = taxonomy or get_taxonomy()
    raw = _parse_json(_read_source(source))

    if not isinstance(raw, dict):
        raise _malformed("top-level value must be an object")
    if "nodes" not in raw or "edges" not in raw:
        raise _malformed("missing 'nodes' or 'edges'")
    if not isinstance(raw["nodes"], list) or not isinstance(raw["edges"], list):
        raise _malformed("'nodes' and 'edges' must be lists")

    raw = {**raw, "nodes": [_normalize_node(node) for node in raw["nodes"]]}
    try:
        document = ExportDocument.model_validate(raw)
    except PydanticValidationError as e:
        raise _malformed(_first_error(e))

    for node in document.nodes:
        if (node.provider, node.resource_type) not in taxonomy:
            continue
        defaults = taxonomy.defaults_for(node.provider, node.resource_type)
        properties = dict(node.properties)
        for key, value in defaults.items():
            properties.setdefault(key, value)
        node.properties = properties

    problems = find_snapshot_problems(document.snapshot(), taxonomy)
    if problems:
        raise _malformed("; ".join(problems))
    return document


def import_from_file(source: ImportSource, taxonomy: Optional[ResourceTaxonomy] = None) -> GraphSnapshot:
    """Parse an export file into a snapshot ready to install."""
    return import_document(source, taxonomy).snapshot()


def _read_source(source: ImportSource) -> Union[bytes, str]:
    if isinstance(source, (bytes, bytearray, str)):
        return bytes(source) if isinstance(source, bytearray) else source
    try:
        return source.read()
    except (OSError, AttributeError) as e:
        raise _malformed(f"cannot read input: {e}")


def _parse_json(data: Union[bytes, str]) -> Any:
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8-sig")
        return json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise _malformed(str(e))


def _normalize_node(node: Any) -> Any:
    """Flatten the older ``{id, position, data: {...}}`` node layout."""
    if not isinstance(node, dict) or not isinstance(node.get("data"), dict):
        return node
    data: Dict[str, Any] = node["data"]
    return {
        "id": node.get("id"),
        "provider": data.get("provider"),
        "resource_type": data.get("resource_type", data.get("type")),
        "label": data.get("label"),
        "position": node.get("position", {}),
        "properties": data.get("properties", {}),
    }


def _first_error(error: PydanticValidationError) -> str:
    details: List[Dict[str, Any]] = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def _malformed(detail: str) -> MalformedImport:
    return MalformedImport(f"file is not a valid architecture export: {detail}")
