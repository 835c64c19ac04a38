"""
Reads and writes the serialized model exchanged with the parsing and
rendering stages.

Document layout (JSON or YAML):

    {
      "beans": [
        {"name": "User", "origin": {"name": "com.example.User", "kind": "type", "deprecated": true},
         "parent": null, "interfaces": [], "comments": ["A user."],
         "properties": [
           {"name": "login", "type": "string", "optional": false,
            "origin": {"name": "getLogin", "kind": "method",
                       "deprecated": {"since": "1.2", "forRemoval": true}},
            "comments": []}
         ]}
      ],
      "enums": [
        {"name": "Color", "kind": "string", "origin": {...}, "comments": [],
         "members": [{"propertyName": "RED", "value": "RED", "origin": {...}, "comments": []}]}
      ],
      "restApplications": [
        {"name": "Api", "applicationPath": "/api",
         "methods": [{"name": "getUser", "httpMethod": "GET", "path": "users/{id}",
                      "returnType": "User", "origin": {...}, "comments": []}]}
      ]
    }

The ``deprecated`` entry of an origin is either a boolean or a mapping with
optional ``since`` and ``forRemoval`` keys. Comments are ``null`` when the
parsing stage found no documentation.
"""

import json
import logging
import sys
from pathlib import Path

import yaml

from api_model import (
    Bean,
    DeprecationMarker,
    Enum,
    EnumMember,
    Model,
    OriginKind,
    OriginRef,
    Property,
    RestApplication,
    RestMethod,
)

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class ModelLoadError(ValueError):
    """Raised when a model document cannot be read or has an unexpected shape."""


def _expect(value, expected_type, path):
    if not isinstance(value, expected_type):
        raise ModelLoadError(f"{path}: expected {expected_type.__name__}, got {type(value).__name__}")
    return value


def _require(data, key, path):
    if key not in data:
        raise ModelLoadError(f"{path}.{key}: missing required key")
    return data[key]


def _items(data, key, path):
    items = data.get(key)
    if items is None:
        return []
    return _expect(items, list, f"{path}.{key}" if path else key)


def _comments(data, path):
    comments = data.get("comments")
    if comments is None:
        return None
    _expect(comments, list, f"{path}.comments")
    return tuple(_expect(c, str, f"{path}.comments[{i}]") for i, c in enumerate(comments))


def marker_from_value(value, path):
    """
    Convert a ``deprecated`` entry into a DeprecationMarker.

    ``true`` gives a marker without details, ``false``/``null`` gives no marker.
    An integer ``since`` is accepted as a version; floats are rejected because
    YAML and JSON have already dropped trailing zeros (``1.10`` reads as ``1.1``).
    """
    if value is None or value is False:
        return None
    if value is True:
        return DeprecationMarker()
    _expect(value, dict, path)

    since = value.get("since")
    if isinstance(since, int) and not isinstance(since, bool):
        since = str(since)
    elif since is not None and not isinstance(since, str):
        raise ModelLoadError(f"{path}.since: expected a string, got {since!r} (quote version numbers)")
    for_removal = value.get("forRemoval")
    if for_removal is not None and not isinstance(for_removal, bool):
        raise ModelLoadError(f"{path}.forRemoval: expected a boolean, got {for_removal!r}")
    return DeprecationMarker(since=since, for_removal=for_removal)


def origin_from_dict(data, path):
    if data is None:
        return None
    _expect(data, dict, path)
    try:
        kind = OriginKind(data.get("kind", "type"))
    except ValueError:
        raise ModelLoadError(f"{path}.kind: unknown origin kind {data.get('kind')!r}") from None
    return OriginRef(
        name=str(data.get("name", "")),
        kind=kind,
        deprecation=marker_from_value(data.get("deprecated"), f"{path}.deprecated"),
    )


def property_from_dict(data, path):
    _expect(data, dict, path)
    return Property(
        name=_require(data, "name", path),
        type=data.get("type", "any"),
        optional=_expect(data.get("optional", False), bool, f"{path}.optional"),
        original_member=origin_from_dict(data.get("origin"), f"{path}.origin"),
        comments=_comments(data, path),
    )


def bean_from_dict(data, path):
    _expect(data, dict, path)
    return Bean(
        name=_require(data, "name", path),
        origin=origin_from_dict(data.get("origin"), f"{path}.origin"),
        parent=data.get("parent"),
        interfaces=tuple(_items(data, "interfaces", path)),
        properties=tuple(
            property_from_dict(p, f"{path}.properties[{i}]")
            for i, p in enumerate(_items(data, "properties", path))
        ),
        comments=_comments(data, path),
    )


def enum_member_from_dict(data, path):
    _expect(data, dict, path)
    return EnumMember(
        property_name=_require(data, "propertyName", path),
        enum_value=data.get("value"),
        original_field=origin_from_dict(data.get("origin"), f"{path}.origin"),
        comments=_comments(data, path),
    )


def enum_from_dict(data, path):
    _expect(data, dict, path)
    return Enum(
        name=_require(data, "name", path),
        kind=data.get("kind", "string"),
        origin=origin_from_dict(data.get("origin"), f"{path}.origin"),
        members=tuple(
            enum_member_from_dict(m, f"{path}.members[{i}]")
            for i, m in enumerate(_items(data, "members", path))
        ),
        comments=_comments(data, path),
    )


def rest_method_from_dict(data, path):
    _expect(data, dict, path)
    return RestMethod(
        name=_require(data, "name", path),
        http_method=data.get("httpMethod", "GET"),
        path=data.get("path", ""),
        return_type=data.get("returnType"),
        original_method=origin_from_dict(data.get("origin"), f"{path}.origin"),
        comments=_comments(data, path),
    )


def rest_application_from_dict(data, path):
    _expect(data, dict, path)
    return RestApplication(
        name=data.get("name"),
        application_path=data.get("applicationPath"),
        methods=tuple(
            rest_method_from_dict(m, f"{path}.methods[{i}]")
            for i, m in enumerate(_items(data, "methods", path))
        ),
    )


def model_from_dict(data):
    """Build a Model from a parsed model document."""
    _expect(data, dict, "<document>")
    return Model(
        beans=tuple(bean_from_dict(b, f"beans[{i}]") for i, b in enumerate(_items(data, "beans", ""))),
        enums=tuple(enum_from_dict(e, f"enums[{i}]") for i, e in enumerate(_items(data, "enums", ""))),
        rest_applications=tuple(
            rest_application_from_dict(a, f"restApplications[{i}]")
            for i, a in enumerate(_items(data, "restApplications", ""))
        ),
    )


def load_model(path):
    """Read a JSON or YAML model document from ``path``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ModelLoadError(f"Cannot read model file {path}: {e}") from e

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ModelLoadError(f"Cannot parse model file {path}: {e}") from e

    model = model_from_dict(data)
    logger.debug(
        "Loaded %s: %d beans, %d enums, %d REST applications",
        path, len(model.beans), len(model.enums), len(model.rest_applications),
    )
    return model


def marker_to_value(marker):
    if marker is None:
        return False
    value = {}
    if marker.since is not None:
        value["since"] = marker.since
    if marker.for_removal is not None:
        value["forRemoval"] = marker.for_removal
    return value or True


def origin_to_dict(origin):
    if origin is None:
        return None
    return {
        "name": origin.name,
        "kind": origin.kind.value,
        "deprecated": marker_to_value(origin.deprecation),
    }


def _comments_to_list(comments):
    return list(comments) if comments is not None else None


def model_to_dict(model):
    """Serialize a Model back into the document layout read by model_from_dict."""
    return {
        "beans": [
            {
                "name": bean.name,
                "origin": origin_to_dict(bean.origin),
                "parent": bean.parent,
                "interfaces": list(bean.interfaces),
                "comments": _comments_to_list(bean.comments),
                "properties": [
                    {
                        "name": p.name,
                        "type": p.type,
                        "optional": p.optional,
                        "origin": origin_to_dict(p.original_member),
                        "comments": _comments_to_list(p.comments),
                    }
                    for p in bean.properties
                ],
            }
            for bean in model.beans
        ],
        "enums": [
            {
                "name": enum.name,
                "kind": enum.kind,
                "origin": origin_to_dict(enum.origin),
                "comments": _comments_to_list(enum.comments),
                "members": [
                    {
                        "propertyName": m.property_name,
                        "value": m.enum_value,
                        "origin": origin_to_dict(m.original_field),
                        "comments": _comments_to_list(m.comments),
                    }
                    for m in enum.members
                ],
            }
            for enum in model.enums
        ],
        "restApplications": [
            {
                "name": app.name,
                "applicationPath": app.application_path,
                "methods": [
                    {
                        "name": m.name,
                        "httpMethod": m.http_method,
                        "path": m.path,
                        "returnType": m.return_type,
                        "origin": origin_to_dict(m.original_method),
                        "comments": _comments_to_list(m.comments),
                    }
                    for m in app.methods
                ],
            }
            for app in model.rest_applications
        ],
    }


def dump_model(model, path=None):
    """Write the model as JSON to ``path``, or to stdout when no path is given."""
    text = json.dumps(model_to_dict(model), indent=2, ensure_ascii=False)
    if path is None:
        sys.stdout.write(text + "\n")
        return
    with open(path, "w", encoding="utf-8") as f:
        f.write(text + "\n")
    logger.info(f"Wrote enriched model to {path}")
