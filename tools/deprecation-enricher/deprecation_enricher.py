#!/usr/bin/env python3
"""
Deprecation Enricher - adds ``@deprecated`` notices to model documentation

The parsing stage records, for every bean, property, enum, enum member and REST
method, a reference to the source construct it was built from (``OriginRef``).
When that construct carries a deprecation marker, this pass appends a single
normalized comment line to the node's comments so that renderers can emit it
as a doc tag:

    @deprecated
    @deprecated since: 1.2
    @deprecated since: 1.2; forRemoval: true
    @deprecated forRemoval: true

RULES:
- Comments are append-only. Existing lines are never removed or reordered.
- A node that already has a line starting with ``@deprecated`` is left alone,
  which makes the pass idempotent.
- Nodes without an origin, or whose origin is not deprecated, are returned with
  their comments unchanged.
- Containers (beans, enums, REST applications) enrich all of their children
  before their own comments.

MARKER COMPATIBILITY:
Markers produced on older source platforms do not expose ``since`` or
``forRemoval``. Those fields are probed, and any failure while probing is
treated as "field absent". The bare ``@deprecated`` tag is always a valid
fallback.

DEBUGGING:
- DEBUG_ENRICHER enables before/after logging of comments for each node
- DEBUG_FILTER narrows that logging to nodes whose name contains the filter
"""

import functools
import logging
from dataclasses import replace

from api_model import Bean, Enum, EnumMember, Model, OriginKind, Property, RestApplication, RestMethod

DEPRECATED = "@deprecated"

# Debug configuration - useful for development and troubleshooting
DEBUG_ENRICHER = False  # Master switch for enricher debugging
DEBUG_FILTER = None     # Filter to specific node name (or None for all)

logger = logging.getLogger(__name__)


def _node_name(node):
    return getattr(node, "name", None) or getattr(node, "property_name", None) or "?"


def debug_enricher(method):
    """
    Decorator that logs a node's comments before and after an enrichment method.

    Only active when DEBUG_ENRICHER is set. Nodes without comments (REST
    applications, the model itself) log their name only.
    """

    @functools.wraps(method)
    def wrapped(self, node, *args):
        if not DEBUG_ENRICHER:
            return method(self, node, *args)

        name = _node_name(node)
        if DEBUG_FILTER and DEBUG_FILTER not in str(name):
            return method(self, node, *args)

        logger.debug("[%s] %s: comments before=%r", method.__name__, name, getattr(node, "comments", None))
        result = method(self, node, *args)
        logger.debug("[%s] %s: comments after=%r", method.__name__, name, getattr(result, "comments", None))
        return result

    return wrapped


def map_list(items, mapper):
    """Apply ``mapper`` to every item, keeping order. ``None`` maps to ``()``."""
    return tuple(mapper(item) for item in (items or ()))


def contains_deprecated_tag(comments):
    if not comments:
        return False
    return any(comment.startswith(DEPRECATED) for comment in comments)


def _probe(marker, *names):
    """
    Read the first accessor in ``names`` that the marker exposes.

    Accessors may be plain attributes or zero-argument callables. Returns None
    when no accessor is exposed or when reading it fails.
    """
    for name in names:
        try:
            value = getattr(marker, name)
            return value() if callable(value) else value
        except AttributeError:
            continue
        except Exception as e:
            logger.debug("Could not read '%s' from deprecation marker %r: %s", name, marker, e)
            return None
    return None


def get_since(marker):
    """Return the marker's ``since`` value, or None when absent or empty."""
    since = _probe(marker, "since")
    if since is None:
        return None
    if not isinstance(since, str):
        logger.debug("Ignoring non-string 'since' on deprecation marker: %r", since)
        return None
    return since or None


def get_for_removal(marker):
    """Return True only when the marker exposes ``forRemoval`` set to true."""
    for_removal = _probe(marker, "for_removal", "forRemoval")
    return for_removal is True


def convert_to_comment(marker):
    additional = []
    since = get_since(marker)
    if since is not None:
        additional.append(f"since: {since}")
    if get_for_removal(marker):
        additional.append("forRemoval: true")
    return f"{DEPRECATED} {'; '.join(additional)}" if additional else DEPRECATED


def add_deprecation(comments, origin):
    """
    Return ``comments`` with a deprecation notice appended when ``origin`` is
    deprecated and no notice is present yet; otherwise return them unchanged.
    """
    if origin is None or not origin.is_deprecated or contains_deprecated_tag(comments):
        return comments

    notice = convert_to_comment(origin.deprecation)
    logger.debug("Adding '%s' for %s", notice, origin.name)
    return tuple(comments or ()) + (notice,)


class DeprecationEnricher:
    """Rebuilds a Model with deprecation notices added to node comments."""

    def enrich_model(self, model: Model) -> Model:
        beans = map_list(model.beans, self.enrich_bean)
        enums = map_list(model.enums, self.enrich_enum)
        rest_applications = map_list(model.rest_applications, self.enrich_rest_application)
        logger.info(
            "Enriched %d beans, %d enums and %d REST applications",
            len(beans), len(enums), len(rest_applications),
        )
        return Model(beans=beans, enums=enums, rest_applications=rest_applications)

    @debug_enricher
    def enrich_bean(self, bean: Bean) -> Bean:
        properties = map_list(bean.properties, self.enrich_property)
        return replace(
            bean,
            properties=properties,
            comments=add_deprecation(bean.comments, bean.origin),
        )

    @debug_enricher
    def enrich_property(self, property: Property) -> Property:
        member = property.original_member
        if member is None:
            return property
        if member.kind is OriginKind.METHOD:
            return self.enrich_method_property(property, member)
        if member.kind is OriginKind.FIELD:
            return self.enrich_field_property(property, member)
        # synthetic property, nothing to look up
        return property

    def enrich_field_property(self, property, field):
        return replace(property, comments=add_deprecation(property.comments, field))

    def enrich_method_property(self, property, method):
        return replace(property, comments=add_deprecation(property.comments, method))

    @debug_enricher
    def enrich_enum(self, enum: Enum) -> Enum:
        members = map_list(enum.members, self.enrich_enum_member)
        return replace(
            enum,
            members=members,
            comments=add_deprecation(enum.comments, enum.origin),
        )

    @debug_enricher
    def enrich_enum_member(self, member: EnumMember) -> EnumMember:
        return replace(member, comments=add_deprecation(member.comments, member.original_field))

    @debug_enricher
    def enrich_rest_application(self, application: RestApplication) -> RestApplication:
        return replace(application, methods=map_list(application.methods, self.enrich_rest_method))

    @debug_enricher
    def enrich_rest_method(self, method: RestMethod) -> RestMethod:
        return replace(method, comments=add_deprecation(method.comments, method.original_method))
