"""
Field helpers that render a single form control for an attribute of a bound
object.

Helpers are looked up by name in a `FieldHelperRegistry`. Every helper has
the signature::

    helper(object_name, method, *args, **options)

`options["object"]` holds the bound object (or None), all other options are
rendered as HTML attributes on the control. Helpers must return safe markup.
"""
import logging
import re

from django.core.exceptions import FieldDoesNotExist
from django.db import models
from django.forms import BaseForm
from django.utils.html import format_html, format_html_join
from django.utils.safestring import SafeString

logger = logging.getLogger(__name__)


class UnsupportedFieldHelper(AttributeError):
    """
    Raised when a form builder is asked to render a field with a helper
    that has not been registered.
    """


class FieldHelperRegistry:
    def __init__(self, helpers=None):
        self._helpers = dict(helpers or {})

    def register(self, name: str | None = None):
        """
        Decorator that adds a helper, under `name` or the function's own name.
        """

        def decorator(func):
            helper_name = name or func.__name__
            self._helpers[helper_name] = func
            logger.debug("Registered field helper %s", helper_name)
            return func

        return decorator

    def get(self, name: str):
        try:
            return self._helpers[name]
        except KeyError:
            raise UnsupportedFieldHelper(f"No field helper is registered with the name {name!r}") from None

    def copy(self):
        return FieldHelperRegistry(self._helpers)

    def __contains__(self, name):
        return name in self._helpers

    def __iter__(self):
        return iter(self._helpers)


field_helpers = FieldHelperRegistry()


def tag_id(object_name, method):
    return f"{object_name}_{method}"


def tag_name(object_name, method):
    return f"{object_name}[{method}]"


def html_attrs(attrs) -> SafeString:
    """
    Like Django's `flatatt`, but keeps the attributes in the order given.
    True renders a bare attribute, None and False leave the attribute out.
    """
    key_value_attrs = [
        (key, value) for key, value in attrs.items() if value is not None and not isinstance(value, bool)
    ]
    boolean_attrs = [(key,) for key, value in attrs.items() if value is True]
    return format_html_join("", ' {}="{}"', key_value_attrs) + format_html_join("", " {}", boolean_attrs)


def value_for(obj, method):
    if obj is None:
        return None
    if isinstance(obj, BaseForm):
        return obj[method].value()
    if isinstance(obj, models.Model):
        try:
            field = obj._meta.get_field(method)
        except FieldDoesNotExist:
            field = None
        # The stored value, i.e. the id rather than the instance for a foreign key
        if field is not None and getattr(field, "concrete", False):
            return field.value_from_object(obj)
    return getattr(obj, method)


def _attrs(object_name, method, options, **first):
    # type, id, name and value come first, in that order
    attrs = {"id": tag_id(object_name, method), "name": tag_name(object_name, method)}
    if "type" in first:
        attrs = {"type": first.pop("type"), **attrs}
    attrs.update(first)
    attrs.update(options)
    return attrs


def _input(input_type, object_name, method, options, *, value=None):
    if value is not None:
        value = str(value)
    return format_html("<input{}/>", html_attrs(_attrs(object_name, method, options, type=input_type, value=value)))


@field_helpers.register()
def text_field(object_name, method, **options):
    obj = options.pop("object", None)
    return _input("text", object_name, method, options, value=value_for(obj, method))


@field_helpers.register()
def password_field(object_name, method, **options):
    # The current value is never echoed back
    options.pop("object", None)
    return _input("password", object_name, method, options)


@field_helpers.register()
def hidden_field(object_name, method, **options):
    obj = options.pop("object", None)
    return _input("hidden", object_name, method, options, value=value_for(obj, method))


@field_helpers.register()
def file_field(object_name, method, **options):
    options.pop("object", None)
    return _input("file", object_name, method, options)


@field_helpers.register()
def text_area(object_name, method, **options):
    obj = options.pop("object", None)
    value = value_for(obj, method)
    return format_html(
        "<textarea{}>{}</textarea>",
        html_attrs(_attrs(object_name, method, options)),
        "" if value is None else value,
    )


def _is_checked(value, checked_value):
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return value is not None and str(value) == str(checked_value)


@field_helpers.register()
def check_box(object_name, method, *, checked_value="1", unchecked_value="0", **options):
    """
    A checkbox followed by a hidden input, so that an unchecked box still
    submits `unchecked_value`.
    """
    obj = options.pop("object", None)
    checked = _is_checked(value_for(obj, method), checked_value)
    attrs = _attrs(
        object_name,
        method,
        options,
        type="checkbox",
        value=str(checked_value),
        checked="checked" if checked else None,
    )
    return format_html(
        '<input{}/><input type="hidden" name="{}" value="{}"/>',
        html_attrs(attrs),
        tag_name(object_name, method),
        unchecked_value,
    )


@field_helpers.register()
def radio_button(object_name, method, tag_value, **options):
    obj = options.pop("object", None)
    pretty_tag_value = re.sub(r"\W", "", re.sub(r"\s", "_", str(tag_value))).lower()
    checked = str(value_for(obj, method)) == str(tag_value)
    attrs = _attrs(
        object_name,
        method,
        options,
        type="radio",
        value=str(tag_value),
        checked="checked" if checked else None,
    )
    attrs["id"] = f"{tag_id(object_name, method)}_{pretty_tag_value}"
    return format_html("<input{}/>", html_attrs(attrs))


def _normalize_choices(choices):
    for choice in choices:
        if isinstance(choice, (list, tuple)):
            value, label = choice
        else:
            value = label = choice
        yield str(value), label


@field_helpers.register()
def select(object_name, method, choices, *, include_blank=False, **options):
    """
    A select box. `choices` is a sequence of `(value, label)` pairs or of
    bare values. `include_blank` adds an empty option first, using the
    given text if it is a string.
    """
    obj = options.pop("object", None)
    current = value_for(obj, method)
    current = None if current is None else str(current)
    rows = []
    if include_blank:
        rows.append(("", None, "" if include_blank is True else include_blank))
    rows.extend(
        (value, "selected" if value == current else None, label) for value, label in _normalize_choices(choices)
    )
    option_tags = format_html_join(
        "",
        "<option{}>{}</option>",
        ((html_attrs({"value": value, "selected": selected}), label) for value, selected, label in rows),
    )
    return format_html("<select{}>{}</select>", html_attrs(_attrs(object_name, method, options)), option_tags)
