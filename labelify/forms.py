"""
Form builders, and the `form_for` / `labelled_form_for` entry points.

Example::

    output = []
    with labelled_form_for(output, "person", person, url="/people/1/") as f:
        output.append(f.text_field("first_name"))
        output.append(f.check_box("admin"))
        with f.with_association("address") as a:
            output.append(a.text_field("city"))
        output.append(f.submit("Save"))
    html = mark_safe("".join(output))

Every field rendered through a `LabelledFormBuilder` is preceded by a
`<label>` containing the field name and any validation errors for the field,
except for hidden fields.
"""
import logging
import re
from contextlib import contextmanager
from functools import partial

import attr
from django.core.exceptions import NON_FIELD_ERRORS, FieldDoesNotExist
from django.db import models
from django.forms import BaseForm
from django.forms.utils import pretty_name
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe
from django.utils.text import capfirst, get_text_list
from django.utils.translation import gettext

from labelify import conf
from labelify.helpers import UnsupportedFieldHelper, field_helpers, html_attrs

logger = logging.getLogger(__name__)


def translate(text):
    text = str(text)
    if conf.translate_enabled():
        return gettext(text)
    return text


def to_sentence(messages) -> str:
    """
    Join messages as "a, b and c", translating each one.
    """
    return get_text_list([translate(m) for m in messages], translate("and"))


def get_errors(obj, name) -> list:
    """
    Returns the validation messages for `name` on `obj`, which can be anything
    with an `errors` mapping, such as a bound Django form.
    """
    errors = getattr(obj, "errors", None)
    if errors is None:
        return []
    messages = errors.get(name)
    if not messages:
        return []
    if isinstance(messages, str):
        return [messages]
    return list(messages)


def get_verbose_name(obj, method):
    """
    Returns the human readable name `obj` defines for the field `method`, or None.
    """
    if isinstance(obj, BaseForm):
        field = obj.fields.get(method)
        return None if field is None else field.label
    if isinstance(obj, models.Model):
        try:
            field = obj._meta.get_field(method)
        except FieldDoesNotExist:
            return None
        # Reverse relations and generic foreign keys have no verbose_name
        verbose_name = getattr(field, "verbose_name", None)
        return None if verbose_name is None else capfirst(verbose_name)
    return None


def error_span(messages) -> SafeString:
    return format_html('<span class="error_message">{}</span>', to_sentence(messages))


@attr.s(auto_attribs=True)
class LabelDirective:
    suppressed: bool
    # None means use the default text for the field
    text: str | None = None
    css_class: str | None = None


class FormBuilder:
    """
    Renders fields for `object_name`/`obj` by passing each call to the named
    helper in `helpers`. All registered helpers are available as methods,
    e.g. `builder.text_field("name")`. Labels and submit buttons are
    rendered only when asked for.
    """

    def __init__(self, object_name, obj=None, options=None, *, helpers=None):
        self.object_name = object_name
        self.object = obj
        self.options = options or {}
        self.helpers = field_helpers if helpers is None else helpers

    def field(self, selector, method, *args, **options):
        if "css_class" in options:
            options["class"] = options.pop("css_class")
        helper = self.helpers.get(selector)
        options["object"] = self.object
        return helper(self.object_name, method, *args, **options)

    def __getattr__(self, name):
        helpers = self.__dict__.get("helpers")
        if name.startswith("_") or helpers is None or name not in helpers:
            raise UnsupportedFieldHelper(f"{self.__class__.__name__} has no attribute or field helper {name!r}")
        return partial(self.field, name)

    def label(self, method, label_value=None, **attrs) -> SafeString:
        """
        Returns a label for the given attribute. The `for` attribute points
        to the `id` generated by the field helpers.
        """
        if label_value is None:
            label_value = get_verbose_name(self.object, method) or pretty_name(method)
        return format_html(
            '<label for="{}_{}"{}><span class="field_name">{}</span>{}</label>',
            self.object_name,
            method,
            html_attrs(attrs),
            translate(label_value),
            self.error_messages(method),
        )

    def error_messages(self, method) -> SafeString:
        """
        Error messages for the given field, joined into a sentence.
        """
        messages = get_errors(self.object, method)
        if not messages:
            return mark_safe("")
        return error_span(messages)

    def submit(self, value="Submit", **options) -> SafeString:
        """
        Returns a submit input with style class `submit`. With `type="button"`
        a button element containing a span with the value is rendered instead.
        """
        css_class = options.pop("class", options.pop("css_class", None))
        submit_type = str(options.pop("type", ""))
        attrs = {"class": "submit" if not css_class else f"submit {css_class}", **options}
        if submit_type == "button":
            return format_html('<button type="submit"{}><span>{}</span></button>', html_attrs(attrs), translate(value))
        return format_html('<input type="submit" value="{}"{}/>', translate(value), html_attrs(attrs))

    @contextmanager
    def with_object(self, object_name, obj=None):
        """
        Scope a piece of the form to another object.
        """
        previous = self.object_name, self.object
        self.object_name, self.object = object_name, obj
        try:
            yield self
        finally:
            self.object_name, self.object = previous

    def with_association(self, association):
        """
        Scope a piece of the form to an object associated with the bound object.
        """
        return self.with_object(association, None if self.object is None else getattr(self.object, association))


class LabelledFormBuilder(FormBuilder):
    """
    Form builder that includes a label with every field. Fields accept
    the extra options:

    - `label`: True to include a label (the default), False to leave it
      out, or any other value to use as the label text.
    - `no_label`: True to leave the label out.

    Labels are never rendered for `hidden_field`, or for helpers matched by
    the `no_label_for` form option, which can be a helper name, a compiled
    regex or a collection of names.
    """

    def suppresses_label_for(self, selector) -> bool:
        if selector == "hidden_field":
            return True
        no_label_for = self.options.get("no_label_for")
        if no_label_for is None:
            return False
        if isinstance(no_label_for, str):
            return selector == no_label_for
        if isinstance(no_label_for, re.Pattern):
            return no_label_for.search(selector) is not None
        return selector in no_label_for

    def label_directive(self, selector, options) -> LabelDirective:
        # Always consume the label options so they don't reach the helper
        label_value = options.pop("label", None)
        no_label = options.pop("no_label", False)
        if self.suppresses_label_for(selector) or label_value is False or no_label:
            return LabelDirective(suppressed=True)
        return LabelDirective(
            suppressed=False,
            text=None if label_value is True else label_value,
            css_class=options.get("class", options.get("css_class")),
        )

    def field(self, selector, method, *args, **options):
        directive = self.label_directive(selector, options)
        if directive.suppressed:
            logger.debug("No label for %s %s_%s", selector, self.object_name, method)
            label = ""
        else:
            label_attrs = {} if directive.css_class is None else {"class": directive.css_class}
            label = self.label(method, label_value=directive.text, **label_attrs)
        return format_html("{}{}", label, super().field(selector, method, *args, **options))


@contextmanager
def form_for(output, object_name, obj=None, *, url=None, html=None, builder=None, helpers=None, **options):
    """
    Appends a `<form>` tag to `output` and yields a form builder for
    `object_name`/`obj`. The closing tag is appended when the block
    completes normally.

    `builder` defaults to LABELIFY_DEFAULT_FORM_BUILDER, `html` supplies
    extra attributes for the form tag. Remaining options are available to
    the builder.
    """
    if builder is None:
        builder = conf.default_form_builder()
    form_attrs = {"action": url, "method": "post"}
    form_attrs.update(html or {})
    output.append(format_html("<form{}>", html_attrs(form_attrs)))
    yield builder(object_name, obj, options, helpers=helpers)
    output.append(mark_safe("</form>"))


@contextmanager
def labelled_form_for(output, object_name, obj=None, **options):
    """
    Like `form_for`, but always with a `LabelledFormBuilder`, and with
    any errors on the object as a whole rendered before the form.
    """
    builder = options.pop("builder", None)
    if not (isinstance(builder, type) and issubclass(builder, LabelledFormBuilder)):
        builder = LabelledFormBuilder
    base_messages = get_errors(obj, NON_FIELD_ERRORS)
    if base_messages:
        output.append(error_span(base_messages))
    with form_for(output, object_name, obj, builder=builder, **options) as f:
        yield f


def render_labelled_form(object_name, obj=None, *, body, **options) -> SafeString:
    """
    Renders a complete labelled form, calling `body` with the form builder.
    Markup returned by `body` is placed inside the form.
    """
    output = []
    with labelled_form_for(output, object_name, obj, **options) as f:
        content = body(f)
        if content is not None:
            output.append(conditional_escape(content))
    return mark_safe("".join(output))
