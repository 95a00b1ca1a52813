from django import template
from django.template.base import kwarg_re, token_kwargs
from django.template.exceptions import TemplateSyntaxError
from django.utils.safestring import mark_safe

from labelify import forms

register = template.Library()


def _split_as(tag_name, bits):
    if len(bits) < 2 or bits[-2] != "as":
        raise TemplateSyntaxError(f"'{tag_name}' tag must end with 'as <variable>'")
    return bits[:-2], bits[-1]


def _positional(parser, bits, max_count):
    # Positional arguments up to the first keyword argument
    args = []
    while bits and len(args) < max_count and not kwarg_re.match(bits[0]).group(1):
        args.append(parser.compile_filter(bits.pop(0)))
    return args


class LabelledFormNode(template.Node):
    def __init__(self, object_name, obj, options, target, nodelist):
        self.object_name = object_name
        self.obj = obj
        self.options = options
        self.target = target
        self.nodelist = nodelist

    def render(self, context):
        object_name = self.object_name.resolve(context)
        obj = None if self.obj is None else self.obj.resolve(context)
        options = {key: value.resolve(context) for key, value in self.options.items()}
        output = []
        with forms.labelled_form_for(output, object_name, obj, **options) as builder:
            with context.push({self.target: builder}):
                output.append(self.nodelist.render(context))
        return mark_safe("".join(output))


@register.tag
def labelled_form_for(parser, token):
    """
    Renders a form with labelled fields for an object, making the form
    builder available as a variable inside the block.

    Usage::

        {% labelled_form_for "person" person url="/save/" as f %}
          {% field f "text_field" "name" %}
          {% submit f "Save" %}
        {% endlabelled_form_for %}

    """
    tag_name, *bits = token.split_contents()
    bits, target = _split_as(tag_name, bits)
    args = _positional(parser, bits, 2)
    if not args:
        raise TemplateSyntaxError(f"'{tag_name}' tag requires an object name")
    options = token_kwargs(bits, parser)
    if bits:
        raise TemplateSyntaxError(f"'{tag_name}' tag received unexpected arguments: {' '.join(bits)}")
    nodelist = parser.parse((f"end{tag_name}",))
    parser.delete_first_token()
    object_name, obj = args if len(args) == 2 else (args[0], None)
    return LabelledFormNode(object_name, obj, options, target, nodelist)


class ScopeNode(template.Node):
    def __init__(self, builder, name, obj, target, nodelist, *, association: bool):
        self.builder = builder
        self.name = name
        self.obj = obj
        self.target = target
        self.nodelist = nodelist
        self.association = association

    def render(self, context):
        builder = self.builder.resolve(context)
        name = self.name.resolve(context)
        if self.association:
            scope = builder.with_association(name)
        else:
            scope = builder.with_object(name, None if self.obj is None else self.obj.resolve(context))
        with scope as scoped_builder, context.push({self.target: scoped_builder}):
            return self.nodelist.render(context)


def _scope_tag(parser, token, *, association: bool):
    tag_name, *bits = token.split_contents()
    bits, target = _split_as(tag_name, bits)
    max_args = 2 if association else 3
    if not (2 <= len(bits) <= max_args):
        raise TemplateSyntaxError(f"'{tag_name}' tag received the wrong number of arguments")
    args = [parser.compile_filter(bit) for bit in bits]
    nodelist = parser.parse((f"end{tag_name}",))
    parser.delete_first_token()
    builder, name, *rest = args
    return ScopeNode(builder, name, rest[0] if rest else None, target, nodelist, association=association)


@register.tag
def with_association(parser, token):
    """
    Scopes part of a form to an associated object.

    Usage::

        {% with_association f "address" as a %}
          {% field a "text_field" "city" %}
        {% endwith_association %}

    """
    return _scope_tag(parser, token, association=True)


@register.tag
def with_object(parser, token):
    """
    Scopes part of a form to another object.

    Usage::

        {% with_object f "address" address as a %}
          {% field a "text_field" "city" %}
        {% endwith_object %}

    """
    return _scope_tag(parser, token, association=False)


@register.simple_tag
def field(builder, selector, method, *args, **options):
    return builder.field(selector, method, *args, **options)


@register.simple_tag
def submit(builder, value="Submit", **options):
    return builder.submit(value, **options)


@register.simple_tag
def label(builder, method, **attrs):
    return builder.label(method, **attrs)
