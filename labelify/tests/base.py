import attr
from django import forms
from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.utils.html import format_html
from pyquery import PyQuery

from labelify.helpers import field_helpers


def pq(html) -> PyQuery:
    # Wrapped so that fragments with several top level elements parse as one document
    return PyQuery(f"<div>{html}</div>")


@attr.s(auto_attribs=True)
class Address:
    city: str = "Amsterdam"


@attr.s(auto_attribs=True)
class Person:
    name: str = "Tester"
    first_name: str = "Test"
    admin: bool = False
    gender: str = "m"
    biography: str = ""
    address: Address | None = None
    errors: dict = attr.Factory(dict)


def person_with_errors(**errors):
    return Person(name="", errors=errors)


def person_with_base_errors(*messages):
    return Person(name="", errors={NON_FIELD_ERRORS: list(messages)})


class PersonForm(forms.Form):
    name = forms.CharField(label="Full name")
    age = forms.IntegerField()

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get("name") == "taken":
            raise ValidationError("That name is already taken")
        return cleaned_data


def custom_helpers():
    """
    A registry with the standard helpers and some homegrown ones.
    """
    helpers = field_helpers.copy()

    @helpers.register()
    def my_text_field(object_name, method, **options):
        return format_html('<input type="my-text" value="{}"/>', getattr(options["object"], method))

    @helpers.register()
    def make_span_for_block(object_name, method, body, **options):
        return format_html('<span class="span_for_block">{}</span>', body())

    return helpers
