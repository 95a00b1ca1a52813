"""
Access to the LABELIFY_* Django settings.

Settings are read on each call, so `override_settings` works as expected.
"""
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

DEFAULT_FORM_BUILDER = "labelify.forms.FormBuilder"


def default_form_builder() -> type:
    """
    The builder class used by `form_for` when none is passed, as named by
    LABELIFY_DEFAULT_FORM_BUILDER.
    """
    from labelify.forms import FormBuilder

    path = getattr(settings, "LABELIFY_DEFAULT_FORM_BUILDER", DEFAULT_FORM_BUILDER)
    try:
        builder = import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(f"LABELIFY_DEFAULT_FORM_BUILDER {path!r} could not be imported: {e}") from e
    if not (isinstance(builder, type) and issubclass(builder, FormBuilder)):
        raise ImproperlyConfigured(f"LABELIFY_DEFAULT_FORM_BUILDER {path!r} is not a FormBuilder subclass")
    return builder


def translate_enabled() -> bool:
    return getattr(settings, "LABELIFY_TRANSLATE", True)
