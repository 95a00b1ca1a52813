from django.apps import AppConfig
from django.core.checks import Error, register
from django.core.exceptions import ImproperlyConfigured

from labelify import conf


class LabelifyConfig(AppConfig):
    name = "labelify"
    verbose_name = "labelled forms"
    default_auto_field = "django.db.models.BigAutoField"


@register()
def check_default_form_builder(app_configs, **kwargs):
    try:
        conf.default_form_builder()
    except ImproperlyConfigured as e:
        return [
            Error(
                str(e),
                hint="Set LABELIFY_DEFAULT_FORM_BUILDER to the dotted path of a labelify.forms.FormBuilder subclass.",
                id="labelify.E001",
            )
        ]
    return []
