from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict

from taskflow.errors import ValidationFailed

# Formats accepted for date/time fields, including what browsers send from
# Date.toISOString()
DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S.%fZ', '%Y-%m-%dT%H:%M:%SZ', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d']


class JsonForm(FlaskForm):
    """Form fed from a JSON body; the session cookie guards these endpoints."""

    class Meta:
        csrf = False


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return data


def _form_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return value if isinstance(value, str) else str(value)


def validate_form(form_class, data):
    """
    Validate ``data`` with ``form_class``.

    Null values are left out of the form data so optional fields validate;
    callers that care about explicit nulls check ``data`` for the key.
    """
    formdata = MultiDict({key: _form_value(value) for key, value in data.items() if value is not None})
    form = form_class(formdata=formdata)
    if not form.validate():
        field, messages = next(iter(form.errors.items()))
        raise ValidationFailed(f"{field}: {messages[0]}", errors=form.errors)
    return form


def present_fields(form, data, names):
    """Values of the fields among ``names`` that the client actually sent."""
    return {name: form[name].data for name in names if name in data}
