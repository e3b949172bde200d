from flask_wtf import FlaskForm
from wtforms import StringField, FloatField, SelectField
from wtforms.widgets import PasswordInput
from wtforms.validators import (
    DataRequired, Email, Length, Optional, StopValidation, ValidationError as FieldError,
)

from .errors import ValidationError
from .models import ROLE_STUDENT, ROLE_TEACHER, RESOURCE_TYPES

# Email() only on registration.
EMAIL_DEV = Email(check_deliverability=False)


class JsonForm(FlaskForm):
    """Flask-WTF reads JSON bodies as form data; API clients carry no CSRF token."""
    class Meta:
        csrf = False


class LooseFloatField(FloatField):
    """FloatField that also rejects JSON null / non-scalars instead of crashing."""
    def process_formdata(self, valuelist):
        if not valuelist:
            return
        try:
            self.data = float(valuelist[0])
        except (TypeError, ValueError) as exc:
            self.data = None
            raise ValueError(self.gettext("Not a valid float value.")) from exc


class JsonStringField(StringField):
    """StringField that rejects JSON numbers, lists and objects; null stays None."""
    def process_formdata(self, valuelist):
        if valuelist and valuelist[0] is not None and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext("Not a valid string."))
        super().process_formdata(valuelist)


class JsonPasswordField(JsonStringField):
    widget = PasswordInput(hide_value=True)


def _required_number(form, field):
    # DataRequired would reject a legitimate 0
    if field.data is None:
        raise StopValidation("Grade is required.")


def _not_blank(form, field):
    if field.data is not None and not str(field.data).strip():
        raise FieldError("Must not be blank.")


class RegisterForm(JsonForm):
    name = JsonStringField("Name", validators=[DataRequired(), Length(min=2, max=100)])
    email = JsonStringField("Email", validators=[DataRequired(), EMAIL_DEV, Length(max=255)])
    password = JsonPasswordField("Password", validators=[
        DataRequired(), Length(min=8, message="Minimum 8 characters."),
    ])
    role = SelectField("Role", choices=[ROLE_STUDENT, ROLE_TEACHER], default=ROLE_STUDENT)


class LoginForm(JsonForm):
    email = JsonStringField("Email", validators=[DataRequired(), Length(max=255)])
    password = JsonPasswordField("Password", validators=[DataRequired()])


class ClassroomForm(JsonForm):
    name = JsonStringField("Name", validators=[DataRequired(), Length(min=3, max=120)])
    description = JsonStringField("Description", validators=[Optional(), Length(max=2000)])


class ClassroomUpdateForm(JsonForm):
    name = JsonStringField("Name", validators=[Optional(), Length(min=3, max=120)])
    description = JsonStringField("Description", validators=[Optional(), Length(max=2000)])


class JoinClassroomForm(JsonForm):
    code = JsonStringField("Code", validators=[
        DataRequired(), Length(min=6, max=6, message="Invalid classroom code"),
    ])


class GradeForm(JsonForm):
    # range is enforced by the lifecycle service so the rule lives in one place
    grade = LooseFloatField("Grade", validators=[_required_number])
    feedback = JsonStringField("Feedback", validators=[Optional(), Length(max=5000)])


class ResourceForm(JsonForm):
    title = JsonStringField("Title", validators=[DataRequired(), _not_blank, Length(max=200)])
    description = JsonStringField("Description", validators=[Optional(), Length(max=2000)])
    file_url = JsonStringField("File URL", validators=[DataRequired(), _not_blank, Length(max=500)])
    type = SelectField("Type", choices=list(RESOURCE_TYPES), default="OTHER")


def validated(form):
    """Run the form validators; raise ValidationError with the field messages."""
    if not form.validate_on_submit():
        raise ValidationError("Invalid data", errors=form.errors)
    return form
