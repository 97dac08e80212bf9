"""
Administrator forms for managing team accounts.
"""
from flask_wtf import FlaskForm
from wtforms import SelectField, StringField, SubmitField
from wtforms.validators import DataRequired, Email, Length, Optional, URL

from teamfocuz.models import UserRole


class UserForm(FlaskForm):
    """
    Create or edit a team account.

    Username uniqueness is enforced by the user store, not here, so that the
    same rule applies to every caller.
    """

    username = StringField(
        "Username",
        validators=[DataRequired(), Length(min=3, max=80)],
        render_kw={"placeholder": "e.g. veditor"},
    )
    name = StringField(
        "Full Name",
        validators=[DataRequired(), Length(max=120)],
    )
    email = StringField(
        "Email",
        validators=[DataRequired(), Email(), Length(max=120)],
    )
    role = SelectField(
        "Role",
        choices=[(role.value, role.display_name) for role in UserRole],
        validators=[DataRequired()],
    )
    avatar = StringField("Avatar URL", validators=[Optional(), URL()])
    submit = SubmitField("Save")

    def to_changes(self) -> dict:
        """Field values as keyword arguments for the user actions."""
        return {
            "username": self.username.data.strip(),
            "name": self.name.data.strip(),
            "email": self.email.data.strip(),
            "role": UserRole(self.role.data),
            "avatar": (self.avatar.data or "").strip() or None,
        }
