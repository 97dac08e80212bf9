"""
Forms for the contributor pages.
"""
from flask_wtf import FlaskForm
from flask_wtf.file import MultipleFileField
from wtforms import SubmitField


class UploadForm(FlaskForm):
    """Select one or more files of the contributor's type."""

    files = MultipleFileField("Files")
    submit = SubmitField("Upload")
