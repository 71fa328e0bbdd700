"""
Form Classes for the Content API

This module contains the form classes used to validate every write request,
built on Flask-WTF and WTForms. Flask-WTF reads the submitted data from the
JSON body or from multipart form data, so the same form serves both.

The forms include:
    - PostForm / PostUpdateForm: blog post create and update
    - CommentForm: comment submission
    - MediaUploadForm / MediaAttachForm: media upload and late attachment
    - DanmakuForm: danmaku wall submission
"""
from flask import current_app, request
from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import StringField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, Regexp, ValidationError

from homesite import errors


def strip_value(value):
    """Trim strings; JSON numbers are coerced to text first"""
    if value is None:
        return None
    return str(value).strip()


class ApiForm(FlaskForm):
    """Base form for JSON endpoints (no CSRF token, no HTML rendering)"""

    class Meta:
        csrf = False

        def wrap_formdata(self, form, formdata):
            if request.is_json and not isinstance(request.get_json(silent=True), dict):
                raise errors.ValidationError('Request body must be a JSON object')
            return super().wrap_formdata(form, formdata)

    def invalid_fields(self):
        """Names of the submitted keys that failed validation, in declaration order"""
        return [field.name for field in self if field.errors]

    def validate_or_raise(self):
        """驗證表單，失敗時拋出 ValidationError（不會有任何寫入）"""
        if not self.validate():
            raise errors.ValidationError(fields=self.invalid_fields())
        return self


class PostForm(ApiForm):
    title = StringField('Title', filters=[strip_value], validators=[DataRequired(), Length(max=200)])
    content = TextAreaField('Content', filters=[strip_value], validators=[DataRequired(), Length(max=100000)])
    category = StringField('Category', filters=[strip_value], validators=[DataRequired()])
    author = StringField('Author', filters=[strip_value], validators=[DataRequired(), Length(max=100)])

    def validate_category(self, field):
        categories = current_app.config.get('BLOG_CATEGORIES', ())
        if field.data not in categories:
            raise ValidationError(f"Category must be one of: {', '.join(categories)}")

    @property
    def post_data(self) -> dict:
        return {
            'title': self.title.data,
            'content': self.content.data,
            'category': self.category.data,
            'author': self.author.data,
        }


class PostUpdateForm(PostForm):
    id = StringField('Id', filters=[strip_value], validators=[DataRequired()])


class CommentForm(ApiForm):
    post_id = StringField('Post', name='postId', filters=[strip_value], validators=[DataRequired()])
    author = StringField('Author', filters=[strip_value], validators=[DataRequired(), Length(max=100)])
    content = TextAreaField('Content', filters=[strip_value], validators=[DataRequired(), Length(max=5000)])


class MediaUploadForm(ApiForm):
    file = FileField('File', validators=[FileRequired()])
    post_id = StringField('Post', name='postId', filters=[strip_value], validators=[Optional()])


class MediaAttachForm(ApiForm):
    post_id = StringField('Post', name='postId', filters=[strip_value], validators=[DataRequired()])


class DanmakuForm(ApiForm):
    text = StringField('Text', filters=[strip_value], validators=[DataRequired(), Length(max=200)])
    name = StringField('Name', filters=[strip_value], validators=[DataRequired(), Length(max=50)])
    color = StringField('Color', filters=[strip_value], validators=[
        Optional(),
        Length(max=32),
        Regexp(r'^(#[0-9a-fA-F]{3,8}|[a-zA-Z]+|rgba?\([\d\s.,%]+\))$', message='Invalid color')
    ])
    top = IntegerField('Top', validators=[Optional(), NumberRange(min=0, max=100)])
