"""
Input forms for the JSON API.

JSON bodies are flattened into a :class:`.MultiDict` before they are handed
to a form: nested objects become ``parent-child`` keys, which is how
:class:`wtforms.FormField` names its subfields, and lists are left out.
"""

from typing import Any, Dict, List, Mapping, Optional as Opt, Sequence, \
    Type, TypeVar

from dateutil import parser as date_parser
from werkzeug.datastructures import MultiDict
from wtforms import Form, FormField, FloatField, IntegerField, \
    PasswordField, StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length, \
    NumberRange, Optional, ValidationError

from ..errors import ValidationFailed
from ..services import cases, communication, conversations, documents, \
    journal, resources

F = TypeVar('F', bound=Form)


def flatten(payload: Opt[Mapping[str, Any]], prefix: str = '') -> MultiDict:
    """Flatten a JSON object into form data."""
    data = MultiDict()
    for key, value in (payload or {}).items():
        name = f'{prefix}{key}'
        if isinstance(value, Mapping):
            data.update(flatten(value, f'{name}-'))
        elif value is not None and not isinstance(value, (list, tuple)):
            data.add(name, str(value))
    return data


def _collect(errors: Any, prefix: str = '') -> List[Dict[str, str]]:
    found = []
    for name, messages in errors.items():
        if isinstance(messages, dict):
            found.extend(_collect(messages, f'{prefix}{name}.'))
        else:
            found.extend({'field': f'{prefix}{name}', 'message': message}
                         for message in messages)
    return found


def validated(form_class: Type[F], data: Any) -> F:
    """
    Bind ``data`` (a JSON object or query args) to a form and validate it.

    Raises
    ------
    :class:`.ValidationFailed`

    """
    if not isinstance(data, MultiDict):
        data = flatten(data if isinstance(data, Mapping) else {})
    form = form_class(data)
    if not form.validate():
        raise ValidationFailed(_collect(form.errors))
    return form


_KINDS = {str: 'a string', list: 'a list', dict: 'an object',
          bool: 'true or false'}


def check_types(payload: Any, kinds: Mapping[str, type],
                nullable: Sequence[str] = ()) -> None:
    """
    Check the JSON types of fields a form cannot see.

    Fields missing from ``payload`` are fine. ``null`` is only accepted for
    the fields named in ``nullable``.

    Raises
    ------
    :class:`.ValidationFailed`

    """
    if not isinstance(payload, Mapping):
        return
    errors = []
    for name, kind in kinds.items():
        if name not in payload:
            continue
        value = payload[name]
        if value is None:
            if name not in nullable:
                errors.append({'field': name, 'message': 'Must not be null'})
        elif not isinstance(value, kind):
            errors.append({'field': name,
                           'message': f'Must be {_KINDS[kind]}'})
    if errors:
        raise ValidationFailed(errors)


def iso8601(form: Form, field: Any) -> None:
    """Field must hold an ISO-8601 date."""
    if not field.data:
        return
    try:
        date_parser.isoparse(field.data)
    except ValueError as e:
        raise ValidationError('Valid date is required') from e


def one_of(values: Any) -> AnyOf:
    return AnyOf(list(values), message='Must be one of: %(values)s')


class PageForm(Form):
    """Pagination query parameters."""

    page = IntegerField('page', validators=[Optional(), NumberRange(min=1)],
                        default=1)
    limit = IntegerField('limit',
                         validators=[Optional(), NumberRange(min=1, max=100)],
                         default=10)


class SearchPageForm(PageForm):
    limit = IntegerField('limit',
                         validators=[Optional(), NumberRange(min=1, max=50)],
                         default=10)


# Accounts.

class RegistrationForm(Form):
    profileName = StringField('profileName', validators=[
        DataRequired(), Length(min=2, max=50,
                               message='Profile name must be between 2 and'
                                       ' 50 characters')])
    email = StringField('email', validators=[
        Optional(), Email(message='Please provide a valid email')])
    password = PasswordField('password', validators=[
        Optional(), Length(min=6, message='Password must be at least 6'
                                          ' characters long')])


class LoginForm(Form):
    profileName = StringField('profileName', validators=[Optional()])
    email = StringField('email', validators=[
        Optional(), Email(message='Please provide a valid email')])
    password = PasswordField('password', validators=[Optional()])


class ThemeForm(Form):
    theme = StringField('theme', validators=[
        Optional(), AnyOf(['light', 'dark'],
                          message='Theme must be either light or dark')])


class ProfileForm(Form):
    profileName = StringField('profileName', validators=[
        Optional(), Length(min=2, max=50,
                           message='Profile name must be between 2 and 50'
                                   ' characters')])
    email = StringField('email', validators=[
        Optional(), Email(message='Please provide a valid email')])
    preferences = FormField(ThemeForm)


class PasswordForm(Form):
    currentPassword = PasswordField('currentPassword', validators=[
        DataRequired(message='Current password is required')])
    newPassword = PasswordField('newPassword', validators=[
        DataRequired(), Length(min=6, message='New password must be at least'
                                              ' 6 characters long')])


class UserQueryForm(PageForm):
    status = StringField('status', validators=[
        Optional(), one_of(('active', 'inactive'))])


# Cases.

class CaseQueryForm(PageForm):
    status = StringField('status', validators=[
        Optional(), one_of(cases.STATUSES)])
    priority = StringField('priority', validators=[
        Optional(), one_of(cases.PRIORITIES)])
    sortOrder = StringField('sortOrder', validators=[
        Optional(), one_of(('asc', 'desc'))])


class CaseForm(Form):
    title = StringField('title', validators=[
        DataRequired(), Length(max=200, message='Title is required and must'
                                                ' be less than 200'
                                                ' characters')])
    description = StringField('description', validators=[
        DataRequired(message='Description is required')])
    caseType = StringField('caseType', validators=[
        DataRequired(), one_of(cases.CASE_TYPES)])
    priority = StringField('priority', validators=[
        Optional(), one_of(cases.PRIORITIES)])
    status = StringField('status', validators=[
        Optional(), one_of(cases.STATUSES)])
    caseNumber = StringField('caseNumber', validators=[Optional()])


class CaseUpdateForm(Form):
    title = StringField('title', validators=[Optional(), Length(max=200)])
    description = StringField('description', validators=[Optional()])
    caseType = StringField('caseType', validators=[
        Optional(), one_of(cases.CASE_TYPES)])
    status = StringField('status', validators=[
        Optional(), one_of(cases.STATUSES)])
    priority = StringField('priority', validators=[
        Optional(), one_of(cases.PRIORITIES)])


class TimelineEventForm(Form):
    title = StringField('title', validators=[
        DataRequired(message='Title is required')])
    description = StringField('description', validators=[
        DataRequired(message='Description is required')])
    date = StringField('date', validators=[
        DataRequired(message='Valid date is required'), iso8601])
    type = StringField('type', validators=[
        Optional(), one_of(cases.EVENT_TYPES)])
    priority = StringField('priority', validators=[
        Optional(), one_of(cases.PRIORITIES)])


class TimelineUpdateForm(Form):
    title = StringField('title', validators=[Optional()])
    description = StringField('description', validators=[Optional()])
    date = StringField('date', validators=[Optional(), iso8601])
    status = StringField('status', validators=[
        Optional(), one_of(cases.EVENT_STATUSES)])


class DeadlineQueryForm(Form):
    days = IntegerField('days', validators=[Optional(), NumberRange(min=0)],
                        default=30)


class NoteForm(Form):
    title = StringField('title', validators=[Optional()])
    content = StringField('content', validators=[
        DataRequired(message='Note content is required')])


# Chat.

class ConversationQueryForm(PageForm):
    status = StringField('status', validators=[
        Optional(), one_of(conversations.STATUSES)])
    bookmarked = StringField('bookmarked', validators=[
        Optional(), one_of(('true', 'false'))])
    sortOrder = StringField('sortOrder', validators=[
        Optional(), one_of(('asc', 'desc'))])


class ContextForm(Form):
    legalArea = StringField('legalArea', validators=[Optional()])
    jurisdiction = StringField('jurisdiction', validators=[Optional()])
    urgency = StringField('urgency', validators=[
        Optional(), one_of(conversations.URGENCIES)])


class ChatSettingsForm(Form):
    temperature = FloatField('temperature', validators=[
        Optional(), NumberRange(min=0, max=2)])
    maxTokens = IntegerField('maxTokens', validators=[
        Optional(), NumberRange(min=1, max=4000)])


class ConversationForm(Form):
    title = StringField('title', validators=[
        DataRequired(), Length(max=200, message='Title is required and must'
                                                ' be less than 200'
                                                ' characters')])
    description = StringField('description', validators=[Optional()])
    category = StringField('category', validators=[
        Optional(), one_of(conversations.CATEGORIES)])
    caseId = StringField('caseId', validators=[Optional()])
    context = FormField(ContextForm)


class ConversationUpdateForm(Form):
    title = StringField('title', validators=[Optional(), Length(max=200)])
    description = StringField('description', validators=[Optional()])
    category = StringField('category', validators=[
        Optional(), one_of(conversations.CATEGORIES)])
    settings = FormField(ChatSettingsForm)


class MessageForm(Form):
    content = StringField('content', validators=[
        DataRequired(message='Message content is required')])


class TextSearchForm(SearchPageForm):
    q = StringField('q', validators=[
        DataRequired(message='Search query is required')])


# Resources.

class ResourceQueryForm(SearchPageForm):
    q = StringField('q', validators=[Optional()])
    category = StringField('category', validators=[Optional()])
    type = StringField('type', validators=[
        Optional(), one_of(resources.TYPES)])
    jurisdiction = StringField('jurisdiction', validators=[
        Optional(), one_of(resources.JURISDICTIONS)])
    sortOrder = StringField('sortOrder', validators=[
        Optional(), one_of(('asc', 'desc'))])


class RiskAssessmentForm(Form):
    caseId = StringField('caseId', validators=[Optional()])
    description = StringField('description', validators=[Optional()])


def strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# Journal.

class JournalQueryForm(PageForm):
    category = StringField('category', validators=[
        Optional(), one_of(journal.CATEGORIES)])
    mood = StringField('mood', validators=[Optional(), one_of(journal.MOODS)])
    caseId = StringField('caseId', validators=[Optional()])
    favorites = StringField('favorites', validators=[
        Optional(), one_of(('true', 'false'))])
    sortOrder = StringField('sortOrder', validators=[
        Optional(), one_of(('asc', 'desc'))])


class JournalEntryForm(Form):
    title = StringField('title', filters=[strip], validators=[
        DataRequired(), Length(max=200, message='Title is required and must'
                                                ' be less than 200'
                                                ' characters')])
    content = StringField('content', validators=[
        DataRequired(message='Content is required')])
    mood = StringField('mood', validators=[Optional(), one_of(journal.MOODS)])
    category = StringField('category', validators=[
        Optional(), one_of(journal.CATEGORIES)])
    caseId = StringField('caseId', validators=[Optional()])


class JournalUpdateForm(Form):
    title = StringField('title', filters=[strip], validators=[
        Optional(), Length(max=200)])
    content = StringField('content', validators=[Optional()])
    mood = StringField('mood', validators=[Optional(), one_of(journal.MOODS)])
    category = StringField('category', validators=[
        Optional(), one_of(journal.CATEGORIES)])
    caseId = StringField('caseId', validators=[Optional()])


class ReminderForm(Form):
    date = StringField('date', validators=[
        DataRequired(message='Valid date is required'), iso8601])
    message = StringField('message', filters=[strip], validators=[
        DataRequired(message='Reminder message is required')])


class UpcomingRemindersForm(Form):
    days = IntegerField('days', validators=[
        Optional(), NumberRange(min=1, max=365)], default=7)


# Communication.

class TemplateQueryForm(Form):
    type = StringField('type', validators=[
        Optional(), one_of(communication.TEMPLATE_TYPES + ('all',))])
    category = StringField('category', validators=[Optional()])
    tone = StringField('tone', validators=[
        Optional(), one_of(communication.TONES)])


class AnalysisForm(Form):
    text = StringField('text', filters=[strip], validators=[
        DataRequired(message='Text must be at least 10 characters long'),
        Length(min=10, message='Text must be at least 10 characters long')])
    type = StringField('type', validators=[
        Optional(), one_of(communication.ANALYSIS_TYPES)])
    audience = StringField('audience', validators=[
        Optional(), one_of(communication.AUDIENCES)])


class TipsQueryForm(Form):
    category = StringField('category', validators=[
        Optional(), one_of(communication.TIP_CATEGORIES + ('all',))])


class ScenarioQueryForm(Form):
    difficulty = StringField('difficulty', validators=[
        Optional(), one_of(communication.DIFFICULTIES)])
    type = StringField('type', validators=[
        Optional(), one_of(communication.SCENARIO_TYPES)])


class GenerationForm(Form):
    type = StringField('type', validators=[
        DataRequired(message='Invalid communication type'),
        AnyOf(communication.GENERATED_TYPES,
              message='Invalid communication type')])
    audience = StringField('audience', validators=[
        DataRequired(message='Invalid audience'),
        AnyOf(communication.GENERATION_AUDIENCES,
              message='Invalid audience')])
    purpose = StringField('purpose', filters=[strip], validators=[
        DataRequired(message='Purpose must be at least 5 characters'),
        Length(min=5, message='Purpose must be at least 5 characters')])
    tone = StringField('tone', validators=[
        Optional(), one_of(communication.TONES)])
    context = StringField('context', filters=[strip],
                          validators=[Optional()])


# Documents.

class DocumentQueryForm(PageForm):
    limit = IntegerField('limit',
                         validators=[Optional(), NumberRange(min=1, max=100)],
                         default=20)
    category = StringField('category', validators=[
        Optional(), one_of(documents.CATEGORIES)])
    fileType = StringField('fileType', validators=[Optional()])
    caseId = StringField('caseId', validators=[Optional()])
    sortOrder = StringField('sortOrder', validators=[
        Optional(), one_of(('asc', 'desc'))])


class DocumentUploadForm(Form):
    title = StringField('title', filters=[strip], validators=[
        Optional(), Length(min=1, max=200)])
    description = StringField('description', filters=[strip],
                              validators=[Optional()])
    category = StringField('category', validators=[
        Optional(), one_of(documents.CATEGORIES)])
    caseId = StringField('caseId', validators=[Optional()])


class DocumentUpdateForm(Form):
    title = StringField('title', filters=[strip], validators=[
        Optional(), Length(min=1, max=200)])
    description = StringField('description', validators=[Optional()])
    category = StringField('category', validators=[
        Optional(), one_of(documents.CATEGORIES)])


class AnnotationForm(Form):
    type = StringField('type', validators=[
        DataRequired(message='Invalid annotation type'),
        AnyOf(documents.ANNOTATION_TYPES, message='Invalid annotation type')])
    content = StringField('content', filters=[strip],
                          validators=[Optional()])
    page = IntegerField('page', validators=[Optional(), NumberRange(min=1)])
    color = StringField('color', validators=[Optional()])
