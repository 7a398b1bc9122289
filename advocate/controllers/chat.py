"""
Controllers for chat conversations with the assistant.

Posting a message is the one place where a request may partially succeed:
the user's message is committed before the assistant is asked for a reply,
and stays in the conversation if the assistant fails. The response then
carries only the user's message and an ``aiError``.
"""

import logging
from typing import Any, Optional, Tuple

from .. import domain, errors, status
from ..services import assistant, cases, conversations
from .forms import ConversationForm, ConversationQueryForm, \
    ConversationUpdateForm, MessageForm, TextSearchForm, validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]

AI_UNAVAILABLE = 'AI service temporarily unavailable'


def conversation_not_found() -> errors.NotFound:
    return errors.NotFound('Conversation not found', 'CONVERSATION_NOT_FOUND')


def list_conversations(principal: domain.Principal, params: Any) -> Response:
    form = validated(ConversationQueryForm, params)
    found, pagination = conversations.list_conversations(
        principal.user_id,
        page=form.page.data or 1,
        limit=form.limit.data or 10,
        search=params.get('search') or None,
        status=form.status.data or 'active',
        category=params.get('category') or None,
        bookmarked=form.bookmarked.data == 'true',
        sort_by=params.get('sortBy') or 'lastActivity',
        sort_order=form.sortOrder.data or 'desc'
    )
    return {'conversations': found, 'pagination': pagination}, \
        status.HTTP_200_OK, {}


def get_conversation(principal: domain.Principal,
                     conversation_id: int) -> Response:
    try:
        conversation = conversations.get_conversation(conversation_id,
                                                      principal.user_id)
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    return {'conversation': conversation}, status.HTTP_200_OK, {}


def create_conversation(principal: domain.Principal, payload: Any) -> Response:
    """Start a conversation, optionally linked to one of the user's cases."""
    form = validated(ConversationForm, payload)
    case_id = form.caseId.data or None
    if case_id and cases.get_owned_case(case_id, principal.user_id) is None:
        raise errors.BadRequest('Case not found or access denied',
                                'INVALID_CASE')
    conversation = conversations.create_conversation(principal.user_id,
                                                     payload, case_id=case_id)
    return {
        'message': 'Conversation created successfully',
        'conversation': conversation
    }, status.HTTP_201_CREATED, {}


def update_conversation(principal: domain.Principal, conversation_id: int,
                        payload: Any) -> Response:
    validated(ConversationUpdateForm, payload)
    try:
        conversation = conversations.update_conversation(
            conversation_id, principal.user_id, payload)
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    return {
        'message': 'Conversation updated successfully',
        'conversation': conversation
    }, status.HTTP_200_OK, {}


def delete_conversation(principal: domain.Principal,
                        conversation_id: int) -> Response:
    try:
        conversations.delete_conversation(conversation_id, principal.user_id)
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    return {'message': 'Conversation deleted successfully'}, \
        status.HTTP_200_OK, {}


def toggle_bookmark(principal: domain.Principal,
                    conversation_id: int) -> Response:
    try:
        bookmarked = conversations.toggle_bookmark(conversation_id,
                                                   principal.user_id)
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    verb = 'bookmarked' if bookmarked else 'unbookmarked'
    return {
        'message': f'Conversation {verb} successfully',
        'isBookmarked': bookmarked
    }, status.HTTP_200_OK, {}


def archive(principal: domain.Principal, conversation_id: int) -> Response:
    try:
        conversations.archive(conversation_id, principal.user_id)
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    return {'message': 'Conversation archived successfully'}, \
        status.HTTP_200_OK, {}


def send_message(principal: domain.Principal, conversation_id: int,
                 payload: Any) -> Response:
    """
    Add a user message and the assistant's reply.

    Returns
    -------
    dict
        The conversation and the new messages. If the assistant failed,
        only the user message and an ``aiError``.
    int
        201 in either case.
    dict
        Headers to add to the response.

    """
    form = validated(MessageForm, payload)
    try:
        user_message = conversations.add_message(
            conversation_id, principal.user_id, 'user',
            form.content.data.strip())
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e

    conversation = conversations.get_conversation(conversation_id,
                                                  principal.user_id)
    try:
        reply = assistant.generate(conversation['messages'],
                                   conversation['settings'])
    except assistant.AssistantUnavailable as e:
        logger.error('Assistant failed for conversation %s: %s',
                     conversation_id, e)
        return {
            'message': 'Message sent, but AI response failed',
            'conversation': conversation,
            'newMessages': [user_message],
            'aiError': AI_UNAVAILABLE
        }, status.HTTP_201_CREATED, {}

    assistant_message = conversations.add_message(
        conversation_id, principal.user_id, 'assistant', reply.content,
        metadata=reply.metadata)
    return {
        'message': 'Message sent successfully',
        'conversation': conversations.get_conversation(conversation_id,
                                                       principal.user_id),
        'newMessages': [user_message, assistant_message]
    }, status.HTTP_201_CREATED, {}


def edit_message(principal: domain.Principal, conversation_id: int,
                 message_id: str, payload: Any) -> Response:
    form = validated(MessageForm, payload)
    try:
        message = conversations.edit_message(conversation_id,
                                             principal.user_id, message_id,
                                             form.content.data.strip())
    except conversations.NoSuchConversation as e:
        raise conversation_not_found() from e
    except conversations.NoSuchMessage as e:
        raise errors.NotFound('Message not found', 'MESSAGE_NOT_FOUND') from e
    except conversations.NotEditable as e:
        raise errors.BadRequest('Only user messages can be edited',
                                'INVALID_MESSAGE_TYPE') from e
    return {
        'message': 'Message updated successfully',
        'updatedMessage': message
    }, status.HTTP_200_OK, {}


def search(principal: domain.Principal, params: Any) -> Response:
    form = validated(TextSearchForm, params)
    found, pagination = conversations.search(principal.user_id, form.q.data,
                                             page=form.page.data or 1,
                                             limit=form.limit.data or 10)
    return {
        'conversations': found,
        'pagination': pagination,
        'searchQuery': form.q.data
    }, status.HTTP_200_OK, {}


def statistics(principal: domain.Principal) -> Response:
    return conversations.statistics(principal.user_id), status.HTTP_200_OK, {}
