"""Tests for tempora.services.chat_service: the OpenAI tool loop, with a mocked client."""

import json

import pytest

from tempora.config import OpenAISettings
from tempora.models import Event
from tempora.schemas.chat import ChatMessage
from tempora.services.chat_service import (
    FALLBACK_REPLY,
    SYSTEM_PROMPT,
    AssistantUnavailableError,
    ChatService,
    create_openai_client,
    normalize_content,
)

SETTINGS = OpenAISettings(
    api_key="sk-test", model="gpt-5-mini", max_completion_tokens=800, reasoning_effort="low"
)


def user_says(text):
    return [ChatMessage(role="user", content=text)]


class TestReply:
    def test_plain_answer_without_tools(self, db, make_user, fake_openai):
        service = ChatService(db, fake_openai, settings=SETTINGS, max_tool_iterations=3)
        reply = service.reply(make_user(), user_says("hi"))

        assert reply == {"role": "assistant", "content": "Done."}
        kwargs = fake_openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-5-mini"
        assert kwargs["max_completion_tokens"] == 800
        assert kwargs["reasoning_effort"] == "low"
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert kwargs["messages"][1] == {"role": "user", "content": "hi"}
        assert len(kwargs["tools"]) == 8

    def test_tool_calls_are_executed_and_fed_back(self, db, make_user, make_schedule, fake_openai, completions):
        user = make_user()
        schedule = make_schedule(user, "Work")
        create_args = {
            "scheduleId": schedule.id,
            "name": "Dentist",
            "timeSlots": [{"start": "2024-12-03T09:00:00Z", "end": "2024-12-03T10:00:00Z"}],
        }
        fake_openai.chat.completions.create.side_effect = [
            completions.completion(
                tool_calls=[
                    completions.tool_call("call_1", "list_user_schedules", {}),
                    completions.tool_call("call_2", "create_calendar_event", create_args),
                ]
            ),
            completions.completion("Booked your dentist appointment."),
        ]

        reply = ChatService(db, fake_openai, settings=SETTINGS).reply(user, user_says("book it"))

        assert reply["content"] == "Booked your dentist appointment."
        assert db.query(Event).count() == 1

        second_call = fake_openai.chat.completions.create.call_args_list[1].kwargs
        messages = second_call["messages"]
        assistant = messages[2]
        assert assistant["role"] == "assistant"
        assert [c["id"] for c in assistant["tool_calls"]] == ["call_1", "call_2"]

        tool_messages = [m for m in messages if m["role"] == "tool"]
        assert [m["tool_call_id"] for m in tool_messages] == ["call_1", "call_2"]
        assert json.loads(tool_messages[0]["content"])[0]["name"] == "Work"
        assert json.loads(tool_messages[1]["content"])["event"]["name"] == "Dentist"

    def test_tool_errors_go_back_to_the_model(self, db, make_user, fake_openai, completions):
        fake_openai.chat.completions.create.side_effect = [
            completions.completion(
                tool_calls=[completions.tool_call("call_1", "delete_calendar_event", {"eventId": 42})]
            ),
            completions.completion("I could not find that event."),
        ]

        reply = ChatService(db, fake_openai, settings=SETTINGS).reply(make_user(), user_says("delete 42"))

        assert reply["content"] == "I could not find that event."
        messages = fake_openai.chat.completions.create.call_args_list[1].kwargs["messages"]
        assert json.loads(messages[-1]["content"]) == {
            "error": "No event with that ID belongs to this user."
        }

    def test_iteration_limit_forces_a_final_answer(self, db, make_user, fake_openai, completions):
        looping = completions.completion(
            tool_calls=[completions.tool_call("call_x", "list_user_schedules", {})]
        )
        fake_openai.chat.completions.create.side_effect = [looping, looping, completions.completion("Stopping here.")]

        reply = ChatService(db, fake_openai, settings=SETTINGS, max_tool_iterations=2).reply(
            make_user(), user_says("loop")
        )

        assert reply["content"] == "Stopping here."
        calls = fake_openai.chat.completions.create.call_args_list
        assert len(calls) == 3
        assert "tools" not in calls[-1].kwargs

    def test_empty_content_falls_back(self, db, make_user, fake_openai, completions):
        fake_openai.chat.completions.create.return_value = completions.completion(None)
        reply = ChatService(db, fake_openai, settings=SETTINGS).reply(make_user(), user_says("?"))
        assert reply["content"] == FALLBACK_REPLY

    def test_optional_parameters_are_omitted(self, db, make_user, fake_openai):
        settings = OpenAISettings(api_key="sk-test", model="gpt-4o-mini", max_completion_tokens=0, reasoning_effort=None)
        ChatService(db, fake_openai, settings=settings).reply(make_user(), user_says("hi"))

        kwargs = fake_openai.chat.completions.create.call_args.kwargs
        assert "reasoning_effort" not in kwargs
        assert "max_completion_tokens" not in kwargs


class TestHelpers:
    def test_normalize_content(self):
        assert normalize_content("hello") == "hello"
        assert normalize_content([{"type": "text", "text": "a"}, {"type": "image"}, "b"]) == "a\nb"
        assert normalize_content(None) == ""

    def test_client_requires_api_key(self):
        with pytest.raises(AssistantUnavailableError):
            create_openai_client(OpenAISettings(api_key=None))
