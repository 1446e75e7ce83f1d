from vocalhire.schemas.calls import ProviderCall
from vocalhire.services.caller_names import (
    DEFAULT_CALLER_NAME,
    extract_caller_name,
    name_from_answer,
    name_from_introduction,
)


def make_call(transcript):
    return ProviderCall.model_validate({"call_id": "c1", "transcript": transcript})


def test_answer_after_name_question():
    call = make_call([
        {"role": "agent", "content": "Hi there! What's your name?"},
        {"role": "user", "content": "My name is Ada Lovelace Byron"},
    ])
    assert name_from_answer(call) == "Ada Lovelace"


def test_answer_strips_introduction_variants():
    for answer in ("I'm Grace Hopper.", "I am Grace Hopper", "this is Grace Hopper"):
        call = make_call([
            {"role": "agent", "content": "Before we start, what is your name?"},
            {"role": "user", "content": answer},
        ])
        assert name_from_answer(call) == "Grace Hopper"


def test_answer_requires_user_reply_after_question():
    call = make_call([
        {"role": "agent", "content": "What's your name?"},
        {"role": "agent", "content": "Are you still there?"},
    ])
    assert name_from_answer(call) is None


def test_introduction_in_free_text():
    call = make_call("Agent: Hello, thanks for calling.\nUser: Hi, this is Alan Turing, calling about the role.")
    assert name_from_introduction(call) == "Alan Turing"


def test_introduction_ignores_agent_turns_when_structured():
    call = make_call([
        {"role": "agent", "content": "Hello, this is Shimmer from VocalHire."},
        {"role": "user", "content": "Hello! My name is Katherine Johnson."},
    ])
    assert name_from_introduction(call) == "Katherine Johnson"


def test_fallback_placeholder():
    call = make_call([{"role": "user", "content": "Hello?"}])
    assert extract_caller_name(call) == DEFAULT_CALLER_NAME
    assert extract_caller_name(make_call(None)) == DEFAULT_CALLER_NAME


def test_strategies_are_swappable():
    call = make_call([{"role": "user", "content": "anything"}])
    assert extract_caller_name(call, strategies=(lambda c: "Fixed Name",)) == "Fixed Name"
