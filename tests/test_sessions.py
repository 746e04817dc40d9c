import asyncio
import threading

import pytest

from symptra.errors import InvalidArgument, NotFound
from symptra.orchestrator import TurnOrchestrator
from symptra.sessions import derive_title, seed_title


def test_seed_title_truncates_to_fifty_chars():
    assert seed_title("short") == "short"
    long_text = "x" * 80
    assert seed_title(long_text) == "x" * 50 + "..."
    assert seed_title("y" * 50) == "y" * 50


@pytest.mark.parametrize(
    "message, expected",
    [
        ("symptoms: Fever, Headache, cough", "Fever, Headache, Cough"),
        ("Symptom: sore THROAT; runny nose", "Sore throat, Runny nose"),
        ("SYMPTOMS: a, b, c, d, e, f", "A, B, C, D"),
        ("I have had a headache since yesterday morning", "I have had a headache since yesterday morning"),
        ("n" * 100, "n" * 60),
    ],
)
def test_derive_title(message, expected):
    assert derive_title(message) == expected


def test_derive_title_prefix_without_terms_falls_back():
    assert derive_title("symptoms: ,,;") == "symptoms: ,,;"


async def test_resolve_or_create(manager):
    created = await manager.resolve_or_create(None, seed_text="fever and chills")
    assert created.title == "fever and chills"

    resolved = await manager.resolve_or_create(created.id, seed_text="ignored")
    assert resolved.id == created.id

    fresh = await manager.resolve_or_create("no-such-session", seed_text="cough")
    assert fresh.id != created.id


async def test_append_ordering(manager):
    session = await manager.resolve_or_create(None, "seed")
    contents = [f"message {i}" for i in range(10)]
    for i, content in enumerate(contents):
        await manager.append_message(session.id, "user" if i % 2 == 0 else "assistant", content)

    messages = await manager.list_messages(session.id)
    assert [m.content for m in messages] == contents
    assert [m.position for m in messages] == list(range(10))
    stamps = [m.created_at for m in messages]
    assert stamps == sorted(stamps)


async def test_append_refreshes_updated_at(manager):
    session = await manager.resolve_or_create(None, "seed")
    message = await manager.append_message(session.id, "user", "hello")
    refreshed, _ = await manager.get(session.id)
    assert refreshed.updated_at >= message.created_at
    assert refreshed.updated_at >= session.updated_at


async def test_concurrent_appends_keep_distinct_positions(manager):
    session = await manager.resolve_or_create(None, "seed")
    await asyncio.gather(*(manager.append_message(session.id, "user", f"m{i}") for i in range(20)))
    messages = await manager.list_messages(session.id)
    assert sorted(m.position for m in messages) == list(range(20))
    assert {m.content for m in messages} == {f"m{i}" for i in range(20)}


async def test_unknown_session_operations_raise_not_found(manager):
    with pytest.raises(NotFound):
        await manager.append_message("missing", "user", "hi")
    with pytest.raises(NotFound):
        await manager.list_messages("missing")
    with pytest.raises(NotFound):
        await manager.get("missing")
    with pytest.raises(NotFound):
        await manager.rename("missing", "title")
    with pytest.raises(NotFound):
        await manager.delete("missing")


async def test_delete_removes_session_and_messages(manager):
    session = await manager.resolve_or_create(None, "seed")
    await manager.append_message(session.id, "user", "fever")
    await manager.append_message(session.id, "assistant", "reply")

    await manager.delete(session.id)

    with pytest.raises(NotFound):
        await manager.list_messages(session.id)
    with pytest.raises(NotFound):
        await manager.delete(session.id)
    assert await manager.list_all() == []


async def test_rename(manager):
    session = await manager.resolve_or_create(None, "seed")
    renamed = await manager.rename(session.id, "  My cold  ")
    assert renamed.title == "My cold"
    with pytest.raises(InvalidArgument):
        await manager.rename(session.id, "   ")


async def test_retitle_after_first_turn(manager):
    session = await manager.resolve_or_create(None, "symptoms: Fever, Headache, cough")
    await manager.append_message(session.id, "user", "symptoms: Fever, Headache, cough")
    assert await manager.maybe_retitle(session.id) is None

    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) == "Fever, Headache, Cough"
    current, _ = await manager.get(session.id)
    assert current.title == "Fever, Headache, Cough"
    assert current.title_derived


async def test_retitle_fires_once(manager):
    session = await manager.resolve_or_create(None, "symptoms: rash")
    await manager.append_message(session.id, "user", "symptoms: rash")
    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) == "Rash"

    await manager.rename(session.id, "Skin problem")
    await manager.append_message(session.id, "user", "symptoms: itching")
    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) is None
    current, _ = await manager.get(session.id)
    assert current.title == "Skin problem"


async def test_retitle_tolerates_retried_user_message(manager):
    session = await manager.resolve_or_create(None, "symptoms: nausea, vomiting")
    await manager.append_message(session.id, "user", "symptoms: nausea, vomiting")
    await manager.append_message(session.id, "user", "symptoms: nausea, vomiting")
    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) == "Nausea, Vomiting"


async def test_rename_before_first_turn_is_kept(manager):
    session = await manager.resolve_or_create(None, "symptoms: cough")
    await manager.append_message(session.id, "user", "symptoms: cough")
    await manager.rename(session.id, "Chosen title")
    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) is None


async def test_list_all_orders_by_updated_at(manager):
    first = await manager.resolve_or_create(None, "first")
    second = await manager.resolve_or_create(None, "second")
    await manager.append_message(first.id, "user", "latest activity")

    ids = [s.id for s in await manager.list_all()]
    assert ids == [first.id, second.id]


async def test_summaries_and_delete_all(manager):
    session = await manager.resolve_or_create(None, "seed")
    await manager.append_message(session.id, "user", "first question")
    await manager.append_message(session.id, "assistant", "answer")
    await manager.append_message(session.id, "user", "second question")
    await manager.resolve_or_create(None, "empty")

    summaries = {s.id: (count, last) for s, count, last in await manager.list_summaries()}
    count, last = summaries[session.id]
    assert count == 3
    assert last.content == "second question"

    assert await manager.delete_all() == 2
    assert await manager.list_all() == []


def test_derive_title_ignores_symptoms_mid_sentence():
    assert derive_title("My symptoms: fever, cough") == "My symptoms: fever, cough"


async def test_concurrent_first_turns_still_retitle(manager):
    barrier = threading.Barrier(2, timeout=5)

    def paired_completion(instructions, history, latest_user_text):
        barrier.wait()
        return "reply"

    session = await manager.resolve_or_create(None, "seed")
    orchestrator = TurnOrchestrator(manager, paired_completion)
    await asyncio.gather(
        orchestrator.handle_turn(session.id, "symptoms: fever, cough"),
        orchestrator.handle_turn(session.id, "symptoms: rash"),
    )

    current, messages = await manager.get(session.id)
    assert sorted(m.role for m in messages) == ["assistant", "assistant", "user", "user"]
    assert current.title in {"Fever, Cough", "Rash"}
    assert current.title_derived

    # later turns keep the derived title
    await manager.append_message(session.id, "user", "symptoms: headache")
    await manager.append_message(session.id, "assistant", "reply")
    assert await manager.maybe_retitle(session.id) is None
