from context.conversation_context import ConversationContextBuilder
from context.conversation_store import title_from_query
from models.source import SourceType


def test_empty_history_renders_empty_context_block(store):
    conversation = store.create_conversation("t")
    builder = ConversationContextBuilder(store)

    prompt = builder.build(conversation.id, "Who ran Project Stargate?")

    assert prompt.startswith("Previous conversation:\n\n\nCurrent question: Who ran Project Stargate?\n\n")
    assert "Remember our conversation history" in prompt


def test_history_is_rendered_in_order(store):
    conversation = store.create_conversation("t")
    store.add_message(conversation.id, "user", "Tell me about Paperclip")
    store.add_message(conversation.id, "assistant", "Paperclip recruited scientists.")

    prompt = ConversationContextBuilder(store).build(conversation.id, "Who was involved?")

    assert (
        "Previous conversation:\n"
        "User: Tell me about Paperclip\n\n"
        "Assistant: Paperclip recruited scientists.\n\n"
        "Current question: Who was involved?"
    ) in prompt


def test_only_last_k_messages_are_kept(store):
    conversation = store.create_conversation("t")
    for i in range(6):
        store.add_message(conversation.id, "user" if i % 2 == 0 else "assistant", f"m{i}")

    context = ConversationContextBuilder(store, max_messages=2).render_history(conversation.id)

    assert context == "User: m4\n\nAssistant: m5"


def test_unknown_conversation_never_fails(store):
    assert ConversationContextBuilder(store).render_history("missing") == ""

    class BrokenStore:
        def get_messages(self, conversation_id):
            raise RuntimeError("db down")

    assert ConversationContextBuilder(BrokenStore()).render_history("x") == ""


def test_store_lists_conversations_and_history(store):
    first = store.create_conversation("first")
    second = store.create_conversation("second")
    store.add_message(first.id, "user", "bump")

    assert [c.id for c in store.list_conversations()][0] == first.id
    assert store.delete_conversation(second.id) is True
    assert store.delete_conversation(second.id) is False
    assert store.get_messages(second.id) == []

    for q in ("a", "b", "c"):
        store.add_search_history(q, 1)
    assert len(store.get_search_history(limit=2)) == 2


def test_title_from_query_truncates_long_questions():
    assert title_from_query("short") == "short"
    long_query = "x" * 60
    assert title_from_query(long_query) == "x" * 50 + "..."


def test_bookmarks_are_newest_first_and_typed_from_url(store):
    first = store.create_bookmark("Venona decrypts", "https://www.nsa.gov/venona")
    second = store.create_bookmark("Paperclip file", "https://vault.fbi.gov/paperclip", source_type="fbi", pages="47")

    assert first.source_type == SourceType.NSA
    assert second.to_dict()["sourceType"] == "fbi"
    assert [b.id for b in store.get_bookmarks()] == [second.id, first.id]

    assert store.delete_bookmark(first.id) is True
    assert store.delete_bookmark(first.id) is False
    assert [b.id for b in store.get_bookmarks()] == [second.id]
