"""Tests for the append-only message timeline."""

from __future__ import annotations

import unittest

from selecty.exceptions import EmptyMessageError, SessionClosedError
from selecty.models import ImageRef, Sender
from selecty.timeline import MessageTimeline

IMAGE = ImageRef(
    data_uri="data:image/jpeg;base64,AAAA",
    mime_type="image/jpeg",
    width=4,
    height=3,
    origin="camera",
)


class MessageTimelineTests(unittest.TestCase):
    """Validate ordering, validation, and snapshot semantics."""

    def test_mixed_appends_keep_call_order(self) -> None:
        timeline = MessageTimeline()
        calls = [
            ("user", "a"),
            ("provider", "b"),
            ("provider", "c"),
            ("user", "d"),
            ("user", "e"),
            ("provider", "f"),
        ]
        for who, text in calls:
            if who == "user":
                timeline.append_user_message(text)
            else:
                timeline.append_provider_message(text)

        snapshot = timeline.snapshot()
        self.assertEqual([m.text for m in snapshot], [text for _, text in calls])
        self.assertEqual(
            [m.sender for m in snapshot],
            [Sender.USER if who == "user" else Sender.PROVIDER for who, _ in calls],
        )

    def test_append_returns_tail_index(self) -> None:
        timeline = MessageTimeline()
        self.assertEqual(timeline.append_user_message("one"), 0)
        self.assertEqual(timeline.append_provider_message("two"), 1)
        self.assertEqual(len(timeline), 2)

    def test_empty_message_rejected_without_append(self) -> None:
        timeline = MessageTimeline()
        timeline.append_provider_message("hello")
        with self.assertRaises(EmptyMessageError):
            timeline.append_user_message("", None)
        with self.assertRaises(EmptyMessageError):
            timeline.append_user_message("   ")
        self.assertEqual(len(timeline), 1)

    def test_text_and_image_both_recorded(self) -> None:
        timeline = MessageTimeline()
        index = timeline.append_user_message("hi", IMAGE)
        message = timeline.snapshot()[index]
        self.assertEqual(message.text, "hi")
        self.assertIs(message.image, IMAGE)
        self.assertEqual(message.sender, Sender.USER)

    def test_image_only_message_allowed(self) -> None:
        timeline = MessageTimeline()
        timeline.append_user_message("", IMAGE)
        self.assertTrue(timeline.snapshot()[0].has_image)

    def test_snapshot_is_frozen_while_view_is_live(self) -> None:
        timeline = MessageTimeline()
        timeline.append_user_message("first")
        snapshot = timeline.snapshot()
        view = timeline.view()

        timeline.append_provider_message("second")

        self.assertEqual(len(snapshot), 1)
        self.assertEqual([m.text for m in view], ["first", "second"])
        self.assertEqual([m.text for m in view], ["first", "second"])
        self.assertEqual(len(timeline.snapshot()), 2)

    def test_messages_are_immutable(self) -> None:
        timeline = MessageTimeline()
        timeline.append_user_message("hi")
        with self.assertRaises(AttributeError):
            timeline.snapshot()[0].text = "changed"  # type: ignore[misc]

    def test_listeners_receive_index_and_message(self) -> None:
        timeline = MessageTimeline()
        seen: list[tuple[int, str]] = []
        timeline.on_append(lambda index, message: seen.append((index, message.text)))
        timeline.append_user_message("a")
        timeline.append_provider_message("b")
        self.assertEqual(seen, [(0, "a"), (1, "b")])

    def test_discard_clears_and_blocks_appends(self) -> None:
        timeline = MessageTimeline()
        timeline.append_user_message("a")
        timeline.discard()
        self.assertTrue(timeline.discarded)
        self.assertEqual(len(timeline), 0)
        with self.assertRaises(SessionClosedError):
            timeline.append_provider_message("late")


if __name__ == "__main__":
    unittest.main()
