"""Unit tests for individual widget classes."""

from __future__ import annotations

import unittest

from selecty.models import ImageRef, Message, Provider, Sender

try:
    from textual.app import App, ComposeResult
    from textual.widgets import Button, Input, Static

    from selecty.widgets.attachment_panel import AttachmentPanel
    from selecty.widgets.conversation import ConversationView
    from selecty.widgets.input_box import InputBox
    from selecty.widgets.message import MessageBubble, describe_image
    from selecty.widgets.provider_card import ProviderCard
except ModuleNotFoundError:
    App = None  # type: ignore[assignment,misc]
    AttachmentPanel = None  # type: ignore[assignment,misc]
    ConversationView = None  # type: ignore[assignment,misc]
    InputBox = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]
    ProviderCard = None  # type: ignore[assignment,misc]
    describe_image = None  # type: ignore[assignment]

IMAGE = ImageRef(
    data_uri="data:image/jpeg;base64,AAAA",
    mime_type="image/jpeg",
    width=640,
    height=480,
    origin="camera",
)
HANAKO = Provider(id=1, name="山田花子", is_online=True, introduction="[intro]", rating=4.8)


@unittest.skipIf(MessageBubble is None, "textual is not installed")
class MessageBubbleTests(unittest.TestCase):
    """Validate MessageBubble labelling."""

    def test_user_role_class_and_prefix(self) -> None:
        bubble = MessageBubble(Message(text="hi", sender=Sender.USER))
        self.assertIn("role-user", bubble.classes)
        self.assertEqual(bubble.role_prefix, "You")

    def test_provider_prefix_uses_provider_name(self) -> None:
        bubble = MessageBubble(
            Message(text="hello", sender=Sender.PROVIDER), provider_name="山田花子"
        )
        self.assertIn("role-provider", bubble.classes)
        self.assertEqual(bubble.role_prefix, "山田花子")

    def test_provider_prefix_falls_back(self) -> None:
        bubble = MessageBubble(Message(text="hello", sender=Sender.PROVIDER))
        self.assertEqual(bubble.role_prefix, "Stylist")

    def test_describe_image(self) -> None:
        self.assertEqual(describe_image(Message(text="x", sender=Sender.USER)), "")
        line = describe_image(Message(text="", sender=Sender.USER, image=IMAGE))
        self.assertIn("640x480", line)
        self.assertIn("camera", line)


@unittest.skipIf(ConversationView is None, "textual is not installed")
class ConversationViewTests(unittest.IsolatedAsyncioTestCase):
    """Validate ConversationView message mounting behavior."""

    async def test_add_message_mounts_bubbles_in_order(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ConversationView(id="conv")

        app = _TestApp()
        async with app.run_test() as pilot:
            conv = app.query_one("#conv", ConversationView)
            first = conv.add_message(Message(text="a", sender=Sender.USER))
            conv.add_message(
                Message(text="", sender=Sender.USER, image=IMAGE), show_timestamp=False
            )
            conv.add_message(Message(text="b", sender=Sender.PROVIDER), provider_name="山田花子")
            await pilot.pause()

            bubbles = list(conv.query(MessageBubble))
            self.assertEqual(len(bubbles), 3)
            self.assertIs(bubbles[0], first)
            self.assertIn("message-user", first.classes)
            self.assertIn("message-provider", bubbles[2].classes)
            self.assertEqual(len(bubbles[1].query("#image-block")), 1)
            self.assertEqual(len(bubbles[1].query("#content-block")), 0)


@unittest.skipIf(InputBox is None, "textual is not installed")
class InputBoxTests(unittest.IsolatedAsyncioTestCase):
    """Validate InputBox composition and send affordance."""

    async def test_send_button_follows_can_send(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield InputBox(id="ib")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            box = app.query_one("#ib", InputBox)
            button = app.query_one("#send_button", Button)
            self.assertTrue(button.disabled)
            box.set_can_send(True)
            self.assertFalse(button.disabled)

            field = app.query_one("#message_input", Input)
            field.value = "draft"
            box.clear()
            self.assertEqual(field.value, "")


@unittest.skipIf(AttachmentPanel is None, "textual is not installed")
class AttachmentPanelTests(unittest.IsolatedAsyncioTestCase):
    """Validate camera and staged-image status rendering."""

    async def test_capture_enabled_only_while_live(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield AttachmentPanel(id="panel")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            panel = app.query_one("#panel", AttachmentPanel)
            capture = app.query_one("#capture_button", Button)
            self.assertTrue(capture.disabled)

            panel.set_camera_live(True)
            self.assertFalse(capture.disabled)
            self.assertTrue(app.query_one("#camera_button", Button).disabled)

            panel.set_camera_live(False)
            self.assertTrue(capture.disabled)

    async def test_staged_status_and_discard(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield AttachmentPanel(id="panel")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            panel = app.query_one("#panel", AttachmentPanel)
            discard = app.query_one("#discard_button", Button)
            panel.set_staged(IMAGE)
            self.assertFalse(discard.disabled)
            panel.set_staged(None)
            self.assertTrue(discard.disabled)
            self.assertIsNotNone(app.query_one("#staged_status", Static))


@unittest.skipIf(ProviderCard is None, "textual is not installed")
class ProviderCardTests(unittest.IsolatedAsyncioTestCase):
    """Validate card buttons post consult and booking requests."""

    async def test_buttons_post_requests(self) -> None:
        received: list[tuple[str, Provider]] = []

        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ProviderCard(HANAKO, id="card")

            def on_provider_card_consult_requested(
                self, event: ProviderCard.ConsultRequested
            ) -> None:
                received.append(("consult", event.provider))

            def on_provider_card_book_requested(self, event: ProviderCard.BookRequested) -> None:
                received.append(("book", event.provider))

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            card = app.query_one("#card", ProviderCard)
            self.assertIn("online", card.classes)
            app.query_one("#consult-1", Button).press()
            await pilot.pause()
            app.query_one("#book-1", Button).press()
            await pilot.pause()

        self.assertEqual(received, [("consult", HANAKO), ("book", HANAKO)])


if __name__ == "__main__":
    unittest.main()
