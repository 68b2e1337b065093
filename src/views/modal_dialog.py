from typing import Dict, Literal, Optional, Tuple

from typing_extensions import override

from textual import events
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from utils.messages import QuitRequestedMessage


class DialogModal(ModalScreen[bool]):
    """
    A simple dialog box, with a title, a caption and one or two buttons.
    Returns True for the primary button, False for the secondary one.
    """

    VARIANT_MAP: Dict[
        str, Tuple[Literal["primary", "default", "success", "warning", "error"]]
    ] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Literal["default", "positive", "warning", "error"] = "default",
        title: str = "Message",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone
        self.dialog_title = title

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.dialog_title, id="dialog-title")
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text,
                        variant=DialogModal.VARIANT_MAP[self.tone][1],
                        id="btn-secondary",
                    )
                yield Button(
                    self.primary_text,
                    variant=DialogModal.VARIANT_MAP[self.tone][0],
                    id="btn-primary",
                )

    def on_mount(self):
        # set focus
        if not self.secondary_text or not self.tone == "error":
            self.query_one("#btn-primary").focus()
        else:
            self.query_one("#btn-secondary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(True)
        if event.button.id == "btn-secondary":
            self.dismiss(False)


class SimpleDialogModal(DialogModal):
    def __init__(self, caption: str, title: str = "Message"):
        super().__init__(caption, title=title)


class ErrorDialogModal(DialogModal):
    def __init__(self, caption: str, title: str = "Error"):
        super().__init__(caption, tone="error", title=title)


class ConfirmDialogModal(DialogModal):
    def __init__(self, caption: str, title: str = "Please Confirm"):
        super().__init__(caption, "Yes", "No", "warning", title=title)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class PinPromptModal(ModalScreen[Optional[str]]):
    """
    Asks for the admin PIN. Returns the entered text, or None when cancelled.
    """

    def __init__(self, caption: str = "Enter your PIN to open the admin panel:"):
        super().__init__()
        self.caption = caption

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label("Admin Login", id="dialog-title")
            yield Label(self.caption, id="caption")
            yield Input(placeholder="****", password=True, id="input-pin")
            with Horizontal(id="dialog"):
                yield Button("Cancel", id="btn-secondary")
                yield Button("OK", variant="primary", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-pin", Input).focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(self.query_one("#input-pin", Input).value)
        if event.button.id == "btn-secondary":
            self.dismiss(None)
