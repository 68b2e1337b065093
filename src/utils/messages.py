from typing import Any, Dict, List

from textual.message import Message

from utils.view_sync import ViewModel


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class AdminLoginRequestedMessage(Message):
    """
    Posted by the customer screen when the admin button is pressed.
    The app prompts for the PIN.
    """

    bubble = True


class AdminLogoutMessage(Message):
    """
    Posted by the admin screen; the app drops back to the customer view.
    """

    bubble = True


class SnapshotMessage(Message):
    """
    A subscription delivered a full snapshot of one collection.
    Posted to the app, which swaps the collection in its state.
    """

    bubble = True

    def __init__(self, collection: str, records: List[Dict[str, Any]]) -> None:
        super().__init__()
        self.collection = collection
        self.records = records


class ViewChangedMessage(Message):
    """
    Carries the freshly built view model.
    Must be posted to the screen itself; messages do not travel down from the app.
    """

    bubble = False

    def __init__(self, view: ViewModel) -> None:
        super().__init__()
        self.view = view
