from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.events import Resize, ScreenResume
from textual.screen import Screen
from textual.widgets import Footer, Header

from utils.errors import RemoteOperationError, ShopError, ValidationError
from utils.logger import get_logger
from utils.messages import ViewChangedMessage
from utils.view_sync import ViewModel
from views.modal_dialog import ErrorDialogModal, QuitDialogModal
from views.modal_resize import ResizeScreenPromptModal

_logger = get_logger(__name__)


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, and keybindings.

    Subclasses implement render_view(); it receives the whole view model every
    time the app state changes and rebuilds the screen from it.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    MIN_WIDTH = 100
    MIN_HEIGHT = 30

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(self, header_sub_title: str = "Shop") -> None:
        """
        configure behavior of the base screen
        :return:
        """
        self.app.title = "Fashion Chips"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v) and k in self.app.MODE_TITLES:
                self.sub_title = self.app.MODE_TITLES[k]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer(show_command_palette=False)

    async def on_resize(self, event: Resize) -> None:
        if event.size.width < self.MIN_WIDTH or event.size.height < self.MIN_HEIGHT:
            if not isinstance(self.app.screen, ResizeScreenPromptModal):
                self.app.push_screen(
                    ResizeScreenPromptModal(self.MIN_WIDTH, self.MIN_HEIGHT)
                )

    @on(ViewChangedMessage)
    def handle_view_changed(self, message: ViewChangedMessage) -> None:
        self.render_view(message.view)

    @on(ScreenResume)
    def handle_resume(self) -> None:
        self.render_view(self.app.view)

    def render_view(self, view: ViewModel) -> None:
        raise NotImplementedError

    async def report_error(self, error: ShopError, failure_text: str) -> None:
        """
        Validation problems are shown as they are; remote failures were logged
        by the gateway and get a generic message.
        """
        if isinstance(error, ValidationError):
            await self.app.push_screen_wait(ErrorDialogModal(str(error), "Required"))
        elif isinstance(error, RemoteOperationError):
            await self.app.push_screen_wait(ErrorDialogModal(failure_text))
        else:
            _logger.error(f"Unexpected error: {error}")
            await self.app.push_screen_wait(ErrorDialogModal(failure_text))

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
