from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel


class NotificationStyle(StrEnum):
    ANIMATED = "animated"
    SUCCESS = "success"
    FAILURE = "failure"


class NotificationAction(BaseModel):
    title: str
    url: str


class BaseSelectionReader(ABC):
    @abstractmethod
    async def read_selection(self) -> str:
        """Return the text the user currently has selected.

        Raises:
            Exception: Any failure means there is no usable selection.
        """


class BaseClipboard(ABC):
    @abstractmethod
    async def read_text(self) -> str: ...

    @abstractmethod
    async def copy(self, text: str) -> None: ...


class BaseNotifier(ABC):
    @abstractmethod
    async def show(
        self, style: NotificationStyle, title: str, message: str | None = None, action: NotificationAction | None = None
    ) -> None: ...


class BaseUrlOpener(ABC):
    @abstractmethod
    async def open(self, url: str) -> None: ...
