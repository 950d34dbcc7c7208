from typing import Awaitable, TypeVar
from loguru import logger
from bookreview.Helper.Exceptions import CatalogError, DuplicateReview

T = TypeVar("T")

class CommonHelper:
    @staticmethod
    def apply(dto, values: dict):
        for field, value in values.items():
            if not field.startswith("_"):
                setattr(dto, field, value)
        return dto

    @staticmethod
    async def notify_on_failure(failure_message: str, action: Awaitable[T]) -> T:
        """Run a mutation, rewording any rejection to ``failure_message``.

        Status and kind of the error are kept. A duplicate review keeps its
        own message because the user can do something about it.
        """
        try:
            return await action
        except DuplicateReview:
            raise
        except CatalogError as e:
            logger.warning(f"{failure_message}: {e.kind}: {e.message}")
            raise e.with_message(failure_message) from e
