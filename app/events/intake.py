"""Lifespan events building the process-scoped intake collaborators."""

from app.core.lifespan import BaseEvent
from app.core.settings import settings as st
from app.services.intake import ApplicationIntake
from app.services.stores import Stores, create_stores
from app.services.writer import BackgroundWriter

DRAIN_TIMEOUT = 10.0


class StoresEvent(BaseEvent[Stores]):
    """Creates the document and blob stores."""

    name = "stores"

    async def startup(self) -> Stores:
        return create_stores(st.STORE_BACKEND, root=st.DATA_PATH)


class WriterEvent(BaseEvent[BackgroundWriter]):
    """Owns background persistence tasks and drains them on shutdown."""

    name = "writer"

    async def startup(self) -> BackgroundWriter:
        return BackgroundWriter()

    async def shutdown(self, instance: BackgroundWriter) -> None:
        await instance.drain(timeout=DRAIN_TIMEOUT)


class IntakeEvent(BaseEvent[ApplicationIntake]):
    """Wires stores and writer into the intake service."""

    name = "intake"
    requires = ("stores", "writer")

    async def startup(self) -> ApplicationIntake:
        return ApplicationIntake(
            self.state.stores,
            self.state.writer,
            collection=st.APPLICATIONS_COLLECTION,
            persist_in_background=st.PERSIST_IN_BACKGROUND,
        )
