"""internship-intake-api - internship application intake powered by Robyn."""

from robyn import Robyn

from app.api.applications import router as applications_router
from app.api.health import router as health_router
from app.core.lifespan import create_lifespan
from app.core.logger import logger
from app.core.settings import settings as st
from app.events.intake import IntakeEvent, StoresEvent, WriterEvent
from app.middlewares.base import MiddlewareHandler
from app.middlewares.cors import CorsMiddleware
from app.middlewares.files import FormOpenAPIMiddleware

app = Robyn(__file__)

# Lifespan events, in dependency order
lifespan = create_lifespan(app)
lifespan.register(StoresEvent).register(WriterEvent).register(IntakeEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(applications_router)

# Middlewares
middlewares = MiddlewareHandler(app)
middlewares.register(CorsMiddleware()).register(FormOpenAPIMiddleware())


def main() -> None:
    logger.info("🚀 STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
