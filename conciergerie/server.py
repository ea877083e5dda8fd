import logging
import threading
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import Any, Callable, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conciergerie.api import houses, orders, tasks
from conciergerie.calendars.fetch_calendars import fetch_calendar
from conciergerie.config.settings import Settings, load_config
from conciergerie.errors import ConciergerieError, StorageError, SyncError
from conciergerie.logging_setup import setup_logging
from conciergerie.models import AssignEmployee, DeleteHouse, SaveOrder, SetStatus
from conciergerie.store.documents import DocumentStore
from conciergerie.store.tenants import resolve_tenant_path
from conciergerie.sync import sync_client

logger = logging.getLogger(__name__)

# Seconds shutdown waits for a still-running startup sync
STARTUP_SYNC_JOIN_TIMEOUT = 5


@contextmanager
def route_errors(message: str):
    """
    Client errors (4xx) pass through; anything else becomes a 500 with
    the route's public message.
    """
    try:
        yield
    except ConciergerieError as e:
        if e.status_code < 500:
            raise
        logger.error("%s: %s", message, e)
        raise StorageError(message) from e
    except Exception as e:
        logger.exception(message)
        raise StorageError(message) from e


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_tenant_path(request: Request, x_client_id: Optional[str] = Header(default=None)) -> Path:
    return resolve_tenant_path(request.app.state.settings.data_root, x_client_id)


def _sync_in_background(client_ids, settings: Settings, store: DocumentStore, fetch: Callable):
    for client_id in client_ids:
        try:
            sync_client(client_id, settings=settings, store=store, fetch=fetch)
        except ConciergerieError as e:
            logger.error("Startup sync failed for %s: %s", client_id, e)
    logger.info("Startup sync finished for %s", ", ".join(client_ids))


def create_app(settings: Settings | None = None, fetch: Callable = fetch_calendar) -> FastAPI:
    settings = settings or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.startup_sync = None
        if settings.sync_on_startup:
            app.state.startup_sync = threading.Thread(
                target=_sync_in_background,
                args=(settings.sync_on_startup, settings, app.state.store, fetch),
                name="startup-sync",
                daemon=True,
            )
            app.state.startup_sync.start()
        yield
        thread = app.state.startup_sync
        if thread is not None:
            thread.join(timeout=STARTUP_SYNC_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Startup sync still running at shutdown")

    app = FastAPI(title="Conciergerie backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = DocumentStore()
    app.state.fetch = fetch

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        # Credentials only for an explicit origin list, never with the "*" wildcard
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"], allow_headers=["*"],
    )

    @app.exception_handler(ConciergerieError)
    async def conciergerie_error_handler(request: Request, exc: ConciergerieError):
        body = {"error": exc.message}
        if isinstance(exc, SyncError):
            body["details"] = exc.details
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse({"error": "Requête invalide"}, status_code=422)

    # ---------- Tasks ----------

    @app.get("/api/taches")
    def get_tasks(tenant: Path = Depends(get_tenant_path), store: DocumentStore = Depends(get_store)):
        with route_errors("Erreur chargement tâches"):
            return tasks.list_tasks(store, tenant)

    @app.post("/api/taches", status_code=201)
    def post_task(
        task: Any = Body(default=None),
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        with route_errors("Erreur ajout tâche"):
            tasks.add_task(store, tenant, {} if task is None else task)
        return {"success": True}

    @app.post("/api/assigner-employe")
    def assign_employee(
        body: Optional[AssignEmployee] = None,
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        body = body or AssignEmployee()
        with route_errors("Erreur assignation"):
            tasks.assign_employee(store, tenant, body.id, body.employe)
        return {"success": True}

    @app.post("/api/assigner-couleur")
    def assign_colour(
        body: Optional[SetStatus] = None,
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        body = body or SetStatus()
        with route_errors("Erreur de mise à jour de l'état"):
            tasks.set_status(store, tenant, body.id, body.etat)
        return {"success": True}

    @app.get("/api/planning/{date}")
    def planning(date: str, tenant: Path = Depends(get_tenant_path), store: DocumentStore = Depends(get_store)):
        with route_errors("Erreur chargement planning"):
            return tasks.tasks_for_date(store, tenant, date)

    # ---------- Task order ----------

    @app.get("/api/ordre-taches")
    def get_task_order(
        date: Optional[str] = None,
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        with route_errors("Erreur ordre des tâches"):
            if date is None:
                return {}
            return orders.get_order(store, tenant, date)

    @app.post("/api/sauver-ordre-taches")
    def save_task_order(
        body: Optional[SaveOrder] = None,
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        body = body or SaveOrder()
        with route_errors("Erreur sauvegarde ordre"):
            orders.save_order(store, tenant, body.date, body.employe, body.ordre)
        return {"success": True}

    # ---------- Houses ----------

    @app.get("/api/maisons")
    def get_houses(tenant: Path = Depends(get_tenant_path), store: DocumentStore = Depends(get_store)):
        with route_errors("Erreur chargement maisons"):
            return houses.list_houses(store, tenant)

    @app.post("/api/supprimer-maison")
    def delete_house(
        body: Optional[DeleteHouse] = None,
        tenant: Path = Depends(get_tenant_path),
        store: DocumentStore = Depends(get_store),
    ):
        body = body or DeleteHouse()
        with route_errors("Erreur suppression maison"):
            houses.delete_house(store, tenant, body.nom)
        return {"success": True}

    # ---------- Calendar sync ----------

    @app.post("/api/sync")
    def sync(request: Request, tenant: Path = Depends(get_tenant_path), store: DocumentStore = Depends(get_store)):
        client_id = tenant.name
        try:
            result = sync_client(client_id, settings=settings, store=store, fetch=request.app.state.fetch)
        except Exception as e:
            logger.exception("Sync failed for %s", client_id)
            raise SyncError(details=str(e)) from e

        # Reported as success whenever the pipeline ran, even with no tasks
        return {
            "success": True,
            "message": f"Synchronisation lancée pour {client_id}",
            **result.to_dict(),
        }

    return app


def main():
    settings = load_config()
    setup_logging(settings.log_level, settings.log_dir)
    logger.info("Backend server starting on port %s", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
